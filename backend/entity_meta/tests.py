"""
Tests for entity_meta app.
"""
import json
from django.test import TestCase, override_settings
from cryptography.fernet import Fernet, InvalidToken
from .models import EntityMeta
from .site_settings import (
    CREDENTIALS_META_NAME,
    SITE_REL_TYPE,
    CredentialsNotFound,
    InvalidCredentialsFormat,
    delete_all_site_settings,
    get_installation_credentials,
    store_installation_credentials,
)
from .utils import (
    decrypt_value,
    delete_entity_meta,
    encrypt_value,
    entity_meta_key_exists,
    get_entity_meta,
    get_entity_meta_as_dict,
    update_entity_meta_from_dict,
    upsert_entity_meta,
)


class EntityMetaUtilsTest(TestCase):
    """Test generic meta helpers."""

    def test_upsert_keeps_one_row_per_key(self):
        upsert_entity_meta(7, 'site', 'THEME', 'light')
        upsert_entity_meta(7, 'site', 'THEME', 'dark')

        self.assertEqual(EntityMeta.objects.filter(rel_id=7, rel_type='site', name='THEME').count(), 1)
        self.assertEqual(get_entity_meta(7, 'site', 'THEME'), 'dark')

    def test_keys_are_scoped_by_entity(self):
        upsert_entity_meta(7, 'site', 'THEME', 'dark')
        self.assertTrue(entity_meta_key_exists(7, 'site', 'THEME'))
        self.assertFalse(entity_meta_key_exists(8, 'site', 'THEME'))
        self.assertFalse(entity_meta_key_exists(7, 'client', 'THEME'))
        self.assertIsNone(get_entity_meta(8, 'site', 'THEME'))

    def test_upsert_requires_key_parts(self):
        with self.assertRaises(ValueError):
            upsert_entity_meta(7, 'site', '', 'value')

    def test_dict_helpers(self):
        update_entity_meta_from_dict(7, 'site', {'A': '1', 'B': '2'})
        self.assertEqual(get_entity_meta_as_dict(7, 'site'), {'A': '1', 'B': '2'})

        self.assertTrue(delete_entity_meta(7, 'site', 'A'))
        self.assertFalse(delete_entity_meta(7, 'site', 'A'))
        self.assertEqual(get_entity_meta_as_dict(7, 'site'), {'B': '2'})


class EncryptionTest(TestCase):
    """Test encryption of meta values."""

    def test_encrypted_value_hides_plaintext(self):
        token = encrypt_value('hunter2')
        self.assertNotIn('hunter2', token)
        self.assertEqual(decrypt_value(token), 'hunter2')

    def test_configured_key_is_used(self):
        key = Fernet.generate_key().decode()
        with override_settings(INSTALLDESK_ENCRYPTION_KEY=key):
            token = encrypt_value('hunter2')
        self.assertEqual(Fernet(key.encode()).decrypt(token.encode()), b'hunter2')
        with self.assertRaises(InvalidToken):
            decrypt_value(token)


class InstallationCredentialsTest(TestCase):
    """Test storage of installation admin credentials."""

    credentials = {'domain': 'a.com', 'adminEmail': 'x@a.com', 'adminPassword': 'p'}

    def test_round_trip(self):
        store_installation_credentials(12, self.credentials)
        self.assertEqual(get_installation_credentials(12), self.credentials)

        raw = get_entity_meta(12, SITE_REL_TYPE, CREDENTIALS_META_NAME)
        self.assertNotIn('x@a.com', raw)

    def test_overwrite(self):
        store_installation_credentials(12, self.credentials)
        store_installation_credentials(12, {**self.credentials, 'adminPassword': 'q'})
        self.assertEqual(get_installation_credentials(12)['adminPassword'], 'q')
        self.assertEqual(EntityMeta.objects.filter(rel_id=12).count(), 1)

    def test_missing(self):
        with self.assertRaises(CredentialsNotFound):
            get_installation_credentials(12)

    def test_incomplete_record(self):
        payload = encrypt_value(json.dumps({'domain': 'a.com', 'adminEmail': 'x@a.com'}))
        upsert_entity_meta(12, SITE_REL_TYPE, CREDENTIALS_META_NAME, payload)
        with self.assertRaises(InvalidCredentialsFormat):
            get_installation_credentials(12)

    def test_not_json(self):
        upsert_entity_meta(12, SITE_REL_TYPE, CREDENTIALS_META_NAME, encrypt_value('not json'))
        with self.assertRaises(InvalidCredentialsFormat):
            get_installation_credentials(12)

    def test_delete_all_site_settings(self):
        store_installation_credentials(12, self.credentials)
        upsert_entity_meta(12, SITE_REL_TYPE, 'THEME', 'dark')
        upsert_entity_meta(13, SITE_REL_TYPE, 'THEME', 'dark')

        self.assertEqual(delete_all_site_settings(12), 2)
        self.assertFalse(EntityMeta.objects.filter(rel_id=12).exists())
        self.assertTrue(EntityMeta.objects.filter(rel_id=13).exists())
