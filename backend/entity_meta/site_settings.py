"""
Site scoped settings stored as entity meta, including the admin credentials
captured during installation.
"""
import json
import logging
from typing import Dict
from cryptography.fernet import InvalidToken
from .utils import (
    decrypt_value,
    delete_all_entity_meta,
    encrypt_value,
    get_entity_meta,
    upsert_entity_meta,
)

logger = logging.getLogger(__name__)

SITE_REL_TYPE = 'site'
CREDENTIALS_META_NAME = 'PROJECT_SETUP_ADMIN_CREDENTIALS'
CREDENTIAL_FIELDS = ('domain', 'adminEmail', 'adminPassword')


class CredentialsNotFound(Exception):
    """No credential record is stored for the site."""


class InvalidCredentialsFormat(Exception):
    """A credential record exists but cannot be read back."""


def store_installation_credentials(site_id: int, credentials: Dict[str, str]) -> None:
    """
    Store (or overwrite) the admin credentials of a site.

    Args:
        site_id: The site ID
        credentials: Dict with 'domain', 'adminEmail' and 'adminPassword'
    """
    payload = json.dumps({field: credentials[field] for field in CREDENTIAL_FIELDS})
    upsert_entity_meta(site_id, SITE_REL_TYPE, CREDENTIALS_META_NAME, encrypt_value(payload))
    logger.info(f"Stored installation credentials for site {site_id}")


def get_installation_credentials(site_id: int) -> Dict[str, str]:
    """
    Get the admin credentials of a site.

    Raises:
        CredentialsNotFound: if nothing is stored for the site
        InvalidCredentialsFormat: if the stored value is corrupt
    """
    stored = get_entity_meta(site_id, SITE_REL_TYPE, CREDENTIALS_META_NAME)
    if stored is None:
        raise CredentialsNotFound(f"No credentials found for site {site_id}")

    try:
        data = json.loads(decrypt_value(stored))
    except (InvalidToken, ValueError) as e:
        raise InvalidCredentialsFormat(f"Stored credentials for site {site_id} are unreadable") from e

    if not isinstance(data, dict) or any(not isinstance(data.get(field), str) for field in CREDENTIAL_FIELDS):
        raise InvalidCredentialsFormat(f"Stored credentials for site {site_id} are incomplete")
    return {field: data[field] for field in CREDENTIAL_FIELDS}


def delete_all_site_settings(site_id: int) -> int:
    """Delete every meta record of a site, credentials included."""
    deleted = delete_all_entity_meta(site_id, SITE_REL_TYPE)
    logger.info(f"Deleted {deleted} settings for site {site_id}")
    return deleted
