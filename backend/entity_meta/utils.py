"""
Utilities for reading and writing entity metadata.
"""
import base64
import hashlib
import logging
from typing import Dict, List, Optional
from cryptography.fernet import Fernet
from django.conf import settings
from .models import EntityMeta

logger = logging.getLogger(__name__)


def get_encryption_key() -> bytes:
    """Get the Fernet key for encrypted meta values."""
    key = settings.INSTALLDESK_ENCRYPTION_KEY
    if key:
        return key.encode() if isinstance(key, str) else key
    # Derive a stable key from SECRET_KEY so values survive restarts
    digest = hashlib.sha256(settings.SECRET_KEY.encode()).digest()
    return base64.urlsafe_b64encode(digest)


def encrypt_value(value: str) -> str:
    """Encrypt a meta value for storage."""
    return Fernet(get_encryption_key()).encrypt(value.encode()).decode()


def decrypt_value(token: str) -> str:
    """
    Decrypt a stored meta value.

    Raises:
        cryptography.fernet.InvalidToken: if the value was not produced by encrypt_value
    """
    return Fernet(get_encryption_key()).decrypt(token.encode()).decode()


def entity_meta_key_exists(rel_id: int, rel_type: str, name: str) -> bool:
    """Check whether a meta key exists for an entity."""
    if not rel_id or not rel_type or not name:
        return False
    return EntityMeta.objects.filter(rel_id=rel_id, rel_type=rel_type, name=name).exists()


def get_entity_meta(rel_id: int, rel_type: str, name: str) -> Optional[str]:
    """
    Get a single meta value.

    Returns:
        The stored value, or None if the key does not exist
    """
    if not rel_id or not rel_type or not name:
        return None
    return (
        EntityMeta.objects
        .filter(rel_id=rel_id, rel_type=rel_type, name=name)
        .values_list('value', flat=True)
        .first()
    )


def get_entity_all_meta(rel_id: int, rel_type: str) -> List[EntityMeta]:
    """Get every meta record of an entity, oldest first."""
    if not rel_id or not rel_type:
        return []
    return list(EntityMeta.objects.filter(rel_id=rel_id, rel_type=rel_type).order_by('id'))


def upsert_entity_meta(rel_id: int, rel_type: str, name: str, value: str) -> EntityMeta:
    """
    Create or overwrite a meta value.

    The (rel_id, rel_type, name) unique constraint keeps a single row per key.
    """
    if not rel_id or not rel_type or not name:
        raise ValueError("rel_id, rel_type and name are required")
    meta, created = EntityMeta.objects.update_or_create(
        rel_id=rel_id,
        rel_type=rel_type,
        name=name,
        defaults={'value': value},
    )
    logger.debug(f"{'Created' if created else 'Updated'} meta {name} for {rel_type} {rel_id}")
    return meta


def delete_entity_meta(rel_id: int, rel_type: str, name: str) -> bool:
    """Delete one meta key. Returns False if it did not exist."""
    if not rel_id or not rel_type or not name:
        return False
    deleted, _ = EntityMeta.objects.filter(rel_id=rel_id, rel_type=rel_type, name=name).delete()
    return deleted > 0


def delete_all_entity_meta(rel_id: int, rel_type: str) -> int:
    """Delete every meta record of an entity and return how many were removed."""
    if not rel_id or not rel_type:
        return 0
    deleted, _ = EntityMeta.objects.filter(rel_id=rel_id, rel_type=rel_type).delete()
    return deleted


def get_entity_meta_as_dict(rel_id: int, rel_type: str) -> Dict[str, str]:
    """Get an entity's meta as a {name: value} dict."""
    return {meta.name: meta.value for meta in get_entity_all_meta(rel_id, rel_type)}


def update_entity_meta_from_dict(rel_id: int, rel_type: str, values: Dict[str, str]) -> None:
    """Upsert several meta keys at once."""
    for name, value in values.items():
        upsert_entity_meta(rel_id, rel_type, name, value)
