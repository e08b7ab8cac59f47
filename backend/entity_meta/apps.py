"""
App configuration for entity_meta app.
"""
from django.apps import AppConfig


class EntityMetaConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'entity_meta'
