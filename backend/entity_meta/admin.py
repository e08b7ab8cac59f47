"""
Admin configuration for entity_meta app.
"""
from django.contrib import admin
from .models import EntityMeta


@admin.register(EntityMeta)
class EntityMetaAdmin(admin.ModelAdmin):
    """Admin interface for EntityMeta model."""
    list_display = ['rel_type', 'rel_id', 'name', 'updated_at']
    list_filter = ['rel_type', 'name']
    search_fields = ['name']
    readonly_fields = ['created_at', 'updated_at']
    # Values may be encrypted secrets
    exclude = ['value']
