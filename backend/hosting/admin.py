"""
Admin configuration for hosting app.
"""
from django.contrib import admin
from .models import Site


@admin.register(Site)
class SiteAdmin(admin.ModelAdmin):
    """Admin interface for Site model."""
    list_display = ['domain', 'client', 'project', 'status', 'created_at']
    list_filter = ['status', 'project', 'created_at']
    search_fields = ['domain', 'client__name', 'project__name']
    readonly_fields = ['created_at', 'updated_at']
    raw_id_fields = ['client']
