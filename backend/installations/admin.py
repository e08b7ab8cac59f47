"""
Admin configuration for installations app.
"""
from django.contrib import admin
from .models import InstallStep


@admin.register(InstallStep)
class InstallStepAdmin(admin.ModelAdmin):
    """Admin interface for InstallStep model."""
    list_display = ['site', 'step_type', 'status', 'step_order', 'updated_at']
    list_filter = ['step_type', 'status']
    search_fields = ['site__domain']
    readonly_fields = ['created_at', 'updated_at']
    raw_id_fields = ['site']
    # PRE_INSTALLATION payloads carry admin passwords
    exclude = ['step_data']
