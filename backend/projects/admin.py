"""
Admin configuration for projects app.
"""
from django.contrib import admin
from .models import Project


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    """Admin interface for Project model."""
    list_display = ['name', 'key', 'domain', 'status', 'created_at']
    list_filter = ['status', 'created_at']
    search_fields = ['name', 'key', 'domain']
    readonly_fields = ['created_at', 'updated_at']
