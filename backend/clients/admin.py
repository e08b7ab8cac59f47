"""
Admin configuration for clients app.
"""
from django.contrib import admin
from .models import Client


@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    """Admin interface for Client model."""
    list_display = ['name', 'type', 'city', 'country', 'active', 'created_at']
    list_filter = ['type', 'active', 'created_at']
    search_fields = ['name', 'central_crm_client_id']
    readonly_fields = ['created_at', 'updated_at']
