"""
Clients app models for InstallDesk.
"""
from django.db import models


class Client(models.Model):
    """A customer that sites are installed for."""
    TYPE_ORGANIZATION = 'ORGANIZATION'
    TYPE_PERSON = 'PERSON'
    TYPE_CHOICES = [
        (TYPE_ORGANIZATION, 'Organization'),
        (TYPE_PERSON, 'Person'),
    ]

    name = models.CharField(max_length=255)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default=TYPE_ORGANIZATION)
    address = models.CharField(max_length=255, blank=True, null=True)
    apartment = models.CharField(max_length=100, blank=True, null=True)
    city = models.CharField(max_length=100, blank=True, null=True)
    state = models.CharField(max_length=100, blank=True, null=True)
    zip_code = models.CharField(max_length=20, blank=True, null=True)
    country = models.CharField(max_length=100, blank=True, null=True)
    active = models.BooleanField(default=True)
    # Identifier of the client in the central CRM, when imported from there
    central_crm_client_id = models.CharField(max_length=100, unique=True, blank=True, null=True)
    last_synced_at = models.DateTimeField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'clients_client'
        verbose_name = 'Client'
        verbose_name_plural = 'Clients'
        ordering = ['-created_at']

    def __str__(self) -> str:
        return self.name
