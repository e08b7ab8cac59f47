"""
Hosting app models for InstallDesk.
"""
from django.db import models


class Site(models.Model):
    """Site model - one hosting/installation target for a client under a project."""
    STATUS_PENDING = 'PENDING'
    STATUS_IN_PROGRESS = 'IN_PROGRESS'
    STATUS_COMPLETED = 'COMPLETED'
    STATUS_FAILED = 'FAILED'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_IN_PROGRESS, 'In progress'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_FAILED, 'Failed'),
    ]
    # Sites counted as active on the dashboards
    ACTIVE_STATUSES = [STATUS_PENDING, STATUS_IN_PROGRESS, STATUS_COMPLETED]

    client = models.ForeignKey(
        'clients.Client',
        on_delete=models.SET_NULL,
        related_name='sites',
        blank=True,
        null=True,
    )
    project = models.ForeignKey(
        'projects.Project',
        on_delete=models.PROTECT,
        related_name='sites',
    )
    # Uniqueness is checked by find_conflicting_site() before create/update
    domain = models.CharField(max_length=255, blank=True, null=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)
    installer_site_id = models.CharField(
        max_length=100,
        unique=True,
        blank=True,
        null=True,
        help_text="Identifier assigned by the remote installer"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'hosting_site'
        verbose_name = 'Site'
        verbose_name_plural = 'Sites'
        ordering = ['-created_at']

    def __str__(self) -> str:
        return f"{self.domain or 'unnamed'} ({self.status})"
