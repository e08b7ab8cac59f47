"""
Installations app models for InstallDesk.
"""
from django.db import models


class InstallStep(models.Model):
    """One tracked unit of a site's installation workflow."""
    TYPE_PRE_INSTALLATION = 'PRE_INSTALLATION'
    TYPE_DB_CREATION = 'DB_CREATION'
    TYPE_CPANEL_ENTRY = 'CPANEL_ENTRY'
    TYPE_CLOUDFLARE_ENTRY = 'CLOUDFLARE_ENTRY'
    TYPE_DIRECTORY_SETUP = 'DIRECTORY_SETUP'
    TYPE_CHOICES = [
        (TYPE_PRE_INSTALLATION, 'Pre-installation'),
        (TYPE_DB_CREATION, 'Database creation'),
        (TYPE_CPANEL_ENTRY, 'cPanel entry'),
        (TYPE_CLOUDFLARE_ENTRY, 'Cloudflare entry'),
        (TYPE_DIRECTORY_SETUP, 'Directory setup'),
    ]
    REGULAR_TYPES = [
        TYPE_DB_CREATION,
        TYPE_CPANEL_ENTRY,
        TYPE_CLOUDFLARE_ENTRY,
        TYPE_DIRECTORY_SETUP,
    ]

    STATUS_PENDING = 'PENDING'
    STATUS_IN_PROGRESS = 'IN_PROGRESS'
    STATUS_SUCCESS = 'SUCCESS'
    STATUS_FAILED = 'FAILED'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_IN_PROGRESS, 'In progress'),
        (STATUS_SUCCESS, 'Success'),
        (STATUS_FAILED, 'Failed'),
    ]

    site = models.ForeignKey(
        'hosting.Site',
        on_delete=models.PROTECT,
        related_name='steps',
    )
    step_type = models.CharField(max_length=30, choices=TYPE_CHOICES)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)
    # Only PRE_INSTALLATION uses this, to stage the wizard data and admin credentials
    step_data = models.JSONField(blank=True, null=True)
    error_msg = models.TextField(blank=True, null=True)
    step_order = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'installations_installstep'
        verbose_name = 'Install Step'
        verbose_name_plural = 'Install Steps'
        ordering = ['step_order', 'id']
        constraints = [
            models.UniqueConstraint(fields=['site', 'step_type'], name='unique_step_per_site'),
        ]

    def __str__(self) -> str:
        return f"{self.site_id} - {self.step_type} ({self.status})"
