"""
Projects app models for InstallDesk.
"""
from django.db import models


class Project(models.Model):
    """A product line that sites are installed from."""
    name = models.CharField(max_length=255, unique=True)
    key = models.CharField(max_length=100, unique=True)
    domain = models.CharField(max_length=255, unique=True, help_text="Base domain new sites are created under")
    status = models.BooleanField(default=True, help_text="Whether new installations may use this project")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'projects_project'
        verbose_name = 'Project'
        verbose_name_plural = 'Projects'
        ordering = ['-created_at']

    def __str__(self) -> str:
        return f"{self.name} ({self.key})"
