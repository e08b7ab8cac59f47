"""
Entity meta models for InstallDesk.
"""
from django.db import models


class EntityMeta(models.Model):
    """Key/value metadata attached to any entity by (rel_id, rel_type, name)."""
    rel_id = models.BigIntegerField()
    rel_type = models.CharField(max_length=50)
    name = models.CharField(max_length=100)
    value = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'entity_meta_entitymeta'
        verbose_name = 'Entity Meta'
        verbose_name_plural = 'Entity Meta'
        ordering = ['id']
        constraints = [
            models.UniqueConstraint(fields=['rel_id', 'rel_type', 'name'], name='unique_entity_meta_key'),
        ]

    def __str__(self) -> str:
        return f"{self.rel_type}:{self.rel_id} {self.name}"
