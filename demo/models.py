from django.db import models


class Entity1(models.Model):
    """Minimal model used as a model-typed live prop."""

    label = models.CharField(max_length=100, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.label or f"Entity1 #{self.pk}"
