from django.db import models


class InsightReport(models.Model):
    created_at = models.DateTimeField(auto_now_add=True)
    name = models.CharField(max_length=120, blank=True, default="")
    status = models.CharField(max_length=32, default="pending")
    ledger_path = models.CharField(max_length=255)
    profile = models.JSONField(default=dict)
    result = models.JSONField(null=True, blank=True)
    error = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["-created_at"]
