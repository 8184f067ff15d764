from django.db import models

class SystemSetting(models.Model):
    """
    Simple key/value settings store.
    Example keys:
      - SLOT_INTERVAL_MINUTES (e.g., '30')
      - HOLD_MINUTES (e.g., '5')
    """
    key = models.CharField(max_length=100, unique=True)
    value = models.CharField(max_length=200)

    def __str__(self):
        return f"{self.key}={self.value}"
