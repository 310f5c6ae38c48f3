from django.db import models

from configuration.models import SingletonModel


class IntegrationSettings(SingletonModel):
    """Connection to the partner platform the menu is exported to"""
    platform_name = models.CharField(max_length=100, blank=True)
    platform_url = models.URLField(max_length=500, blank=True)
    api_key = models.CharField(max_length=255, blank=True)

    # Restaurant profile sent along with every export
    restaurant_external_id = models.CharField(max_length=100, blank=True)
    restaurant_address = models.CharField(max_length=255, blank=True)
    restaurant_phone = models.CharField(max_length=50, blank=True)
    currency = models.CharField(max_length=3, default='PLN')

    last_sync_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'integration_settings'
        verbose_name_plural = 'Integration settings'

    def __str__(self):
        return self.platform_name or self.platform_url or 'Integration'

    @property
    def is_configured(self):
        return bool(self.platform_url and self.api_key)
