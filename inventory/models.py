from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from authentication.models import TimeStampedModel


class MenuItemQuerySet(models.QuerySet):
    def enabled(self):
        return self.filter(is_enabled=True)

    def by_sync_id(self, sync_id):
        """
        Item the partner knows as `sync_id`.

        Items exported without an external id go out under their primary key,
        so a numeric id falls back to the matching local item.
        """
        item = self.filter(external_id=sync_id).first()
        if item is None and str(sync_id).isdigit():
            item = self.filter(pk=int(sync_id), external_id__isnull=True).first()
        return item


class MenuItem(TimeStampedModel):
    """A dish on the menu. Customers only see enabled items."""
    # Stable identifier of the item on the partner platform (import/export key)
    external_id = models.CharField(max_length=100, unique=True, null=True, blank=True)

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    image_url = models.CharField(max_length=500, blank=True)
    calories = models.PositiveIntegerField(null=True, blank=True)

    # One of settings.MENU_CATEGORIES, validated by the serializers
    category = models.CharField(max_length=50)

    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal('0.00'))])
    is_enabled = models.BooleanField(default=True)

    objects = MenuItemQuerySet.as_manager()

    class Meta:
        db_table = 'menu_items'
        ordering = ['category', 'name']

    def __str__(self):
        return self.name

    @property
    def sync_id(self):
        """Identifier used towards the partner platform"""
        return self.external_id or str(self.pk)
