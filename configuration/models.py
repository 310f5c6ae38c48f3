from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from authentication.models import TimeStampedModel


class SingletonModel(TimeStampedModel):
    """A settings record of which exactly one row exists (pk=1)"""

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        self.pk = 1
        super().save(*args, **kwargs)

    @classmethod
    def load(cls):
        """Return the settings row, creating it with defaults on first use"""
        obj, _ = cls.objects.get_or_create(pk=1)
        return obj


class PaymentMethod(TimeStampedModel):
    """A payment option customers can pick at checkout"""
    CASH = 'cash'
    CARD = 'card'
    BLIK = 'blik'
    TRANSFER = 'transfer'

    name = models.CharField(max_length=50, unique=True)
    display_name = models.CharField(max_length=100)
    is_enabled = models.BooleanField(default=True)

    class Meta:
        db_table = 'payment_methods'
        ordering = ['name']

    def __str__(self):
        return self.display_name or self.name


class DeliverySettings(SingletonModel):
    """Delivery pricing: a fee charged once the order reaches a minimum amount"""
    is_enabled = models.BooleanField(default=False)
    min_order_amount = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    delivery_fee = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )

    class Meta:
        db_table = 'delivery_settings'
        verbose_name_plural = 'Delivery settings'

    def __str__(self):
        return f"Delivery {'on' if self.is_enabled else 'off'}"


class OrderingSettings(SingletonModel):
    """Global switch for accepting new orders"""
    DEFAULT_DISABLED_MESSAGE = 'Ordering is currently unavailable. Please try again later.'

    is_enabled = models.BooleanField(default=True)
    disabled_message = models.CharField(max_length=255, blank=True)

    class Meta:
        db_table = 'ordering_settings'
        verbose_name_plural = 'Ordering settings'

    def __str__(self):
        return f"Ordering {'on' if self.is_enabled else 'off'}"

    @property
    def effective_disabled_message(self):
        return self.disabled_message or self.DEFAULT_DISABLED_MESSAGE
