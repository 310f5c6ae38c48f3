from decimal import Decimal

from django.db import models

from inventory.models import MenuItem


class Order(models.Model):
    """
    A customer's delivery order.

    Everything except `status` is fixed at submission: prices are copied
    from the menu into OrderItem rows and totals are computed server-side.
    """
    STATUS_PENDING = 'pending'
    STATUS_PREPARING = 'preparing'
    STATUS_READY = 'ready'
    STATUS_IN_DELIVERY = 'in_delivery'
    STATUS_DELIVERED = 'delivered'
    STATUS_PAID = 'paid'
    STATUS_CANCELLED = 'cancelled'

    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_PREPARING, 'Preparing'),
        (STATUS_READY, 'Ready'),
        (STATUS_IN_DELIVERY, 'In delivery'),
        (STATUS_DELIVERED, 'Delivered'),
        (STATUS_PAID, 'Paid'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]

    customer_name = models.CharField(max_length=255)
    address = models.TextField()
    phone = models.CharField(max_length=50, blank=True)
    notes = models.TextField(blank=True)

    delivery_date = models.DateField()
    delivery_time = models.TimeField()

    # Name of the PaymentMethod chosen at checkout
    payment_method = models.CharField(max_length=50)

    # Pricing fields
    subtotal = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    delivery_fee = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    total = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'orders'
        ordering = ['-created_at']

    def __str__(self):
        return f"Order #{self.pk} - {self.customer_name} ({self.status})"

    @property
    def item_count(self):
        return sum(item.quantity for item in self.items.all())


class OrderItem(models.Model):
    """Cart line copied into the order at submission time"""
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='items')
    # Kept nullable so removing a dish from the menu keeps order history intact
    menu_item = models.ForeignKey(MenuItem, on_delete=models.SET_NULL, null=True, blank=True, related_name='order_items')

    item_id = models.CharField(max_length=100)
    name = models.CharField(max_length=255)
    quantity = models.PositiveIntegerField(default=1)
    price = models.DecimalField(max_digits=10, decimal_places=2)

    class Meta:
        db_table = 'order_items'
        ordering = ['id']

    def __str__(self):
        return f"{self.quantity}x {self.name}"

    @property
    def line_total(self):
        return self.price * self.quantity
