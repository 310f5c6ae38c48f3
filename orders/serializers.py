from decimal import Decimal

from rest_framework import serializers, status
from rest_framework.exceptions import APIException
from django.db import transaction
from django.utils import timezone

from configuration.models import PaymentMethod, DeliverySettings, OrderingSettings
from inventory.models import MenuItem
from .cart import (
    MAX_LINE_QUANTITY, CartLine, DeliveryWindowError, compute_subtotal, compute_delivery_fee,
    compute_total, validate_delivery_window
)
from .models import Order, OrderItem

# Largest amount the order price columns can hold
MAX_ORDER_AMOUNT = Decimal('99999999.99')


class OrderingDisabled(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = OrderingSettings.DEFAULT_DISABLED_MESSAGE
    default_code = 'ordering_disabled'


def ensure_ordering_enabled(ordering_settings=None):
    ordering_settings = ordering_settings or OrderingSettings.load()
    if not ordering_settings.is_enabled:
        raise OrderingDisabled(ordering_settings.effective_disabled_message)


class OrderItemInputSerializer(serializers.Serializer):
    menu_item_id = serializers.IntegerField()
    quantity = serializers.IntegerField(min_value=1, max_value=MAX_LINE_QUANTITY)


class OrderItemReadSerializer(serializers.ModelSerializer):
    line_total = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)

    class Meta:
        model = OrderItem
        fields = ['id', 'menu_item', 'item_id', 'name', 'quantity', 'price', 'line_total']
        read_only_fields = fields


class OrderReadSerializer(serializers.ModelSerializer):
    items = OrderItemReadSerializer(many=True, read_only=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    delivery_time = serializers.TimeField(format='%H:%M', read_only=True)

    class Meta:
        model = Order
        fields = [
            'id', 'customer_name', 'address', 'phone', 'notes',
            'delivery_date', 'delivery_time', 'payment_method',
            'items', 'subtotal', 'delivery_fee', 'total',
            'status', 'status_display', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class OrderStatusSerializer(serializers.ModelSerializer):
    status = serializers.ChoiceField(choices=Order.STATUS_CHOICES)

    class Meta:
        model = Order
        fields = ['id', 'status', 'updated_at']
        read_only_fields = ['id', 'updated_at']


class OrderCreateSerializer(serializers.ModelSerializer):
    """
    Order submission from the storefront.

    Only menu item ids and quantities are taken from the client. Names and
    prices are copied from the menu and the total is computed here with the
    delivery settings in effect (`delivery_settings` in the context, loaded
    from the database otherwise).
    """
    items = OrderItemInputSerializer(many=True, write_only=True)
    delivery_time = serializers.TimeField()
    phone = serializers.CharField(max_length=50, required=False, allow_blank=True, default='')
    notes = serializers.CharField(required=False, allow_blank=True, default='')

    class Meta:
        model = Order
        fields = [
            'customer_name', 'address', 'phone', 'notes',
            'delivery_date', 'delivery_time', 'payment_method', 'items'
        ]

    def validate_payment_method(self, value):
        if not PaymentMethod.objects.filter(name=value, is_enabled=True).exists():
            raise serializers.ValidationError(f"Payment method '{value}' is not available.")
        return value

    def validate_delivery_time(self, value):
        try:
            return validate_delivery_window(value)
        except DeliveryWindowError as exc:
            raise serializers.ValidationError(str(exc))

    def validate_delivery_date(self, value):
        if value < timezone.localdate():
            raise serializers.ValidationError("Delivery date cannot be in the past.")
        return value

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError("Order must contain at least one item.")

        # Repeated menu items are merged into one line
        quantities = {}
        for entry in value:
            menu_item_id = entry['menu_item_id']
            quantities[menu_item_id] = quantities.get(menu_item_id, 0) + entry['quantity']

        too_many = [str(pk) for pk, quantity in quantities.items() if quantity > MAX_LINE_QUANTITY]
        if too_many:
            raise serializers.ValidationError(
                f"At most {MAX_LINE_QUANTITY} units per menu item: {', '.join(too_many)}"
            )

        menu_items = MenuItem.objects.enabled().in_bulk(list(quantities))
        missing = [str(pk) for pk in quantities if pk not in menu_items]
        if missing:
            raise serializers.ValidationError(
                f"Menu items not found or unavailable: {', '.join(missing)}"
            )

        return [
            {'menu_item': menu_items[pk], 'quantity': quantity}
            for pk, quantity in quantities.items()
        ]

    def get_delivery_settings(self):
        return self.context.get('delivery_settings') or DeliverySettings.load()

    def validate(self, attrs):
        lines = [
            CartLine(entry['menu_item'].id, entry['menu_item'].name, entry['menu_item'].price, entry['quantity'])
            for entry in attrs['items']
        ]
        delivery_settings = self.get_delivery_settings()
        subtotal = compute_subtotal(lines)
        total = compute_total(lines, delivery_settings)
        if total > MAX_ORDER_AMOUNT:
            raise serializers.ValidationError({'items': f"Order total exceeds {MAX_ORDER_AMOUNT}."})

        attrs['lines'] = lines
        attrs['subtotal'] = subtotal
        attrs['delivery_fee'] = compute_delivery_fee(subtotal, delivery_settings)
        attrs['total'] = total
        return attrs

    def create(self, validated_data):
        items = validated_data.pop('items')
        lines = validated_data.pop('lines')

        with transaction.atomic():
            order = Order.objects.create(status=Order.STATUS_PENDING, **validated_data)
            OrderItem.objects.bulk_create([
                OrderItem(
                    order=order,
                    menu_item=entry['menu_item'],
                    item_id=line.item_id,
                    name=line.name,
                    quantity=line.quantity,
                    price=line.price,
                )
                for entry, line in zip(items, lines)
            ])
        return order
