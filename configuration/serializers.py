from rest_framework import serializers

from .models import PaymentMethod, DeliverySettings, OrderingSettings


class PaymentMethodSerializer(serializers.ModelSerializer):
    class Meta:
        model = PaymentMethod
        fields = ['name', 'display_name', 'is_enabled', 'updated_at']
        read_only_fields = ['name', 'updated_at']


class PublicPaymentMethodSerializer(serializers.ModelSerializer):
    class Meta:
        model = PaymentMethod
        fields = ['name', 'display_name']


class DeliverySettingsSerializer(serializers.ModelSerializer):
    class Meta:
        model = DeliverySettings
        fields = ['is_enabled', 'min_order_amount', 'delivery_fee', 'updated_at']
        read_only_fields = ['updated_at']


class OrderingSettingsSerializer(serializers.ModelSerializer):
    message = serializers.CharField(source='effective_disabled_message', read_only=True)

    class Meta:
        model = OrderingSettings
        fields = ['is_enabled', 'disabled_message', 'message', 'updated_at']
        read_only_fields = ['updated_at']
