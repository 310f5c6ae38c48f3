from rest_framework import serializers

from .models import IntegrationSettings


class IntegrationSettingsSerializer(serializers.ModelSerializer):
    # The key is accepted but never echoed back
    api_key = serializers.CharField(max_length=255, required=False, allow_blank=True, write_only=True)
    has_api_key = serializers.SerializerMethodField()

    class Meta:
        model = IntegrationSettings
        fields = [
            'platform_name', 'platform_url', 'api_key', 'has_api_key',
            'restaurant_external_id', 'restaurant_address', 'restaurant_phone',
            'currency', 'last_sync_at', 'updated_at'
        ]
        read_only_fields = ['last_sync_at', 'updated_at']

    def get_has_api_key(self, obj):
        return bool(obj.api_key)

    def validate_currency(self, value):
        value = (value or '').strip().upper()
        if len(value) != 3 or not value.isalpha():
            raise serializers.ValidationError("Currency must be a 3-letter ISO code.")
        return value


class MenuImportSerializer(serializers.Serializer):
    items = serializers.ListField(child=serializers.JSONField(), allow_empty=True)
