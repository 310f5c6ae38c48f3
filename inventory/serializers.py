from rest_framework import serializers

from authentication.exceptions import Conflict
from .categories import category_label, category_slugs
from .models import MenuItem


class MenuItemListSerializer(serializers.ModelSerializer):
    category_label = serializers.SerializerMethodField()

    class Meta:
        model = MenuItem
        fields = [
            'id', 'name', 'description', 'image_url', 'calories',
            'category', 'category_label', 'price', 'is_enabled'
        ]

    def get_category_label(self, obj):
        return category_label(obj.category)


class MenuItemSerializer(serializers.ModelSerializer):
    category_label = serializers.SerializerMethodField()

    class Meta:
        model = MenuItem
        fields = [
            'id', 'external_id', 'name', 'description', 'image_url', 'calories',
            'category', 'category_label', 'price', 'is_enabled',
            'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']
        extra_kwargs = {
            # uniqueness is reported as 409 by validate_external_id
            'external_id': {'validators': []},
        }

    def get_category_label(self, obj):
        return category_label(obj.category)

    def validate_category(self, value):
        if value not in category_slugs():
            raise serializers.ValidationError(
                f"Unknown category '{value}'. Expected one of: {', '.join(category_slugs())}."
            )
        return value

    def validate_external_id(self, value):
        """External id must be unique across menu items"""
        if not value:
            return None
        queryset = MenuItem.objects.filter(external_id=value)
        if self.instance:
            queryset = queryset.exclude(pk=self.instance.pk)
        if queryset.exists():
            raise Conflict('Menu item with this external id already exists.')
        return value


class MenuImportItemSerializer(serializers.Serializer):
    """
    One item of an inbound partner payload.

    Field names follow the partner's camelCase wire format.
    """
    id = serializers.CharField(max_length=100)
    name = serializers.CharField(max_length=255)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True, default='')
    image = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=500, default='')
    category = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)
    calories = serializers.IntegerField(required=False, allow_null=True, min_value=0, default=None)
    isEnabled = serializers.BooleanField(required=False, default=True)

    def validate_category(self, value):
        slugs = category_slugs()
        if not value:
            return slugs[0]
        if value not in slugs:
            raise serializers.ValidationError(f"Unknown category '{value}'.")
        return value

    def to_model_fields(self):
        data = self.validated_data
        return {
            'name': data['name'],
            'description': data.get('description') or '',
            'image_url': data.get('image') or '',
            'category': data['category'],
            'calories': data.get('calories'),
            'price': data['price'],
            'is_enabled': data['isEnabled'],
        }


class MenuStatusBulkUpdateSerializer(serializers.Serializer):
    menu_ids = serializers.ListField(child=serializers.IntegerField(min_value=1), allow_empty=False)
    is_enabled = serializers.BooleanField(default=True)
