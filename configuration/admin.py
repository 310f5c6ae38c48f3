from django.contrib import admin

from .models import PaymentMethod, DeliverySettings, OrderingSettings


@admin.register(PaymentMethod)
class PaymentMethodAdmin(admin.ModelAdmin):
    list_display = ('name', 'display_name', 'is_enabled')


admin.site.register(DeliverySettings)
admin.site.register(OrderingSettings)
