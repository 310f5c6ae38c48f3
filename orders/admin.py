from django.contrib import admin

from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ('menu_item', 'item_id', 'name', 'quantity', 'price')


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ('id', 'customer_name', 'delivery_date', 'delivery_time', 'total', 'status', 'created_at')
    list_filter = ('status', 'delivery_date', 'payment_method')
    search_fields = ('customer_name', 'address', 'phone')
    readonly_fields = ('subtotal', 'delivery_fee', 'total', 'created_at', 'updated_at')
    inlines = [OrderItemInline]
