from django.contrib import admin

from .models import MenuItem


@admin.register(MenuItem)
class MenuItemAdmin(admin.ModelAdmin):
    list_display = ('name', 'category', 'price', 'is_enabled', 'external_id')
    list_filter = ('category', 'is_enabled')
    search_fields = ('name', 'external_id')
