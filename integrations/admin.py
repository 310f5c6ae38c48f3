from django.contrib import admin

from .models import IntegrationSettings


@admin.register(IntegrationSettings)
class IntegrationSettingsAdmin(admin.ModelAdmin):
    list_display = ('platform_name', 'platform_url', 'currency', 'last_sync_at')
    readonly_fields = ('last_sync_at',)
