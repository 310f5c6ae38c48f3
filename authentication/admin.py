from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import StaffUser


@admin.register(StaffUser)
class StaffUserAdmin(BaseUserAdmin):
    list_display = ('username', 'role', 'can_manage_users', 'can_manage_integrations',
                    'can_manage_payments', 'can_manage_delivery', 'is_active')
    list_filter = ('role', 'is_active')
    fieldsets = BaseUserAdmin.fieldsets + (
        ('Back office access', {
            'fields': ('role', 'can_manage_users', 'can_manage_integrations',
                       'can_manage_payments', 'can_manage_delivery'),
        }),
    )
