from rest_framework import permissions

from .models import StaffUser


# Permission constants
class Capabilities:
    MANAGE_USERS = 'manage_users'
    MANAGE_INTEGRATIONS = 'manage_integrations'
    MANAGE_PAYMENTS = 'manage_payments'
    MANAGE_DELIVERY = 'manage_delivery'
    MANAGE_MENU = 'manage_menu'
    WRITE_ORDERS = 'write_orders'
    READ_ORDERS = 'read_orders'


# Capability flag on the user model backing each flag-driven capability
CAPABILITY_FLAGS = {
    Capabilities.MANAGE_USERS: 'can_manage_users',
    Capabilities.MANAGE_INTEGRATIONS: 'can_manage_integrations',
    Capabilities.MANAGE_PAYMENTS: 'can_manage_payments',
    Capabilities.MANAGE_DELIVERY: 'can_manage_delivery',
}

# Capabilities granted by the coarse role alone
ROLE_CAPABILITIES = {
    StaffUser.ROLE_ADMIN: {
        Capabilities.MANAGE_USERS, Capabilities.MANAGE_INTEGRATIONS,
        Capabilities.MANAGE_PAYMENTS, Capabilities.MANAGE_DELIVERY,
        Capabilities.MANAGE_MENU, Capabilities.WRITE_ORDERS, Capabilities.READ_ORDERS,
    },
    StaffUser.ROLE_WRITE: {
        Capabilities.MANAGE_MENU, Capabilities.WRITE_ORDERS, Capabilities.READ_ORDERS,
    },
    StaffUser.ROLE_READ_ONLY: {
        Capabilities.READ_ORDERS,
    },
}


def resolve_capabilities(user):
    """
    Return the effective capability set of a user.

    The role grants a base set; each capability flag adds its capability on
    top. Anonymous or inactive users get nothing.
    """
    if not user or not getattr(user, 'is_authenticated', False) or not user.is_active:
        return frozenset()

    granted = set(ROLE_CAPABILITIES.get(getattr(user, 'role', None), ()))
    for capability, flag in CAPABILITY_FLAGS.items():
        if getattr(user, flag, False):
            granted.add(capability)
    return frozenset(granted)


def has_capability(user, capability):
    return capability in resolve_capabilities(user)


def can_manage_users(user):
    return has_capability(user, Capabilities.MANAGE_USERS)


def can_manage_integrations(user):
    return has_capability(user, Capabilities.MANAGE_INTEGRATIONS)


def can_manage_payments(user):
    return has_capability(user, Capabilities.MANAGE_PAYMENTS)


def can_manage_delivery(user):
    return has_capability(user, Capabilities.MANAGE_DELIVERY)


def can_manage_menu(user):
    return has_capability(user, Capabilities.MANAGE_MENU)


def can_write_orders(user):
    return has_capability(user, Capabilities.WRITE_ORDERS)


def can_read_orders(user):
    return has_capability(user, Capabilities.READ_ORDERS)


class HasCapability(permissions.BasePermission):
    """
    Base permission: the authenticated user must hold `capability`.

    Returning False for an anonymous request makes DRF answer 401, for an
    authenticated one 403, so callers can tell "log in" from "access denied".
    """
    capability = None
    message = 'You do not have permission to perform this action.'

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        return has_capability(request.user, self.capability)


class CanManageUsers(HasCapability):
    capability = Capabilities.MANAGE_USERS
    message = 'User management access required'


class CanManageIntegrations(HasCapability):
    capability = Capabilities.MANAGE_INTEGRATIONS
    message = 'Integration management access required'


class CanManagePayments(HasCapability):
    capability = Capabilities.MANAGE_PAYMENTS
    message = 'Payment management access required'


class CanManageDelivery(HasCapability):
    capability = Capabilities.MANAGE_DELIVERY
    message = 'Delivery management access required'


class CanManageMenu(HasCapability):
    capability = Capabilities.MANAGE_MENU
    message = 'Write access required'


class CanWriteOrders(HasCapability):
    capability = Capabilities.WRITE_ORDERS
    message = 'Write access required'


class CanReadOrders(HasCapability):
    capability = Capabilities.READ_ORDERS
