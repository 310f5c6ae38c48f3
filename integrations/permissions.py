import hmac

from django.conf import settings
from rest_framework import exceptions, permissions


class HasMenuImportKey(permissions.BasePermission):
    """Partner calls must carry the shared key in the X-API-Key header"""
    message = 'Invalid or missing API key.'

    def has_permission(self, request, view):
        expected = settings.MENU_IMPORT_API_KEY
        provided = request.headers.get('X-API-Key', '')
        # Import stays closed until a key is configured
        if not expected or not hmac.compare_digest(provided.encode('utf-8'), expected.encode('utf-8')):
            raise exceptions.AuthenticationFailed(self.message)
        return True
