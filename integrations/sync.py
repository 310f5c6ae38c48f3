"""
Menu synchronisation with the partner platform.

Export pushes the whole menu (enabled and disabled items) in one POST
authenticated by an ``x-api-key`` header. Import upserts items received
from the partner, keyed by their external id.
"""
import json
import logging
import urllib.error
import urllib.request

from django.conf import settings
from django.utils import timezone
from rest_framework import status
from rest_framework.exceptions import APIException, ErrorDetail, ValidationError

from inventory.models import MenuItem
from inventory.serializers import MenuImportItemSerializer

logger = logging.getLogger(__name__)


class IntegrationError(APIException):
    """The partner platform rejected the export or could not be reached"""
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = 'Menu export failed.'
    default_code = 'integration_error'

    def __init__(self, upstream_status=None, detail=None):
        self.upstream_status = upstream_status
        if detail is None:
            if upstream_status is None:
                detail = 'Partner platform could not be reached.'
            else:
                detail = f'Partner platform responded with status {upstream_status}.'
        super().__init__(detail)
        self.detail = {
            'detail': ErrorDetail(detail, self.default_code),
            'upstream_status': upstream_status,
        }


def build_export_payload(items, integration):
    currency = integration.currency or 'PLN'
    return {
        'restaurantExternalId': integration.restaurant_external_id,
        'restaurantName': settings.RESTAURANT_NAME,
        'restaurantAddress': integration.restaurant_address,
        'restaurantPhone': integration.restaurant_phone,
        'currency': currency,
        'items': [
            {
                'id': item.sync_id,
                'name': item.name,
                'description': item.description,
                'price': float(item.price),
                'currency': currency,
                'image': item.image_url,
                'category': item.category,
                'calories': item.calories,
                'isEnabled': item.is_enabled,
            }
            for item in items
        ],
    }


def export_menu(items, integration, timeout=None):
    """
    POST the menu to the partner platform.

    On a 2xx answer `last_sync_at` is recorded. Any other outcome raises
    IntegrationError and leaves local state untouched.
    """
    if not integration.platform_url or not integration.api_key:
        raise ValidationError('Platform URL and API key must be configured before syncing.')

    items = list(items)
    payload = build_export_payload(items, integration)
    request = urllib.request.Request(
        integration.platform_url,
        data=json.dumps(payload).encode('utf-8'),
        headers={
            'x-api-key': integration.api_key,
            'Content-Type': 'application/json',
        },
        method='POST',
    )
    timeout = timeout or settings.INTEGRATION_SYNC_TIMEOUT

    logger.info("Exporting %s menu items to %s", len(items), integration.platform_url)
    try:
        with urllib.request.urlopen(request, timeout=timeout) as response:
            upstream_status = response.getcode()
    except urllib.error.HTTPError as e:
        logger.warning("Menu export rejected by %s: HTTP %s", integration.platform_url, e.code)
        raise IntegrationError(e.code)
    except (urllib.error.URLError, OSError) as e:
        logger.warning("Menu export to %s failed: %s", integration.platform_url, e)
        raise IntegrationError(None)

    if not 200 <= upstream_status < 300:
        logger.warning("Menu export to %s returned %s", integration.platform_url, upstream_status)
        raise IntegrationError(upstream_status)

    integration.last_sync_at = timezone.now()
    integration.save(update_fields=['last_sync_at', 'updated_at'])
    logger.info("Menu export to %s succeeded (%s)", integration.platform_url, upstream_status)

    return {
        'synced': len(items),
        'upstream_status': upstream_status,
        'last_sync_at': integration.last_sync_at,
    }


def import_menu(payload_items):
    """
    Upsert partner items keyed by the id the export sent (see MenuItemQuerySet.by_sync_id).

    Items that fail validation are skipped one by one; the rest of the batch
    is still applied. Returns processed/skipped counts with per-item errors.
    """
    result = {'processed': 0, 'created': 0, 'updated': 0, 'skipped': 0, 'errors': []}

    for index, raw in enumerate(payload_items or []):
        if not isinstance(raw, dict):
            result['skipped'] += 1
            result['errors'].append({'index': index, 'id': None, 'errors': ['Item must be an object.']})
            continue

        serializer = MenuImportItemSerializer(data=raw)
        if not serializer.is_valid():
            logger.warning("Skipping imported item %s: %s", raw.get('id'), serializer.errors)
            result['skipped'] += 1
            result['errors'].append({'index': index, 'id': raw.get('id'), 'errors': serializer.errors})
            continue

        sync_id = serializer.validated_data['id']
        item = MenuItem.objects.by_sync_id(sync_id)
        created = item is None
        if created:
            item = MenuItem(external_id=sync_id)
        for field, value in serializer.to_model_fields().items():
            setattr(item, field, value)
        item.save()

        result['processed'] += 1
        result['created' if created else 'updated'] += 1

    logger.info("Menu import: %s processed (%s created, %s updated), %s skipped",
                result['processed'], result['created'], result['updated'], result['skipped'])
    return result
