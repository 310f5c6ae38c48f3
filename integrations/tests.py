import io
import json
import urllib.error
from decimal import Decimal
from unittest import mock

import pytest
from django.core.management import call_command
from rest_framework.exceptions import ValidationError

from integrations.models import IntegrationSettings
from integrations.sync import IntegrationError, build_export_payload, export_menu, import_menu
from inventory.models import MenuItem


@pytest.fixture
def integration(db):
    integration = IntegrationSettings.load()
    integration.platform_name = 'Pyszne'
    integration.platform_url = 'https://partner.example.com/api/external-menu'
    integration.api_key = 'partner-secret'
    integration.restaurant_external_id = 'partner-123'
    integration.restaurant_address = 'ul. Prosta 1'
    integration.restaurant_phone = '+48 600 000 000'
    integration.save()
    return integration


def upstream_response(code=200):
    response = mock.MagicMock()
    response.getcode.return_value = code
    response.__enter__.return_value = response
    return response


# =============== EXPORT ===============

@pytest.mark.django_db
class TestExport:
    def test_payload_shape(self, integration, make_menu_item, settings):
        settings.RESTAURANT_NAME = 'SIVIK Restaurant'
        imported = make_menu_item('Cheburek', '10.00', external_id='ext-1')
        local = make_menu_item('Kompot', '5.00', category='drinks', is_enabled=False)

        payload = build_export_payload([imported, local], integration)

        assert payload['restaurantExternalId'] == 'partner-123'
        assert payload['restaurantName'] == 'SIVIK Restaurant'
        assert payload['currency'] == 'PLN'
        assert [item['id'] for item in payload['items']] == ['ext-1', str(local.pk)]
        assert payload['items'][1]['isEnabled'] is False
        assert payload['items'][0]['price'] == 10.0

    def test_success_records_sync_time(self, integration, make_menu_item):
        make_menu_item('Cheburek', '10.00')

        with mock.patch('urllib.request.urlopen', return_value=upstream_response(200)) as urlopen:
            result = export_menu(MenuItem.objects.all(), integration)

        request = urlopen.call_args[0][0]
        assert request.get_method() == 'POST'
        assert request.full_url == integration.platform_url
        assert request.get_header('X-api-key') == 'partner-secret'
        assert json.loads(request.data)['items'][0]['name'] == 'Cheburek'
        assert result['synced'] == 1
        integration.refresh_from_db()
        assert integration.last_sync_at is not None

    def test_upstream_error_leaves_state_untouched(self, integration):
        error = urllib.error.HTTPError(integration.platform_url, 500, 'Server Error', {}, None)

        with mock.patch('urllib.request.urlopen', side_effect=error):
            with pytest.raises(IntegrationError) as excinfo:
                export_menu([], integration)

        assert excinfo.value.upstream_status == 500
        integration.refresh_from_db()
        assert integration.last_sync_at is None

    def test_unreachable_platform(self, integration):
        with mock.patch('urllib.request.urlopen', side_effect=urllib.error.URLError('refused')):
            with pytest.raises(IntegrationError) as excinfo:
                export_menu([], integration)

        assert excinfo.value.upstream_status is None

    def test_requires_url_and_key(self, db):
        with pytest.raises(ValidationError):
            export_menu([], IntegrationSettings.load())

    def test_sync_endpoint_reports_upstream_failure(self, integration, client_for, admin_staff):
        error = urllib.error.HTTPError(integration.platform_url, 401, 'Unauthorized', {}, None)

        with mock.patch('urllib.request.urlopen', side_effect=error):
            response = client_for(admin_staff).post('/api/admin/integration/sync/')

        assert response.status_code == 502
        assert response.data['details']['upstream_status'] == 401

    def test_sync_endpoint_success(self, integration, client_for, make_user, make_menu_item):
        make_menu_item('Cheburek', '10.00')
        integrator = make_user('integrator', can_manage_integrations=True)

        with mock.patch('urllib.request.urlopen', return_value=upstream_response(201)):
            response = client_for(integrator).post('/api/admin/integration/sync/')

        assert response.status_code == 200
        assert response.data['synced'] == 1
        assert response.data['upstream_status'] == 201

    def test_sync_requires_capability(self, integration, client_for, write_staff):
        with mock.patch('urllib.request.urlopen') as urlopen:
            response = client_for(write_staff).post('/api/admin/integration/sync/')

        assert response.status_code == 403
        urlopen.assert_not_called()

    def test_management_command_dry_run(self, integration, make_menu_item):
        make_menu_item('Cheburek', '10.00', external_id='ext-1')
        out = io.StringIO()

        with mock.patch('urllib.request.urlopen') as urlopen:
            call_command('export_menu', '--dry-run', stdout=out)

        urlopen.assert_not_called()
        assert 'ext-1: Cheburek' in out.getvalue()


# =============== SETTINGS ===============

@pytest.mark.django_db
class TestIntegrationSettings:
    def test_api_key_is_never_returned(self, integration, client_for, admin_staff):
        response = client_for(admin_staff).get('/api/admin/integration/')

        assert response.status_code == 200
        assert 'api_key' not in response.data
        assert response.data['has_api_key'] is True

    def test_update(self, client_for, admin_staff):
        response = client_for(admin_staff).patch('/api/admin/integration/', {
            'platform_url': 'https://partner.example.com/menu', 'api_key': 'k', 'currency': 'eur'
        }, format='json')

        assert response.status_code == 200
        integration = IntegrationSettings.load()
        assert integration.api_key == 'k'
        assert integration.currency == 'EUR'

    def test_read_only_forbidden(self, client_for, read_only_staff):
        assert client_for(read_only_staff).get('/api/admin/integration/').status_code == 403


# =============== IMPORT ===============

@pytest.mark.django_db
class TestImport:
    def test_duplicate_external_id_keeps_last_version(self):
        result = import_menu([
            {'id': 'ext-1', 'name': 'Cheburek', 'price': 10, 'category': 'chebureki'},
            {'id': 'ext-1', 'name': 'Cheburek XL', 'price': 14.5, 'category': 'chebureki', 'isEnabled': False},
        ])

        assert result['processed'] == 2
        item = MenuItem.objects.get(external_id='ext-1')
        assert MenuItem.objects.count() == 1
        assert item.name == 'Cheburek XL'
        assert item.price == Decimal('14.50')
        assert item.is_enabled is False

    def test_invalid_items_skipped_individually(self):
        result = import_menu([
            {'id': 'ext-1', 'name': 'Cheburek', 'price': 10},
            {'name': 'No id', 'price': 3},
            {'id': 'ext-2', 'name': 'Unknown category', 'price': 3, 'category': 'sushi'},
            'not an object',
        ])

        assert result['processed'] == 1
        assert result['skipped'] == 3
        assert [error['index'] for error in result['errors']] == [1, 2, 3]
        # Blank category falls back to the first configured one
        assert MenuItem.objects.get(external_id='ext-1').category == 'chebureki'

    def test_updates_existing_item(self, make_menu_item):
        make_menu_item('Old name', '1.00', external_id='ext-9')

        result = import_menu([{'id': 'ext-9', 'name': 'New name', 'price': '2.00'}])

        assert result['updated'] == 1
        assert MenuItem.objects.get(external_id='ext-9').name == 'New name'

    def test_endpoint_requires_key(self, api_client, settings):
        settings.MENU_IMPORT_API_KEY = 'inbound-secret'

        response = api_client.post('/api/integration/menu-import/', {'items': []}, format='json',
                                   HTTP_X_API_KEY='wrong')

        assert response.status_code == 401

    def test_endpoint_closed_without_configured_key(self, api_client, settings):
        settings.MENU_IMPORT_API_KEY = ''

        response = api_client.post('/api/integration/menu-import/', {'items': []}, format='json',
                                   HTTP_X_API_KEY='')

        assert response.status_code == 401

    def test_endpoint_imports(self, api_client, settings):
        settings.MENU_IMPORT_API_KEY = 'inbound-secret'

        response = api_client.post('/api/integration/menu-import/', {'items': [
            {'id': 'ext-1', 'name': 'Cheburek', 'price': 10, 'category': 'chebureki'},
        ]}, format='json', HTTP_X_API_KEY='inbound-secret')

        assert response.status_code == 200
        assert response.data['processed'] == 1
        assert MenuItem.objects.filter(external_id='ext-1').exists()

    def test_reimport_of_exported_local_item_updates_it(self, integration, make_menu_item):
        local = make_menu_item('Kompot', '5.00', category='drinks')
        exported = build_export_payload([local], integration)['items'][0]

        result = import_menu([dict(exported, name='Kompot wiśniowy', price=6)])

        assert result['updated'] == 1
        assert MenuItem.objects.count() == 1
        local.refresh_from_db()
        assert local.name == 'Kompot wiśniowy'
        assert local.price == Decimal('6.00')

    def test_numeric_id_does_not_claim_imported_item(self, make_menu_item):
        imported = make_menu_item('Cheburek', '10.00', external_id='ext-1')

        result = import_menu([{'id': str(imported.pk), 'name': 'Pelmeni', 'price': 12}])

        assert result['created'] == 1
        imported.refresh_from_db()
        assert imported.name == 'Cheburek'
