from decimal import Decimal

import pytest

from inventory.models import MenuItem


@pytest.mark.django_db
class TestPublicMenu:
    def test_only_enabled_items_are_listed(self, api_client, make_menu_item):
        make_menu_item('Cheburek with meat', '12.50')
        make_menu_item('Seasonal soup', '9.00', category='soups', is_enabled=False)

        response = api_client.get('/api/menu-items/')

        assert response.status_code == 200
        assert [item['name'] for item in response.data] == ['Cheburek with meat']

    def test_filter_by_category(self, api_client, make_menu_item):
        make_menu_item('Cheburek with cheese', '11.00')
        make_menu_item('Kompot', '6.00', category='drinks')

        response = api_client.get('/api/menu-items/', {'category': 'drinks'})

        assert [item['name'] for item in response.data] == ['Kompot']
        assert response.data[0]['category_label'] == 'Drinks'

    def test_categories_follow_configuration(self, api_client, settings):
        settings.MENU_CATEGORIES = [('pizza', 'Pizza'), ('drinks', 'Drinks')]

        response = api_client.get('/api/menu-items/categories/')

        assert response.data == [
            {'slug': 'pizza', 'label': 'Pizza'},
            {'slug': 'drinks', 'label': 'Drinks'},
        ]


@pytest.mark.django_db
class TestMenuManagement:
    payload = {
        'name': 'Chinkali with beef',
        'description': 'Five pieces',
        'category': 'chinkali',
        'price': '24.00',
        'calories': 640,
    }

    def test_staff_list_includes_disabled_items(self, client_for, read_only_staff, make_menu_item):
        make_menu_item('Hidden dish', '10.00', is_enabled=False)

        response = client_for(read_only_staff).get('/api/admin/menu-items/')

        assert response.status_code == 200
        assert response.data[0]['is_enabled'] is False

    def test_anonymous_is_401(self, api_client):
        assert api_client.get('/api/admin/menu-items/').status_code == 401

    def test_write_role_creates_item(self, client_for, write_staff):
        response = client_for(write_staff).post('/api/admin/menu-items/', self.payload, format='json')

        assert response.status_code == 201
        item = MenuItem.objects.get(name='Chinkali with beef')
        assert item.price == Decimal('24.00')
        assert item.external_id is None

    def test_read_only_cannot_create(self, client_for, read_only_staff):
        response = client_for(read_only_staff).post('/api/admin/menu-items/', self.payload, format='json')

        assert response.status_code == 403
        assert not MenuItem.objects.exists()

    def test_unknown_category_rejected(self, client_for, admin_staff):
        response = client_for(admin_staff).post(
            '/api/admin/menu-items/', dict(self.payload, category='sushi'), format='json'
        )

        assert response.status_code == 400
        assert 'category' in response.data['details']

    def test_negative_price_rejected(self, client_for, admin_staff):
        response = client_for(admin_staff).post(
            '/api/admin/menu-items/', dict(self.payload, price='-1.00'), format='json'
        )
        assert response.status_code == 400

    def test_duplicate_external_id_is_conflict(self, client_for, admin_staff, make_menu_item):
        make_menu_item('Imported', '5.00', external_id='ext-1')

        response = client_for(admin_staff).post(
            '/api/admin/menu-items/', dict(self.payload, external_id='ext-1'), format='json'
        )

        assert response.status_code == 409

    def test_toggle_item(self, client_for, write_staff, make_menu_item):
        item = make_menu_item('Borscht', '14.00', category='soups')

        response = client_for(write_staff).patch(
            f'/api/admin/menu-items/{item.pk}/', {'is_enabled': False}, format='json'
        )

        assert response.status_code == 200
        item.refresh_from_db()
        assert item.is_enabled is False

    def test_delete_item(self, client_for, write_staff, make_menu_item):
        item = make_menu_item('Borscht', '14.00', category='soups')

        response = client_for(write_staff).delete(f'/api/admin/menu-items/{item.pk}/')

        assert response.status_code == 204
        assert not MenuItem.objects.filter(pk=item.pk).exists()

    def test_bulk_update_status(self, client_for, write_staff, make_menu_item):
        first = make_menu_item('One', '1.00')
        second = make_menu_item('Two', '2.00')

        response = client_for(write_staff).post('/api/admin/menu-items/bulk-update-status/', {
            'menu_ids': [first.pk, second.pk], 'is_enabled': False
        }, format='json')

        assert response.status_code == 200
        assert response.data['updated_count'] == 2
        assert not MenuItem.objects.enabled().exists()

    def test_bulk_update_rejects_non_numeric_ids(self, client_for, write_staff, make_menu_item):
        make_menu_item('One', '1.00')

        response = client_for(write_staff).post('/api/admin/menu-items/bulk-update-status/', {
            'menu_ids': ['abc'], 'is_enabled': False
        }, format='json')

        assert response.status_code == 400
        assert 'menu_ids' in response.data['details']
        assert MenuItem.objects.enabled().count() == 1

    def test_bulk_update_rejects_non_list_ids(self, client_for, write_staff, make_menu_item):
        first = make_menu_item('One', '1.00')
        second = make_menu_item('Two', '2.00')

        response = client_for(write_staff).post('/api/admin/menu-items/bulk-update-status/', {
            'menu_ids': f'{first.pk}{second.pk}', 'is_enabled': False
        }, format='json')

        assert response.status_code == 400
        assert MenuItem.objects.enabled().count() == 2

    def test_bulk_update_requires_ids(self, client_for, write_staff):
        response = client_for(write_staff).post('/api/admin/menu-items/bulk-update-status/', {
            'menu_ids': [], 'is_enabled': False
        }, format='json')

        assert response.status_code == 400
