from decimal import Decimal

import pytest

from configuration.models import PaymentMethod, DeliverySettings, OrderingSettings


@pytest.mark.django_db
class TestPaymentMethods:
    def test_seeded_by_migration(self):
        assert set(PaymentMethod.objects.values_list('name', flat=True)) >= {'cash', 'card', 'blik', 'transfer'}

    def test_public_list_hides_disabled(self, api_client):
        PaymentMethod.objects.filter(name='blik').update(is_enabled=False)

        names = [method['name'] for method in api_client.get('/api/payment-methods/').data]

        assert 'blik' not in names
        assert 'cash' in names

    def test_staff_list_shows_all(self, client_for, read_only_staff):
        PaymentMethod.objects.filter(name='blik').update(is_enabled=False)

        response = client_for(read_only_staff).get('/api/admin/payment-methods/')

        assert {method['name'] for method in response.data} >= {'blik', 'cash'}

    def test_toggle_by_name_with_flag(self, client_for, make_user):
        cashier = make_user('cashier', can_manage_payments=True)

        response = client_for(cashier).patch('/api/admin/payment-methods/card/', {'is_enabled': False}, format='json')

        assert response.status_code == 200
        assert PaymentMethod.objects.get(name='card').is_enabled is False

    def test_toggle_without_capability_forbidden(self, client_for, write_staff):
        response = client_for(write_staff).patch('/api/admin/payment-methods/card/', {'is_enabled': False}, format='json')

        assert response.status_code == 403
        assert PaymentMethod.objects.get(name='card').is_enabled is True

    def test_unknown_method_is_404(self, client_for, admin_staff):
        response = client_for(admin_staff).patch('/api/admin/payment-methods/bitcoin/', {'is_enabled': True}, format='json')
        assert response.status_code == 404


@pytest.mark.django_db
class TestDeliverySettings:
    def test_singleton_load(self):
        first = DeliverySettings.load()
        second = DeliverySettings.load()

        assert first.pk == second.pk == 1
        assert DeliverySettings.objects.count() == 1
        assert first.is_enabled is False

    def test_public_read(self, api_client):
        response = api_client.get('/api/delivery-settings/')
        assert response.status_code == 200
        assert response.data['is_enabled'] is False

    def test_update_with_delivery_flag(self, client_for, make_user):
        dispatcher = make_user('dispatcher', can_manage_delivery=True)

        response = client_for(dispatcher).patch('/api/admin/delivery-settings/', {
            'is_enabled': True, 'min_order_amount': '60.00', 'delivery_fee': '9.99'
        }, format='json')

        assert response.status_code == 200
        settings = DeliverySettings.load()
        assert settings.is_enabled is True
        assert settings.min_order_amount == Decimal('60.00')
        assert settings.delivery_fee == Decimal('9.99')

    def test_read_only_can_view_but_not_update(self, client_for, read_only_staff):
        client = client_for(read_only_staff)

        assert client.get('/api/admin/delivery-settings/').status_code == 200
        response = client.patch('/api/admin/delivery-settings/', {'is_enabled': True}, format='json')
        assert response.status_code == 403
        assert DeliverySettings.load().is_enabled is False

    def test_negative_fee_rejected(self, client_for, admin_staff):
        response = client_for(admin_staff).patch(
            '/api/admin/delivery-settings/', {'delivery_fee': '-1.00'}, format='json'
        )
        assert response.status_code == 400


@pytest.mark.django_db
class TestOrderingSettings:
    def test_toggle_ordering(self, client_for, admin_staff, api_client):
        response = client_for(admin_staff).patch('/api/admin/ordering-settings/', {
            'is_enabled': False, 'disabled_message': 'Back tomorrow'
        }, format='json')

        assert response.status_code == 200
        assert OrderingSettings.load().is_enabled is False

        api_client.force_authenticate(user=None)
        public = api_client.get('/api/ordering-settings/')
        assert public.data['is_enabled'] is False
        assert public.data['message'] == 'Back tomorrow'

    def test_default_disabled_message(self):
        settings = OrderingSettings.load()
        assert settings.effective_disabled_message == OrderingSettings.DEFAULT_DISABLED_MESSAGE

    def test_requires_delivery_capability(self, client_for, write_staff):
        response = client_for(write_staff).patch(
            '/api/admin/ordering-settings/', {'is_enabled': False}, format='json'
        )
        assert response.status_code == 403
