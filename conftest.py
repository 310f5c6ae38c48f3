import datetime
from decimal import Decimal

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from authentication.models import StaffUser
from configuration.models import PaymentMethod
from inventory.models import MenuItem


PASSWORD = 'Str0ng-pass!'


@pytest.fixture
def password():
    return PASSWORD


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def make_user(db):
    def _make_user(username, role=StaffUser.ROLE_READ_ONLY, **flags):
        return StaffUser.objects.create_user(username=username, password=PASSWORD, role=role, **flags)
    return _make_user


@pytest.fixture
def admin_staff(make_user):
    return make_user('boss', role=StaffUser.ROLE_ADMIN)


@pytest.fixture
def write_staff(make_user):
    return make_user('cook', role=StaffUser.ROLE_WRITE)


@pytest.fixture
def read_only_staff(make_user):
    return make_user('viewer', role=StaffUser.ROLE_READ_ONLY)


@pytest.fixture
def client_for(api_client):
    """API client authenticated as the given user"""
    def _client_for(user):
        api_client.force_authenticate(user=user)
        return api_client
    return _client_for


@pytest.fixture
def make_menu_item(db):
    def _make_menu_item(name, price, category='chebureki', **extra):
        return MenuItem.objects.create(name=name, price=Decimal(str(price)), category=category, **extra)
    return _make_menu_item


@pytest.fixture
def cash(db):
    method, _ = PaymentMethod.objects.update_or_create(
        name='cash', defaults={'display_name': 'Cash', 'is_enabled': True}
    )
    return method


@pytest.fixture
def tomorrow():
    return timezone.localdate() + datetime.timedelta(days=1)


@pytest.fixture
def order_payload(cash, tomorrow):
    """Valid order body without items"""
    def _order_payload(items, **overrides):
        payload = {
            'customer_name': 'Anna Kowalska',
            'address': 'ul. Prosta 1, Warszawa',
            'phone': '+48 600 000 000',
            'delivery_date': tomorrow.isoformat(),
            'delivery_time': '14:00',
            'payment_method': cash.name,
            'items': items,
        }
        payload.update(overrides)
        return payload
    return _order_payload
