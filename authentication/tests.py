import pytest
from django.contrib.auth.models import AnonymousUser

from authentication.models import StaffUser
from authentication.permissions import (
    Capabilities, resolve_capabilities, can_manage_users, can_manage_integrations,
    can_manage_payments, can_manage_delivery, can_manage_menu, can_write_orders,
    can_read_orders
)


# =============== PERMISSION RESOLUTION ===============

@pytest.mark.django_db
class TestResolveCapabilities:
    def test_admin_holds_every_capability(self, admin_staff):
        caps = resolve_capabilities(admin_staff)
        assert caps == {
            Capabilities.MANAGE_USERS, Capabilities.MANAGE_INTEGRATIONS,
            Capabilities.MANAGE_PAYMENTS, Capabilities.MANAGE_DELIVERY,
            Capabilities.MANAGE_MENU, Capabilities.WRITE_ORDERS, Capabilities.READ_ORDERS,
        }

    def test_write_role_manages_menu_and_orders_only(self, write_staff):
        assert can_write_orders(write_staff)
        assert can_manage_menu(write_staff)
        assert can_read_orders(write_staff)
        assert not can_manage_users(write_staff)
        assert not can_manage_payments(write_staff)

    def test_read_only_role_can_only_read(self, read_only_staff):
        assert resolve_capabilities(read_only_staff) == {Capabilities.READ_ORDERS}
        assert not can_write_orders(read_only_staff)

    def test_flags_grant_capabilities_independently_of_role(self, make_user):
        user = make_user('deliveries', can_manage_delivery=True, can_manage_integrations=True)
        assert can_manage_delivery(user)
        assert can_manage_integrations(user)
        assert not can_manage_payments(user)
        assert not can_write_orders(user)

    def test_anonymous_and_inactive_users_get_nothing(self, make_user):
        inactive = make_user('gone', role=StaffUser.ROLE_ADMIN, is_active=False)
        assert resolve_capabilities(AnonymousUser()) == frozenset()
        assert resolve_capabilities(inactive) == frozenset()
        assert resolve_capabilities(None) == frozenset()


# =============== LOGIN / SESSION ===============

@pytest.mark.django_db
class TestLogin:
    def test_login_starts_session_and_returns_tokens(self, api_client, write_staff, password):
        response = api_client.post('/api/auth/login/', {
            'username': write_staff.username, 'password': password
        }, format='json')

        assert response.status_code == 200
        assert response.data['access']
        assert response.data['refresh']
        assert response.data['user']['role'] == StaffUser.ROLE_WRITE

        session = api_client.get('/api/auth/session/')
        assert session.data['isAuthenticated'] is True
        assert session.data['user']['username'] == write_staff.username

    def test_wrong_password_is_401(self, api_client, write_staff):
        response = api_client.post('/api/auth/login/', {
            'username': write_staff.username, 'password': 'nope-nope'
        }, format='json')

        assert response.status_code == 401
        assert response.data['error'] is True
        assert response.data['message'] == 'Invalid credentials'

    def test_session_for_anonymous(self, api_client):
        response = api_client.get('/api/auth/session/')
        assert response.status_code == 200
        assert response.data == {'isAuthenticated': False, 'user': None}

    def test_logout_ends_session(self, api_client, write_staff, password):
        api_client.post('/api/auth/login/', {
            'username': write_staff.username, 'password': password
        }, format='json')

        response = api_client.post('/api/auth/logout/')
        assert response.status_code == 200
        assert api_client.get('/api/auth/session/').data['isAuthenticated'] is False

    def test_bearer_token_authenticates(self, api_client, admin_staff, password):
        login = api_client.post('/api/auth/login/', {
            'username': admin_staff.username, 'password': password
        }, format='json')
        api_client.logout()

        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {login.data['access']}")
        assert api_client.get('/api/users/').status_code == 200


# =============== USER MANAGEMENT ===============

@pytest.mark.django_db
class TestUserManagement:
    def test_anonymous_gets_401(self, api_client):
        response = api_client.get('/api/users/')
        assert response.status_code == 401
        assert response.data['status_code'] == 401

    def test_user_without_capability_gets_403(self, client_for, write_staff):
        response = client_for(write_staff).get('/api/users/')
        assert response.status_code == 403

    def test_flag_grants_user_management(self, client_for, make_user):
        manager = make_user('hr', can_manage_users=True)
        assert client_for(manager).get('/api/users/').status_code == 200

    def test_create_user_hashes_password(self, client_for, admin_staff):
        response = client_for(admin_staff).post('/api/users/', {
            'username': 'driver', 'password': 'secret123', 'role': 'read_only',
            'can_manage_delivery': True
        }, format='json')

        assert response.status_code == 201
        assert 'password' not in response.data
        assert 'manage_delivery' in response.data['capabilities']
        user = StaffUser.objects.get(username='driver')
        assert user.check_password('secret123')

    def test_duplicate_username_is_conflict(self, client_for, admin_staff, write_staff):
        response = client_for(admin_staff).post('/api/users/', {
            'username': write_staff.username, 'password': 'secret123', 'role': 'write'
        }, format='json')

        assert response.status_code == 409
        assert response.data['message'] == 'Username already exists'

    def test_create_requires_password(self, client_for, admin_staff):
        response = client_for(admin_staff).post('/api/users/', {'username': 'nopass'}, format='json')
        assert response.status_code == 400
        assert 'password' in response.data['details']

    def test_cannot_delete_own_account(self, client_for, admin_staff):
        response = client_for(admin_staff).delete(f'/api/users/{admin_staff.pk}/')

        assert response.status_code == 400
        assert response.data['message'] == 'Cannot delete your own account'
        assert StaffUser.objects.filter(pk=admin_staff.pk).exists()

    def test_delete_other_account(self, client_for, admin_staff, read_only_staff):
        response = client_for(admin_staff).delete(f'/api/users/{read_only_staff.pk}/')
        assert response.status_code == 204
        assert not StaffUser.objects.filter(pk=read_only_staff.pk).exists()

    def test_update_role(self, client_for, admin_staff, read_only_staff):
        response = client_for(admin_staff).patch(
            f'/api/users/{read_only_staff.pk}/', {'role': 'write'}, format='json'
        )
        assert response.status_code == 200
        read_only_staff.refresh_from_db()
        assert read_only_staff.role == StaffUser.ROLE_WRITE


@pytest.mark.django_db
def test_health_check(api_client):
    response = api_client.get('/api/health/')
    assert response.status_code == 200
    assert response.data['status'] == 'healthy'


@pytest.mark.django_db
class TestDelegatedUserManagement:
    def test_flag_holder_cannot_promote_self_to_admin(self, client_for, make_user):
        manager = make_user('hr', can_manage_users=True)

        response = client_for(manager).patch(f'/api/users/{manager.pk}/', {'role': 'admin'}, format='json')

        assert response.status_code == 403
        manager.refresh_from_db()
        assert manager.role == StaffUser.ROLE_READ_ONLY

    def test_flag_holder_cannot_grant_flags_it_lacks(self, client_for, make_user, read_only_staff):
        manager = make_user('hr', can_manage_users=True)

        response = client_for(manager).patch(
            f'/api/users/{read_only_staff.pk}/', {'can_manage_payments': True}, format='json'
        )

        assert response.status_code == 403
        read_only_staff.refresh_from_db()
        assert read_only_staff.can_manage_payments is False

    def test_flag_holder_cannot_grant_write_role(self, client_for, make_user):
        manager = make_user('hr', can_manage_users=True)

        response = client_for(manager).post('/api/users/', {
            'username': 'cook2', 'password': 'secret123', 'role': 'write'
        }, format='json')

        assert response.status_code == 403
        assert not StaffUser.objects.filter(username='cook2').exists()

    def test_flag_holder_cannot_touch_admin_accounts(self, client_for, make_user, admin_staff):
        manager = make_user('hr', can_manage_users=True)
        client = client_for(manager)

        assert client.patch(f'/api/users/{admin_staff.pk}/', {'password': 'takeover-123'}, format='json').status_code == 403
        assert client.delete(f'/api/users/{admin_staff.pk}/').status_code == 403
        admin_staff.refresh_from_db()
        assert admin_staff.check_password('takeover-123') is False

    def test_flag_holder_can_grant_what_it_holds(self, client_for, make_user, read_only_staff):
        manager = make_user('hr', can_manage_users=True, can_manage_delivery=True)

        response = client_for(manager).patch(
            f'/api/users/{read_only_staff.pk}/', {'can_manage_delivery': True}, format='json'
        )

        assert response.status_code == 200
        read_only_staff.refresh_from_db()
        assert read_only_staff.can_manage_delivery is True
