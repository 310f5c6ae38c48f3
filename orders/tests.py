import datetime
from decimal import Decimal
from types import SimpleNamespace

import pytest
from django.utils import timezone

from configuration.models import DeliverySettings, OrderingSettings, PaymentMethod
from orders.cart import (
    MAX_LINE_QUANTITY, Cart, CartLine, DeliveryWindowError, QuantityLimitError, compute_subtotal, compute_delivery_fee,
    compute_total, validate_delivery_window
)
from orders.models import Order


def dish(item_id, price, name=None):
    return SimpleNamespace(id=item_id, name=name or item_id, price=Decimal(price))


def delivery(is_enabled=True, min_order_amount='50.00', delivery_fee='8.00'):
    return SimpleNamespace(
        is_enabled=is_enabled,
        min_order_amount=Decimal(min_order_amount),
        delivery_fee=Decimal(delivery_fee),
    )


# =============== CART ===============

class TestCart:
    def test_repeated_add_keeps_one_line(self):
        cart = Cart()
        cheburek = dish('c1', '10.00')
        for _ in range(4):
            cart.add_item(cheburek)

        assert len(cart) == 1
        assert cart.get_line('c1').quantity == 4
        assert cart.count == 4

    def test_distinct_items_get_their_own_lines(self):
        cart = Cart()
        cart.add_item(dish('c1', '10.00'))
        cart.add_item(dish('d1', '5.00'))
        cart.add_item(dish('c1', '10.00'))

        assert [(line.item_id, line.quantity) for line in cart.lines] == [('c1', 2), ('d1', 1)]

    def test_update_quantity_to_zero_removes_line(self):
        cart = Cart()
        cart.add_item(dish('c1', '10.00'))
        cart.add_item(dish('c1', '10.00'))

        assert cart.update_quantity('c1', -1).quantity == 1
        assert cart.update_quantity('c1', -1) is None
        assert cart.get_line('c1') is None
        assert cart.count == 0

    def test_quantity_never_goes_negative(self):
        cart = Cart()
        cart.add_item(dish('c1', '10.00'))

        cart.update_quantity('c1', -5)

        assert cart.is_empty()
        assert cart.update_quantity('c1', -1) is None

    def test_clear(self):
        cart = Cart()
        cart.add_item(dish('c1', '10.00'))
        cart.clear()
        assert cart.count == 0

    def test_line_quantity_is_capped(self):
        cart = Cart()
        cheburek = dish('c1', '10.00')
        cart.add_item(cheburek)
        cart.update_quantity('c1', MAX_LINE_QUANTITY - 1)

        with pytest.raises(QuantityLimitError):
            cart.add_item(cheburek)
        with pytest.raises(QuantityLimitError):
            cart.update_quantity('c1', 10 ** 12)
        assert cart.get_line('c1').quantity == MAX_LINE_QUANTITY

    def test_session_round_trip_drops_corrupt_entries(self):
        cart = Cart()
        cart.add_item(dish(7, '12.50', name='Chinkali'))

        restored = Cart.from_session(cart.to_session() + [{'name': 'broken'}])

        assert restored.lines == [CartLine('7', 'Chinkali', Decimal('12.50'), 1)]


# =============== PRICING ===============

class TestPricing:
    def test_subtotal_counts_missing_price_as_zero(self):
        lines = [CartLine('c1', 'Cheburek', '10.00', 2), CartLine('x', 'Mystery', None, 3)]
        assert compute_subtotal(lines) == Decimal('20.00')

    def test_total_without_delivery_is_raw_sum(self):
        lines = [CartLine('c1', 'Cheburek', '10.00', 2), CartLine('d1', 'Kompot', '5.00', 1)]

        assert compute_total(lines, delivery(is_enabled=False)) == Decimal('25.00')
        assert compute_total(lines, None) == Decimal('25.00')

    def test_no_fee_below_minimum(self):
        lines = [CartLine('c1', 'Cheburek', '49.99', 1)]
        assert compute_total(lines, delivery()) == Decimal('49.99')

    def test_fee_at_and_above_minimum(self):
        at_minimum = [CartLine('c1', 'Cheburek', '25.00', 2)]
        above_minimum = [CartLine('c1', 'Cheburek', '25.00', 3)]

        assert compute_total(at_minimum, delivery()) == Decimal('58.00')
        assert compute_total(above_minimum, delivery()) == Decimal('83.00')

    def test_delivery_fee_rounds_to_two_places(self):
        fee = compute_delivery_fee(Decimal('100'), delivery(min_order_amount='0', delivery_fee='7.005'))
        assert fee == Decimal('7.01')


# =============== DELIVERY WINDOW ===============

class TestDeliveryWindow:
    @pytest.mark.parametrize('value', ['10:00', '13:30', '17:00', datetime.time(16, 59)])
    def test_accepted(self, value):
        assert validate_delivery_window(value)

    @pytest.mark.parametrize('value', ['09:59', '17:01', '23:00', datetime.time(7, 0)])
    def test_rejected(self, value):
        with pytest.raises(DeliveryWindowError):
            validate_delivery_window(value)

    def test_seconds_past_the_end_are_rejected(self):
        with pytest.raises(DeliveryWindowError):
            validate_delivery_window(datetime.time(17, 0, 59))

        assert validate_delivery_window(datetime.time(16, 59, 30)) == datetime.time(16, 59)

    def test_window_comes_from_settings(self, settings):
        settings.DELIVERY_WINDOW_START = '12:00'
        settings.DELIVERY_WINDOW_END = '20:00'

        assert validate_delivery_window('19:30') == datetime.time(19, 30)
        with pytest.raises(DeliveryWindowError):
            validate_delivery_window('11:00')


# =============== ORDER SUBMISSION ===============

@pytest.mark.django_db
class TestOrderSubmission:
    def test_end_to_end_example(self, api_client, make_menu_item, order_payload):
        cheburek = make_menu_item('Cheburek', '10.00')
        kompot = make_menu_item('Kompot', '5.00', category='drinks')
        items = [
            {'menu_item_id': cheburek.pk, 'quantity': 2},
            {'menu_item_id': kompot.pk, 'quantity': 1},
        ]

        rejected = api_client.post('/api/orders/', order_payload(items, delivery_time='18:00'), format='json')
        assert rejected.status_code == 400
        assert 'delivery_time' in rejected.data['details']
        assert not Order.objects.exists()

        response = api_client.post('/api/orders/', order_payload(items, delivery_time='14:00'), format='json')

        assert response.status_code == 201
        assert response.data['status'] == Order.STATUS_PENDING
        assert response.data['total'] == Decimal('25.00')
        assert response.data['delivery_fee'] == Decimal('0.00')
        assert response.data['delivery_time'] == '14:00'
        assert len(response.data['items']) == 2

    def test_prices_come_from_menu_not_client(self, api_client, make_menu_item, order_payload):
        cheburek = make_menu_item('Cheburek', '10.00')
        payload = order_payload([{'menu_item_id': cheburek.pk, 'quantity': 1, 'price': '0.01'}], total='0.01')

        response = api_client.post('/api/orders/', payload, format='json')

        assert response.status_code == 201
        order = Order.objects.get()
        assert order.total == Decimal('10.00')
        assert order.items.get().price == Decimal('10.00')

    def test_delivery_fee_applied_from_settings(self, api_client, make_menu_item, order_payload):
        DeliverySettings.objects.update_or_create(pk=1, defaults={
            'is_enabled': True, 'min_order_amount': Decimal('20.00'), 'delivery_fee': Decimal('7.50'),
        })
        cheburek = make_menu_item('Cheburek', '10.00')

        response = api_client.post(
            '/api/orders/', order_payload([{'menu_item_id': cheburek.pk, 'quantity': 2}]), format='json'
        )

        assert response.data['subtotal'] == Decimal('20.00')
        assert response.data['delivery_fee'] == Decimal('7.50')
        assert response.data['total'] == Decimal('27.50')

    def test_duplicate_items_are_merged(self, api_client, make_menu_item, order_payload):
        cheburek = make_menu_item('Cheburek', '10.00')
        items = [{'menu_item_id': cheburek.pk, 'quantity': 1}, {'menu_item_id': cheburek.pk, 'quantity': 2}]

        response = api_client.post('/api/orders/', order_payload(items), format='json')

        assert response.status_code == 201
        assert [(item['name'], item['quantity']) for item in response.data['items']] == [('Cheburek', 3)]

    def test_disabled_menu_item_rejected(self, api_client, make_menu_item, order_payload):
        hidden = make_menu_item('Hidden', '10.00', is_enabled=False)

        response = api_client.post(
            '/api/orders/', order_payload([{'menu_item_id': hidden.pk, 'quantity': 1}]), format='json'
        )

        assert response.status_code == 400
        assert 'items' in response.data['details']

    def test_empty_items_rejected(self, api_client, order_payload):
        response = api_client.post('/api/orders/', order_payload([]), format='json')
        assert response.status_code == 400
        assert 'items' in response.data['details']

    def test_zero_quantity_rejected(self, api_client, make_menu_item, order_payload):
        cheburek = make_menu_item('Cheburek', '10.00')
        response = api_client.post(
            '/api/orders/', order_payload([{'menu_item_id': cheburek.pk, 'quantity': 0}]), format='json'
        )
        assert response.status_code == 400

    def test_oversized_quantity_rejected(self, api_client, make_menu_item, order_payload):
        cheburek = make_menu_item('Cheburek', '10.00')

        response = api_client.post(
            '/api/orders/', order_payload([{'menu_item_id': cheburek.pk, 'quantity': 10 ** 12}]), format='json'
        )

        assert response.status_code == 400
        assert 'items' in response.data['details']
        assert not Order.objects.exists()

    def test_merged_quantity_over_limit_rejected(self, api_client, make_menu_item, order_payload):
        cheburek = make_menu_item('Cheburek', '10.00')
        items = [
            {'menu_item_id': cheburek.pk, 'quantity': MAX_LINE_QUANTITY},
            {'menu_item_id': cheburek.pk, 'quantity': 1},
        ]

        response = api_client.post('/api/orders/', order_payload(items), format='json')

        assert response.status_code == 400
        assert 'items' in response.data['details']

    def test_total_beyond_price_columns_rejected(self, api_client, make_menu_item, order_payload):
        banquet = make_menu_item('Banquet', '99999999.99')

        response = api_client.post(
            '/api/orders/', order_payload([{'menu_item_id': banquet.pk, 'quantity': 2}]), format='json'
        )

        assert response.status_code == 400
        assert not Order.objects.exists()

    def test_delivery_time_seconds_past_window_rejected(self, api_client, make_menu_item, order_payload):
        cheburek = make_menu_item('Cheburek', '10.00')

        response = api_client.post(
            '/api/orders/',
            order_payload([{'menu_item_id': cheburek.pk, 'quantity': 1}], delivery_time='17:00:59'),
            format='json'
        )

        assert response.status_code == 400
        assert 'delivery_time' in response.data['details']

    def test_missing_fields_rejected(self, api_client, make_menu_item, order_payload):
        cheburek = make_menu_item('Cheburek', '10.00')
        payload = order_payload([{'menu_item_id': cheburek.pk, 'quantity': 1}])
        del payload['customer_name']
        del payload['address']

        response = api_client.post('/api/orders/', payload, format='json')

        assert response.status_code == 400
        assert {'customer_name', 'address'} <= set(response.data['details'])

    def test_disabled_payment_method_rejected(self, api_client, make_menu_item, order_payload):
        PaymentMethod.objects.update_or_create(
            name='blik', defaults={'display_name': 'BLIK', 'is_enabled': False}
        )
        cheburek = make_menu_item('Cheburek', '10.00')

        response = api_client.post(
            '/api/orders/',
            order_payload([{'menu_item_id': cheburek.pk, 'quantity': 1}], payment_method='blik'),
            format='json'
        )

        assert response.status_code == 400
        assert 'payment_method' in response.data['details']

    def test_past_delivery_date_rejected(self, api_client, make_menu_item, order_payload):
        cheburek = make_menu_item('Cheburek', '10.00')
        yesterday = timezone.localdate() - datetime.timedelta(days=1)

        response = api_client.post(
            '/api/orders/',
            order_payload([{'menu_item_id': cheburek.pk, 'quantity': 1}], delivery_date=yesterday.isoformat()),
            format='json'
        )

        assert response.status_code == 400
        assert 'delivery_date' in response.data['details']

    def test_ordering_disabled(self, api_client, make_menu_item, order_payload):
        OrderingSettings.objects.update_or_create(pk=1, defaults={
            'is_enabled': False, 'disabled_message': 'Closed for holidays',
        })
        cheburek = make_menu_item('Cheburek', '10.00')

        response = api_client.post(
            '/api/orders/', order_payload([{'menu_item_id': cheburek.pk, 'quantity': 1}]), format='json'
        )

        assert response.status_code == 400
        assert response.data['message'] == 'Closed for holidays'
        assert not Order.objects.exists()


# =============== ORDER MANAGEMENT ===============

@pytest.fixture
def order(db, tomorrow):
    return Order.objects.create(
        customer_name='Jan', address='ul. Długa 5', delivery_date=tomorrow,
        delivery_time=datetime.time(12, 0), payment_method='cash',
        subtotal=Decimal('20.00'), total=Decimal('20.00'),
    )


@pytest.mark.django_db
class TestOrderManagement:
    def test_list_requires_login(self, api_client, order):
        assert api_client.get('/api/orders/').status_code == 401

    def test_read_only_can_list_and_filter(self, client_for, read_only_staff, order, tomorrow):
        Order.objects.create(
            customer_name='Ola', address='ul. Krótka 2', delivery_date=tomorrow,
            delivery_time=datetime.time(15, 0), payment_method='cash', status=Order.STATUS_READY,
        )
        client = client_for(read_only_staff)

        assert len(client.get('/api/orders/').data) == 2
        pending = client.get('/api/orders/', {'status': 'pending'}).data
        assert [o['customer_name'] for o in pending] == ['Jan']

    def test_read_only_cannot_change_status(self, client_for, read_only_staff, order):
        response = client_for(read_only_staff).patch(
            f'/api/orders/{order.pk}/status/', {'status': 'preparing'}, format='json'
        )

        assert response.status_code == 403
        order.refresh_from_db()
        assert order.status == Order.STATUS_PENDING

    def test_anonymous_cannot_change_status(self, api_client, order):
        response = api_client.patch(f'/api/orders/{order.pk}/status/', {'status': 'preparing'}, format='json')
        assert response.status_code == 401

    def test_write_role_changes_status(self, client_for, write_staff, order):
        response = client_for(write_staff).patch(
            f'/api/orders/{order.pk}/status/', {'status': 'in_delivery'}, format='json'
        )

        assert response.status_code == 200
        assert response.data['status'] == Order.STATUS_IN_DELIVERY
        order.refresh_from_db()
        assert order.status == Order.STATUS_IN_DELIVERY

    def test_unknown_status_rejected(self, client_for, write_staff, order):
        response = client_for(write_staff).patch(
            f'/api/orders/{order.pk}/status/', {'status': 'eaten'}, format='json'
        )
        assert response.status_code == 400

    def test_status_patch_ignores_other_fields(self, client_for, write_staff, order):
        client_for(write_staff).patch(
            f'/api/orders/{order.pk}/status/', {'status': 'paid', 'total': '1.00'}, format='json'
        )
        order.refresh_from_db()
        assert order.total == Decimal('20.00')

    def test_detail_and_missing_order(self, client_for, read_only_staff, order):
        client = client_for(read_only_staff)
        assert client.get(f'/api/orders/{order.pk}/').data['customer_name'] == 'Jan'

        missing = client.get('/api/orders/999999/')
        assert missing.status_code == 404
        assert missing.data['error'] is True

    def test_statistics(self, client_for, read_only_staff, order):
        response = client_for(read_only_staff).get('/api/orders/statistics/')

        assert response.status_code == 200
        assert response.data['open_orders'] == 1
        assert response.data['by_status']['pending'] == 1
        assert response.data['by_status']['cancelled'] == 0


# =============== SESSION CART ===============

@pytest.mark.django_db
class TestSessionCart:
    def test_add_update_and_totals(self, api_client, make_menu_item):
        cheburek = make_menu_item('Cheburek', '10.00')
        kompot = make_menu_item('Kompot', '5.00', category='drinks')

        api_client.post('/api/cart/items/', {'menu_item_id': cheburek.pk}, format='json')
        api_client.post('/api/cart/items/', {'menu_item_id': cheburek.pk}, format='json')
        response = api_client.post('/api/cart/items/', {'menu_item_id': kompot.pk}, format='json')

        assert response.status_code == 201
        assert response.data['count'] == 3
        assert response.data['total'] == Decimal('25.00')

        response = api_client.patch(f'/api/cart/items/{kompot.pk}/', {'delta': -1}, format='json')
        assert [line['item_id'] for line in response.data['items']] == [str(cheburek.pk)]
        assert api_client.get('/api/cart/').data['count'] == 2

    def test_quantity_limit(self, api_client, make_menu_item):
        cheburek = make_menu_item('Cheburek', '10.00')
        api_client.post('/api/cart/items/', {'menu_item_id': cheburek.pk}, format='json')

        response = api_client.patch(f'/api/cart/items/{cheburek.pk}/', {'delta': 10 ** 12}, format='json')

        assert response.status_code == 400
        assert api_client.get('/api/cart/').data['count'] == 1

    def test_non_object_body_rejected(self, api_client, make_menu_item):
        cheburek = make_menu_item('Cheburek', '10.00')
        api_client.post('/api/cart/items/', {'menu_item_id': cheburek.pk}, format='json')

        assert api_client.post('/api/cart/checkout/', [1, 2], format='json').status_code == 400
        assert api_client.post('/api/cart/items/', [cheburek.pk], format='json').status_code == 400
        assert api_client.patch(f'/api/cart/items/{cheburek.pk}/', [1], format='json').status_code == 400
        assert api_client.get('/api/cart/').data['count'] == 1

    def test_disabled_item_cannot_be_added(self, api_client, make_menu_item):
        hidden = make_menu_item('Hidden', '10.00', is_enabled=False)
        response = api_client.post('/api/cart/items/', {'menu_item_id': hidden.pk}, format='json')
        assert response.status_code == 404

    def test_clear(self, api_client, make_menu_item):
        cheburek = make_menu_item('Cheburek', '10.00')
        api_client.post('/api/cart/items/', {'menu_item_id': cheburek.pk}, format='json')

        response = api_client.delete('/api/cart/')

        assert response.data['count'] == 0
        assert response.data['items'] == []

    def test_checkout_failure_keeps_cart(self, api_client, make_menu_item, order_payload):
        cheburek = make_menu_item('Cheburek', '10.00')
        api_client.post('/api/cart/items/', {'menu_item_id': cheburek.pk}, format='json')
        details = order_payload([], delivery_time='09:00')
        del details['items']

        response = api_client.post('/api/cart/checkout/', details, format='json')

        assert response.status_code == 400
        assert api_client.get('/api/cart/').data['count'] == 1

    def test_checkout_success_clears_cart(self, api_client, make_menu_item, order_payload):
        cheburek = make_menu_item('Cheburek', '10.00')
        api_client.post('/api/cart/items/', {'menu_item_id': cheburek.pk}, format='json')
        api_client.post('/api/cart/items/', {'menu_item_id': cheburek.pk}, format='json')
        details = order_payload([])
        del details['items']

        response = api_client.post('/api/cart/checkout/', details, format='json')

        assert response.status_code == 201
        assert response.data['total'] == Decimal('20.00')
        assert response.data['status'] == Order.STATUS_PENDING
        assert api_client.get('/api/cart/').data['count'] == 0

    def test_checkout_of_empty_cart_rejected(self, api_client, order_payload):
        details = order_payload([])
        del details['items']

        response = api_client.post('/api/cart/checkout/', details, format='json')

        assert response.status_code == 400
        assert 'items' in response.data['details']
