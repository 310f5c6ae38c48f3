import logging
from collections.abc import Mapping

from rest_framework import status, generics, filters
from rest_framework.exceptions import ValidationError
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import AllowAny
from django.db import models
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django_filters.rest_framework import DjangoFilterBackend
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi

from authentication.permissions import CanReadOrders, CanWriteOrders
from configuration.models import DeliverySettings
from inventory.models import MenuItem
from .cart import Cart, QuantityLimitError, compute_subtotal, compute_delivery_fee, compute_total
from .models import Order
from .serializers import (
    OrderCreateSerializer, OrderReadSerializer, OrderStatusSerializer,
    ensure_ordering_enabled
)

logger = logging.getLogger(__name__)

CART_SESSION_KEY = 'cart'

# Statuses still needing work from the kitchen or the driver
OPEN_STATUSES = [Order.STATUS_PENDING, Order.STATUS_PREPARING, Order.STATUS_READY, Order.STATUS_IN_DELIVERY]


customer_properties = {
    'customer_name': openapi.Schema(type=openapi.TYPE_STRING),
    'address': openapi.Schema(type=openapi.TYPE_STRING),
    'phone': openapi.Schema(type=openapi.TYPE_STRING),
    'notes': openapi.Schema(type=openapi.TYPE_STRING),
    'delivery_date': openapi.Schema(type=openapi.TYPE_STRING, format=openapi.FORMAT_DATE),
    'delivery_time': openapi.Schema(type=openapi.TYPE_STRING, description='HH:MM inside the delivery window'),
    'payment_method': openapi.Schema(type=openapi.TYPE_STRING, description='Name of an enabled payment method'),
}


# =============== ORDERS ===============

class OrderListCreateView(generics.ListCreateAPIView):
    """
    get: List orders (staff), newest first
    post: Submit an order from the storefront
    """
    queryset = Order.objects.prefetch_related('items')
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['status', 'delivery_date', 'payment_method']
    search_fields = ['customer_name', 'address', 'phone']
    ordering_fields = ['created_at', 'delivery_date', 'delivery_time', 'total', 'status']
    ordering = ['-created_at']

    def get_permissions(self):
        if self.request.method == 'POST':
            return [AllowAny()]
        return [CanReadOrders()]

    def get_serializer_class(self):
        if self.request.method == 'POST':
            return OrderCreateSerializer
        return OrderReadSerializer

    @swagger_auto_schema(
        operation_description="Submit an order. Prices and totals are computed server-side.",
        request_body=openapi.Schema(
            type=openapi.TYPE_OBJECT,
            required=['customer_name', 'address', 'delivery_date', 'delivery_time', 'payment_method', 'items'],
            properties=dict(customer_properties, items=openapi.Schema(
                type=openapi.TYPE_ARRAY,
                items=openapi.Schema(
                    type=openapi.TYPE_OBJECT,
                    required=['menu_item_id', 'quantity'],
                    properties={
                        'menu_item_id': openapi.Schema(type=openapi.TYPE_INTEGER),
                        'quantity': openapi.Schema(type=openapi.TYPE_INTEGER, minimum=1),
                    }
                )
            ))
        ),
        responses={
            201: OrderReadSerializer,
            400: 'Bad Request'
        }
    )
    def post(self, request, *args, **kwargs):
        ensure_ordering_enabled()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = serializer.save()
        logger.info("Order %s submitted: %s item(s), total %s", order.pk, order.item_count, order.total)

        response_serializer = OrderReadSerializer(order)
        return Response(response_serializer.data, status=status.HTTP_201_CREATED)


class OrderDetailView(generics.RetrieveAPIView):
    """Retrieve a specific order"""
    queryset = Order.objects.prefetch_related('items')
    serializer_class = OrderReadSerializer
    permission_classes = [CanReadOrders]


class OrderStatusUpdateView(generics.UpdateAPIView):
    """Move an order through its lifecycle"""
    queryset = Order.objects.prefetch_related('items')
    serializer_class = OrderStatusSerializer
    permission_classes = [CanWriteOrders]
    http_method_names = ['patch', 'options']

    @swagger_auto_schema(
        operation_description="Update order status",
        request_body=OrderStatusSerializer,
        responses={200: OrderReadSerializer, 403: 'Forbidden'}
    )
    def patch(self, request, *args, **kwargs):
        order = self.get_object()
        previous_status = order.status
        serializer = self.get_serializer(order, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        logger.info("Order %s status %s -> %s by %s",
                    order.pk, previous_status, order.status, request.user.username)

        return Response(OrderReadSerializer(order).data)


@api_view(['GET'])
@permission_classes([CanReadOrders])
def order_statistics(request):
    """Get order statistics for dashboard"""
    today = timezone.localdate()
    orders = Order.objects.all()
    today_orders = orders.filter(created_at__date=today)

    by_status = dict(
        orders.values_list('status').annotate(count=models.Count('id')).order_by()
    )

    stats = {
        'today_orders': today_orders.count(),
        'open_orders': orders.filter(status__in=OPEN_STATUSES).count(),
        'by_status': {value: by_status.get(value, 0) for value, _ in Order.STATUS_CHOICES},
        'today_revenue': today_orders.exclude(status=Order.STATUS_CANCELLED).aggregate(
            total=models.Sum('total')
        )['total'] or 0,
    }

    return Response(stats)


# =============== SESSION CART ===============

def load_cart(request):
    return Cart.from_session(request.session.get(CART_SESSION_KEY))


def save_cart(request, cart):
    request.session[CART_SESSION_KEY] = cart.to_session()


def request_object(request):
    if not isinstance(request.data, Mapping):
        raise ValidationError('Request body must be a JSON object.')
    return request.data


def cart_response(cart, status_code=status.HTTP_200_OK):
    delivery_settings = DeliverySettings.load()
    lines = cart.lines
    subtotal = compute_subtotal(lines)
    return Response({
        'items': [
            dict(line.to_dict(), price=line.price, line_total=line.line_total)
            for line in lines
        ],
        'count': cart.count,
        'subtotal': subtotal,
        'delivery_fee': compute_delivery_fee(subtotal, delivery_settings),
        'total': compute_total(lines, delivery_settings),
    }, status=status_code)


@api_view(['GET', 'DELETE'])
@permission_classes([AllowAny])
def cart_detail(request):
    """
    get: Current cart with server-side totals
    delete: Empty the cart
    """
    cart = load_cart(request)
    if request.method == 'DELETE':
        cart.clear()
        save_cart(request, cart)
    return cart_response(cart)


@swagger_auto_schema(
    method='post',
    operation_description="Add one unit of a menu item to the cart",
    request_body=openapi.Schema(
        type=openapi.TYPE_OBJECT,
        required=['menu_item_id'],
        properties={'menu_item_id': openapi.Schema(type=openapi.TYPE_INTEGER)}
    ),
)
@api_view(['POST'])
@permission_classes([AllowAny])
def cart_add_item(request):
    menu_item_id = request_object(request).get('menu_item_id')
    if menu_item_id in (None, ''):
        return Response({'menu_item_id': ['This field is required.']}, status=status.HTTP_400_BAD_REQUEST)

    try:
        menu_item_id = int(menu_item_id)
    except (TypeError, ValueError):
        return Response({'menu_item_id': ['A valid integer is required.']}, status=status.HTTP_400_BAD_REQUEST)

    menu_item = get_object_or_404(MenuItem.objects.enabled(), pk=menu_item_id)
    cart = load_cart(request)
    try:
        cart.add_item(menu_item)
    except QuantityLimitError as exc:
        return Response({'menu_item_id': [str(exc)]}, status=status.HTTP_400_BAD_REQUEST)
    save_cart(request, cart)
    return cart_response(cart, status.HTTP_201_CREATED)


@swagger_auto_schema(
    method='patch',
    operation_description="Change a line's quantity by delta; reaching 0 removes the line",
    request_body=openapi.Schema(
        type=openapi.TYPE_OBJECT,
        required=['delta'],
        properties={'delta': openapi.Schema(type=openapi.TYPE_INTEGER)}
    ),
)
@api_view(['PATCH'])
@permission_classes([AllowAny])
def cart_update_item(request, item_id):
    try:
        delta = int(request_object(request).get('delta'))
    except (TypeError, ValueError):
        return Response({'delta': ['A valid integer is required.']}, status=status.HTTP_400_BAD_REQUEST)

    cart = load_cart(request)
    if cart.get_line(item_id) is None:
        return Response({'detail': 'Item is not in the cart.'}, status=status.HTTP_404_NOT_FOUND)

    try:
        cart.update_quantity(item_id, delta)
    except QuantityLimitError as exc:
        return Response({'delta': [str(exc)]}, status=status.HTTP_400_BAD_REQUEST)
    save_cart(request, cart)
    return cart_response(cart)


@swagger_auto_schema(
    method='post',
    operation_description="Submit the cart as an order. The cart is emptied only on success.",
    request_body=openapi.Schema(
        type=openapi.TYPE_OBJECT,
        required=['customer_name', 'address', 'delivery_date', 'delivery_time', 'payment_method'],
        properties=customer_properties
    ),
    responses={201: OrderReadSerializer, 400: 'Bad Request'}
)
@api_view(['POST'])
@permission_classes([AllowAny])
def cart_checkout(request):
    ensure_ordering_enabled()
    body = request_object(request)
    cart = load_cart(request)

    data = {key: value for key, value in body.items() if key != 'items'}
    data['items'] = [
        {'menu_item_id': line.item_id, 'quantity': line.quantity}
        for line in cart.lines
    ]

    serializer = OrderCreateSerializer(data=data, context={'request': request})
    serializer.is_valid(raise_exception=True)
    order = serializer.save()
    logger.info("Order %s submitted from session cart: total %s", order.pk, order.total)

    cart.clear()
    save_cart(request, cart)
    return Response(OrderReadSerializer(order).data, status=status.HTTP_201_CREATED)
