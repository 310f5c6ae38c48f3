import logging

from rest_framework import generics
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from drf_yasg.utils import swagger_auto_schema

from authentication.permissions import CanManagePayments, CanManageDelivery
from .models import PaymentMethod, DeliverySettings, OrderingSettings
from .serializers import (
    PaymentMethodSerializer, PublicPaymentMethodSerializer,
    DeliverySettingsSerializer, OrderingSettingsSerializer
)

logger = logging.getLogger(__name__)


# =============== PAYMENT METHODS ===============

class PublicPaymentMethodListView(generics.ListAPIView):
    """Payment methods offered at checkout (enabled only)"""
    queryset = PaymentMethod.objects.filter(is_enabled=True)
    serializer_class = PublicPaymentMethodSerializer
    permission_classes = [AllowAny]
    pagination_class = None


class PaymentMethodListView(generics.ListAPIView):
    """All payment methods, enabled or not (staff)"""
    queryset = PaymentMethod.objects.all()
    serializer_class = PaymentMethodSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = None


class PaymentMethodUpdateView(generics.UpdateAPIView):
    """Toggle or rename a payment method, addressed by its name"""
    queryset = PaymentMethod.objects.all()
    serializer_class = PaymentMethodSerializer
    permission_classes = [CanManagePayments]
    lookup_field = 'name'
    http_method_names = ['patch', 'options']

    def perform_update(self, serializer):
        method = serializer.save()
        logger.info("Payment method %s set is_enabled=%s by %s",
                    method.name, method.is_enabled, self.request.user.username)


# =============== DELIVERY & ORDERING SETTINGS ===============

@api_view(['GET'])
@permission_classes([AllowAny])
def public_delivery_settings(request):
    """Delivery pricing shown in the storefront cart"""
    serializer = DeliverySettingsSerializer(DeliverySettings.load())
    return Response(serializer.data)


class DeliverySettingsView(generics.RetrieveUpdateAPIView):
    """
    get: Current delivery pricing (staff)
    patch: Change delivery pricing
    """
    serializer_class = DeliverySettingsSerializer
    http_method_names = ['get', 'patch', 'options']

    def get_permissions(self):
        if self.request.method == 'PATCH':
            return [CanManageDelivery()]
        return [IsAuthenticated()]

    def get_object(self):
        return DeliverySettings.load()

    @swagger_auto_schema(
        operation_description="Update delivery pricing",
        request_body=DeliverySettingsSerializer,
        responses={200: DeliverySettingsSerializer, 403: 'Forbidden'}
    )
    def patch(self, request, *args, **kwargs):
        return self.partial_update(request, *args, **kwargs)

    def perform_update(self, serializer):
        delivery = serializer.save()
        logger.info("Delivery settings updated by %s: enabled=%s min=%s fee=%s",
                    self.request.user.username, delivery.is_enabled,
                    delivery.min_order_amount, delivery.delivery_fee)


@api_view(['GET'])
@permission_classes([AllowAny])
def public_ordering_settings(request):
    """Whether the storefront currently accepts orders"""
    serializer = OrderingSettingsSerializer(OrderingSettings.load())
    return Response(serializer.data)


class OrderingSettingsView(generics.UpdateAPIView):
    """Switch ordering on or off"""
    serializer_class = OrderingSettingsSerializer
    permission_classes = [CanManageDelivery]
    http_method_names = ['patch', 'options']

    def get_object(self):
        return OrderingSettings.load()

    def perform_update(self, serializer):
        ordering = serializer.save()
        logger.info("Ordering %s by %s",
                    'enabled' if ordering.is_enabled else 'disabled',
                    self.request.user.username)
