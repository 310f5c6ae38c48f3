from django.urls import path
from . import views


urlpatterns = [
    # Storefront
    path('payment-methods/', views.PublicPaymentMethodListView.as_view(), name='payment-method-public-list'),
    path('delivery-settings/', views.public_delivery_settings, name='delivery-settings-public'),
    path('ordering-settings/', views.public_ordering_settings, name='ordering-settings-public'),

    # Back office
    path('admin/payment-methods/', views.PaymentMethodListView.as_view(), name='payment-method-list'),
    path('admin/payment-methods/<str:name>/', views.PaymentMethodUpdateView.as_view(), name='payment-method-update'),
    path('admin/delivery-settings/', views.DeliverySettingsView.as_view(), name='delivery-settings'),
    path('admin/ordering-settings/', views.OrderingSettingsView.as_view(), name='ordering-settings'),
]
