from django.urls import path
from . import views


urlpatterns = [
    # Orders
    path('orders/', views.OrderListCreateView.as_view(), name='order-list-create'),
    path('orders/statistics/', views.order_statistics, name='order-statistics'),
    path('orders/<int:pk>/', views.OrderDetailView.as_view(), name='order-detail'),
    path('orders/<int:pk>/status/', views.OrderStatusUpdateView.as_view(), name='order-status-update'),

    # Session cart
    path('cart/', views.cart_detail, name='cart-detail'),
    path('cart/items/', views.cart_add_item, name='cart-add-item'),
    path('cart/items/<str:item_id>/', views.cart_update_item, name='cart-update-item'),
    path('cart/checkout/', views.cart_checkout, name='cart-checkout'),
]
