from django.urls import path
from . import views


urlpatterns = [
    # Storefront
    path('menu-items/', views.MenuItemPublicListView.as_view(), name='menu-public-list'),
    path('menu-items/categories/', views.category_list, name='menu-categories'),

    # Back office
    path('admin/menu-items/', views.MenuItemListCreateView.as_view(), name='menu-list-create'),
    path('admin/menu-items/bulk-update-status/', views.bulk_update_menu_status, name='menu-bulk-update-status'),
    path('admin/menu-items/<int:pk>/', views.MenuItemRetrieveUpdateDestroyView.as_view(), name='menu-detail'),
]
