from django.urls import path
from . import views


urlpatterns = [
    path('admin/integration/', views.IntegrationSettingsView.as_view(), name='integration-settings'),
    path('admin/integration/sync/', views.sync_menu, name='integration-sync'),
    path('integration/menu-import/', views.menu_import, name='integration-menu-import'),
]
