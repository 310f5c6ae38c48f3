import logging

from rest_framework import generics
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import AllowAny, IsAuthenticated
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters

from authentication.permissions import CanManageMenu
from .categories import menu_categories
from .models import MenuItem
from .serializers import MenuItemListSerializer, MenuItemSerializer, MenuStatusBulkUpdateSerializer

logger = logging.getLogger(__name__)


class MenuItemPublicListView(generics.ListAPIView):
    """
    get: List enabled menu items for the storefront
    """
    queryset = MenuItem.objects.enabled()
    serializer_class = MenuItemListSerializer
    permission_classes = [AllowAny]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter]
    filterset_fields = ['category']
    search_fields = ['name', 'description']


class MenuItemListCreateView(generics.ListCreateAPIView):
    """
    get: List all menu items, disabled ones included (staff)
    post: Create a new menu item (write access)
    """
    queryset = MenuItem.objects.all()
    serializer_class = MenuItemSerializer
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['category', 'is_enabled']
    search_fields = ['name', 'description', 'external_id']
    ordering_fields = ['name', 'price', 'category', 'created_at']
    ordering = ['-created_at']

    def get_permissions(self):
        if self.request.method == 'POST':
            return [CanManageMenu()]
        return [IsAuthenticated()]

    def perform_create(self, serializer):
        item = serializer.save()
        logger.info("Menu item %s (%s) created by %s", item.pk, item.name, self.request.user.username)


class MenuItemRetrieveUpdateDestroyView(generics.RetrieveUpdateDestroyAPIView):
    """
    get: Get menu item details (staff)
    put/patch: Update menu item (write access)
    delete: Delete menu item (write access)
    """
    queryset = MenuItem.objects.all()
    serializer_class = MenuItemSerializer

    def get_permissions(self):
        if self.request.method in ['PUT', 'PATCH', 'DELETE']:
            return [CanManageMenu()]
        return [IsAuthenticated()]

    def perform_destroy(self, instance):
        logger.info("Menu item %s (%s) deleted by %s", instance.pk, instance.name, self.request.user.username)
        instance.delete()


@api_view(['GET'])
@permission_classes([AllowAny])
def category_list(request):
    """Configured menu categories in display order"""
    return Response([
        {'slug': slug, 'label': label}
        for slug, label in menu_categories()
    ])


@api_view(['POST'])
@permission_classes([CanManageMenu])
def bulk_update_menu_status(request):
    """Enable or disable several menu items at once"""
    serializer = MenuStatusBulkUpdateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    menu_ids = serializer.validated_data['menu_ids']
    new_status = serializer.validated_data['is_enabled']

    updated_count = MenuItem.objects.filter(id__in=menu_ids).update(is_enabled=new_status)
    logger.info("%s menu items set is_enabled=%s by %s", updated_count, new_status, request.user.username)

    return Response({
        "detail": f"Updated {updated_count} menu items",
        "updated_count": updated_count
    })
