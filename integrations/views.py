import logging

from rest_framework import generics, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi

from authentication.permissions import CanManageIntegrations
from inventory.models import MenuItem
from .models import IntegrationSettings
from .permissions import HasMenuImportKey
from .serializers import IntegrationSettingsSerializer, MenuImportSerializer
from .sync import export_menu, import_menu

logger = logging.getLogger(__name__)


class IntegrationSettingsView(generics.RetrieveUpdateAPIView):
    """
    get: Partner platform connection settings
    patch: Update partner platform connection settings
    """
    serializer_class = IntegrationSettingsSerializer
    permission_classes = [CanManageIntegrations]
    http_method_names = ['get', 'patch', 'options']

    def get_object(self):
        return IntegrationSettings.load()

    def perform_update(self, serializer):
        integration = serializer.save()
        logger.info("Integration settings for %s updated by %s",
                    integration.platform_url or '(no url)', self.request.user.username)


@swagger_auto_schema(
    method='post',
    operation_description="Export the full menu to the partner platform",
    responses={
        200: openapi.Response(description="Menu exported"),
        400: openapi.Response(description="Integration not configured"),
        502: openapi.Response(description="Partner platform rejected the export or was unreachable"),
    }
)
@api_view(['POST'])
@permission_classes([CanManageIntegrations])
def sync_menu(request):
    integration = IntegrationSettings.load()
    result = export_menu(MenuItem.objects.all(), integration)
    logger.info("Menu sync triggered by %s", request.user.username)

    return Response({
        'detail': f"Exported {result['synced']} menu items.",
        **result
    })


@swagger_auto_schema(
    method='post',
    operation_description="Upsert menu items pushed by the partner platform (X-API-Key header)",
    request_body=openapi.Schema(
        type=openapi.TYPE_OBJECT,
        required=['items'],
        properties={
            'items': openapi.Schema(
                type=openapi.TYPE_ARRAY,
                items=openapi.Schema(
                    type=openapi.TYPE_OBJECT,
                    required=['id', 'name', 'price'],
                    properties={
                        'id': openapi.Schema(type=openapi.TYPE_STRING),
                        'name': openapi.Schema(type=openapi.TYPE_STRING),
                        'price': openapi.Schema(type=openapi.TYPE_NUMBER),
                        'description': openapi.Schema(type=openapi.TYPE_STRING),
                        'image': openapi.Schema(type=openapi.TYPE_STRING),
                        'category': openapi.Schema(type=openapi.TYPE_STRING),
                        'calories': openapi.Schema(type=openapi.TYPE_INTEGER),
                        'isEnabled': openapi.Schema(type=openapi.TYPE_BOOLEAN),
                    }
                )
            )
        }
    ),
)
@api_view(['POST'])
@permission_classes([HasMenuImportKey])
def menu_import(request):
    # A bare list is accepted as well as {"items": [...]}
    data = {'items': request.data} if isinstance(request.data, list) else request.data
    serializer = MenuImportSerializer(data=data)
    serializer.is_valid(raise_exception=True)

    result = import_menu(serializer.validated_data['items'])
    return Response(result, status=status.HTTP_200_OK)
