import logging

from rest_framework import generics, status, permissions
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.exceptions import ValidationError, AuthenticationFailed, PermissionDenied
from rest_framework_simplejwt.tokens import RefreshToken
from django.contrib.auth import login, logout
from django.db import connection, DatabaseError
from django.utils import timezone
from drf_spectacular.utils import extend_schema, OpenApiExample

from .models import StaffUser
from .serializers import StaffUserSerializer, SessionUserSerializer, LoginSerializer
from .permissions import CanManageUsers

logger = logging.getLogger(__name__)


# =============== AUTHENTICATION VIEWS ===============

class LoginView(APIView):
    """
    Staff login.

    Starts a cookie session for the back office and also returns a JWT pair
    for clients that prefer bearer tokens.
    """
    permission_classes = [permissions.AllowAny]

    @extend_schema(
        summary="Staff Login",
        description="""
        Authenticate a staff account with username and password.
        - Sets the session cookie used by the back office
        - Returns JWT tokens with the user's role and capabilities
        """,
        request=LoginSerializer,
        responses={
            200: {
                'type': 'object',
                'properties': {
                    'refresh': {'type': 'string', 'description': 'JWT refresh token'},
                    'access': {'type': 'string', 'description': 'JWT access token'},
                    'user': {'type': 'object', 'description': 'User information'},
                }
            },
            400: {'description': 'Missing username or password'},
            401: {'description': 'Invalid credentials'},
        },
        examples=[
            OpenApiExample(
                'Staff Login',
                value={
                    "username": "admin",
                    "password": "SecurePassword123!"
                }
            )
        ]
    )
    def post(self, request, *args, **kwargs):
        serializer = LoginSerializer(data=request.data, context={'request': request})
        try:
            serializer.is_valid(raise_exception=True)
        except (ValidationError, AuthenticationFailed):
            logger.info("Failed login attempt for %r", request.data.get('username'))
            raise

        user = serializer.validated_data['user']
        login(request, user)

        # Generate tokens
        refresh = RefreshToken.for_user(user)
        refresh['role'] = user.role

        logger.info("Login successful for %s", user.username)

        return Response({
            'refresh': str(refresh),
            'access': str(refresh.access_token),
            'user': SessionUserSerializer(user).data,
        }, status=status.HTTP_200_OK)


@extend_schema(
    summary="Logout",
    description="End the current session.",
    request=None,
    responses={200: {'type': 'object', 'properties': {'message': {'type': 'string'}}}}
)
@api_view(['POST'])
@permission_classes([permissions.AllowAny])
def logout_view(request):
    if request.user.is_authenticated:
        logger.info("Logout for %s", request.user.username)
    logout(request)
    return Response({'message': 'Logged out successfully'})


@extend_schema(
    summary="Check Session",
    description="Report whether the caller is authenticated and who they are.",
    responses={
        200: {
            'type': 'object',
            'properties': {
                'isAuthenticated': {'type': 'boolean'},
                'user': {'type': 'object', 'nullable': True},
            }
        }
    }
)
@api_view(['GET'])
@permission_classes([permissions.AllowAny])
def session_view(request):
    if request.user.is_authenticated:
        return Response({
            'isAuthenticated': True,
            'user': SessionUserSerializer(request.user).data,
        })
    return Response({'isAuthenticated': False, 'user': None})


# =============== USER MANAGEMENT VIEWS ===============

class StaffUserListCreateView(generics.ListCreateAPIView):
    """
    List and create staff accounts.
    Requires the manage-users capability.
    """
    queryset = StaffUser.objects.all()
    serializer_class = StaffUserSerializer
    permission_classes = [CanManageUsers]

    @extend_schema(
        summary="Create Staff User",
        description="Create a staff account. Duplicate usernames are rejected with 409.",
        request=StaffUserSerializer,
        responses={
            201: StaffUserSerializer,
            409: {'description': 'Username already exists'}
        },
        examples=[
            OpenApiExample(
                'Create Read-only User',
                value={
                    "username": "kitchen",
                    "password": "SecurePassword123!",
                    "role": "read_only",
                    "can_manage_delivery": True
                }
            )
        ]
    )
    def post(self, request, *args, **kwargs):
        return super().post(request, *args, **kwargs)

    def perform_create(self, serializer):
        user = serializer.save()
        logger.info("Staff user %s created by %s", user.username, self.request.user.username)


class StaffUserDetailView(generics.RetrieveUpdateDestroyAPIView):
    """
    Retrieve, update or delete a staff account.
    Requires the manage-users capability.
    """
    queryset = StaffUser.objects.all()
    serializer_class = StaffUserSerializer
    permission_classes = [CanManageUsers]

    def perform_update(self, serializer):
        user = serializer.save()
        logger.info("Staff user %s updated by %s", user.username, self.request.user.username)

    def perform_destroy(self, instance):
        if instance.pk == self.request.user.pk:
            raise ValidationError('Cannot delete your own account')
        if instance.is_admin and not self.request.user.is_admin:
            raise PermissionDenied('Only admins can delete admin accounts')

        logger.info("Staff user %s deleted by %s", instance.username, self.request.user.username)
        instance.delete()


# =============== SYSTEM HEALTH & MONITORING ===============

@extend_schema(
    summary="System Health Check",
    description="Check system health and database connectivity",
    responses={
        200: {
            'type': 'object',
            'properties': {
                'status': {'type': 'string'},
                'timestamp': {'type': 'string'},
                'database': {'type': 'string'},
                'version': {'type': 'string'},
            }
        }
    }
)
@api_view(['GET'])
@permission_classes([permissions.AllowAny])
def health_check(request):
    try:
        # Test database connection
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")

        return Response({
            'status': 'healthy',
            'timestamp': timezone.now().isoformat(),
            'database': 'connected',
            'version': '1.0.0'
        })
    except DatabaseError as e:
        logger.exception("Health check failed")
        return Response({
            'status': 'unhealthy',
            'timestamp': timezone.now().isoformat(),
            'database': 'disconnected',
            'error': str(e)
        }, status=status.HTTP_503_SERVICE_UNAVAILABLE)
