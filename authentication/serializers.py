from rest_framework import serializers
from rest_framework.exceptions import AuthenticationFailed, PermissionDenied
from django.contrib.auth import authenticate
from django.contrib.auth.password_validation import validate_password
from django.contrib.auth.validators import UnicodeUsernameValidator

from .exceptions import Conflict
from .models import StaffUser
from .permissions import CAPABILITY_FLAGS, ROLE_CAPABILITIES, resolve_capabilities


class StaffUserSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, validators=[validate_password], required=False)
    capabilities = serializers.SerializerMethodField(read_only=True)

    class Meta:
        model = StaffUser
        fields = [
            'id', 'username', 'password', 'role',
            'can_manage_users', 'can_manage_integrations',
            'can_manage_payments', 'can_manage_delivery',
            'capabilities', 'is_active', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']
        extra_kwargs = {
            # uniqueness is reported as 409 by validate_username
            'username': {'validators': [UnicodeUsernameValidator()]},
        }

    def get_capabilities(self, obj):
        return sorted(resolve_capabilities(obj))

    def validate_username(self, value):
        """Username must be unique across staff accounts"""
        queryset = StaffUser.objects.filter(username__iexact=value)
        if self.instance:
            queryset = queryset.exclude(pk=self.instance.pk)
        if queryset.exists():
            raise Conflict('Username already exists')
        return value

    def validate(self, attrs):
        if self.instance is None and not attrs.get('password'):
            raise serializers.ValidationError({'password': 'This field is required.'})
        self.check_grants(attrs)
        return attrs

    def check_grants(self, attrs):
        """
        Keep delegated user management from escalating privileges.

        A non-admin manager may only hand out a role or flag whose capabilities
        it already holds. Admin accounts and the admin role stay admin-only.
        """
        request = self.context.get('request')
        requester = getattr(request, 'user', None)
        if requester is None or getattr(requester, 'is_admin', False):
            return

        if self.instance is not None and self.instance.is_admin:
            raise PermissionDenied('Only admins can modify admin accounts')
        if attrs.get('role') == StaffUser.ROLE_ADMIN:
            raise PermissionDenied('Only admins can grant the admin role')

        held = resolve_capabilities(requester)
        role = attrs.get('role')
        role_changed = role is not None and (self.instance is None or role != self.instance.role)
        if role_changed and not ROLE_CAPABILITIES.get(role, set()) <= held:
            raise PermissionDenied(f'Cannot grant the {role} role without holding its access')
        for capability, flag in CAPABILITY_FLAGS.items():
            already_set = self.instance is not None and getattr(self.instance, flag)
            if attrs.get(flag) and not already_set and capability not in held:
                raise PermissionDenied(f'Cannot grant {flag} without holding it')

    def create(self, validated_data):
        password = validated_data.pop('password')
        user = StaffUser(**validated_data)
        user.set_password(password)
        user.save()
        return user

    def update(self, instance, validated_data):
        password = validated_data.pop('password', None)

        for attr, value in validated_data.items():
            setattr(instance, attr, value)

        if password:
            instance.set_password(password)

        instance.save()
        return instance


class SessionUserSerializer(serializers.ModelSerializer):
    """Shape of the user returned by login and session check"""
    capabilities = serializers.SerializerMethodField()

    class Meta:
        model = StaffUser
        fields = [
            'id', 'username', 'role',
            'can_manage_users', 'can_manage_integrations',
            'can_manage_payments', 'can_manage_delivery',
            'capabilities',
        ]

    def get_capabilities(self, obj):
        return sorted(resolve_capabilities(obj))


class LoginSerializer(serializers.Serializer):
    username = serializers.CharField()
    password = serializers.CharField(style={'input_type': 'password'}, trim_whitespace=False)

    def validate(self, attrs):
        request = self.context.get('request')
        user = authenticate(request=request, username=attrs['username'], password=attrs['password'])
        if not user:
            # inactive accounts are rejected by the ModelBackend as well
            raise AuthenticationFailed('Invalid credentials')

        attrs['user'] = user
        return attrs
