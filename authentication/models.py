from django.db import models
from django.contrib.auth.models import AbstractUser, UserManager


class TimeStampedModel(models.Model):
    """Base model with created_at and updated_at fields"""
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class StaffUserManager(UserManager):
    def create_superuser(self, username, email=None, password=None, **extra_fields):
        extra_fields.setdefault('role', StaffUser.ROLE_ADMIN)
        return super().create_superuser(username, email, password, **extra_fields)


# =============== USER MANAGEMENT ===============

class StaffUser(AbstractUser):
    """Back office account: a coarse role plus independent capability flags"""
    ROLE_ADMIN = 'admin'
    ROLE_WRITE = 'write'
    ROLE_READ_ONLY = 'read_only'

    ROLE_CHOICES = [
        (ROLE_ADMIN, 'Admin'),
        (ROLE_WRITE, 'Write'),
        (ROLE_READ_ONLY, 'Read only'),
    ]

    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_READ_ONLY)

    # Capability flags (ignored for admins, who hold every capability)
    can_manage_users = models.BooleanField(default=False)
    can_manage_integrations = models.BooleanField(default=False)
    can_manage_payments = models.BooleanField(default=False)
    can_manage_delivery = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = StaffUserManager()

    class Meta:
        db_table = 'users'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.username} ({self.role})"

    @property
    def is_admin(self):
        return self.role == self.ROLE_ADMIN
