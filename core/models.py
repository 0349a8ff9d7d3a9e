"""
CORE App - Users and Company letterhead

Handles: Users (Admins, Billing Operators), issuing Company profile
"""

import uuid
from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.core.validators import RegexValidator
from django.db import models


class UserRole(models.TextChoices):
    """User role enumeration."""
    ADMIN = 'ADMIN', 'Administrator'
    BILLING_OPERATOR = 'BILLING_OPERATOR', 'Billing Operator'


class UserManager(BaseUserManager):
    """Custom user manager for email-based authentication."""

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError('Email address is required')

        user = self.model(email=self.normalize_email(email), **extra_fields)
        if password:
            user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('role', UserRole.ADMIN)

        if extra_fields.get('is_staff') is not True:
            raise ValueError('Superuser must have is_staff=True.')
        if extra_fields.get('is_superuser') is not True:
            raise ValueError('Superuser must have is_superuser=True.')

        return self.create_user(email, password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin):
    """
    Back-office user identified by email.

    Only ADMIN users may delete invoices; every other billing
    operation is open to both roles.
    """

    phone_regex = RegexValidator(
        regex=r'^(\+91)?[0-9]{10}$',
        message="Format: 10 digits, optionally prefixed with +91"
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True, verbose_name="Email")

    # Profile
    full_name = models.CharField(max_length=150, blank=True, verbose_name="Full name")
    phone_number = models.CharField(
        max_length=15,
        blank=True,
        validators=[phone_regex],
        verbose_name="Phone"
    )
    role = models.CharField(
        max_length=20,
        choices=UserRole.choices,
        default=UserRole.BILLING_OPERATOR,
        verbose_name="Role"
    )

    # Django Auth Fields
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)
    date_joined = models.DateTimeField(auto_now_add=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []

    class Meta:
        verbose_name = "User"
        verbose_name_plural = "Users"
        ordering = ['-date_joined']

    def __str__(self):
        return f"{self.full_name or self.email} ({self.role})"

    @property
    def is_admin_role(self) -> bool:
        return self.role == UserRole.ADMIN or self.is_superuser

    @property
    def is_billing_operator(self) -> bool:
        return self.role in (UserRole.ADMIN, UserRole.BILLING_OPERATOR)


class Company(models.Model):
    """
    Issuing business printed on every invoice header.

    logo and signature hold either a data URL (data:image/png;base64,...)
    or a plain URL; the PDF templates embed them as <img src>.
    """

    business_name = models.CharField(max_length=255, verbose_name="Business name")
    phone_number = models.CharField(max_length=20, blank=True, verbose_name="Phone")
    gstin = models.CharField(max_length=15, blank=True, verbose_name="GSTIN")
    email_id = models.EmailField(blank=True, verbose_name="Email")
    business_type = models.CharField(max_length=100, blank=True)
    business_category = models.CharField(max_length=100, blank=True)
    state = models.CharField(max_length=100, blank=True)
    pincode = models.CharField(max_length=10, blank=True)
    business_address = models.TextField(blank=True)

    logo = models.TextField(blank=True, help_text="Data URL or absolute URL")
    signature = models.TextField(blank=True, help_text="Data URL or absolute URL")

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Company"
        verbose_name_plural = "Companies"
        ordering = ['-updated_at']

    def __str__(self):
        return self.business_name

    @classmethod
    def get_active(cls):
        """Most recently updated active company, or None."""
        return cls.objects.filter(is_active=True).order_by('-updated_at', '-id').first()

    @property
    def has_signature_image(self) -> bool:
        return self.signature.startswith('data:image/') or self.signature.startswith('http')
