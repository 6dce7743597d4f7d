from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.db import models
import uuid

from apps.common.money import Currency


class UserManager(BaseUserManager):
    """Custom user manager for email-based authentication."""

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError('Email is required')

        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)

        if extra_fields.get('is_staff') is not True:
            raise ValueError('Superuser must have is_staff=True')
        if extra_fields.get('is_superuser') is not True:
            raise ValueError('Superuser must have is_superuser=True')

        return self.create_user(email, password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin):
    """A freelancer account. Owns every client, project and invoice it creates."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True, max_length=255, db_index=True)
    name = models.CharField(max_length=100, blank=True)

    # Business profile (shown on invoices, contracts and public pages)
    business_name = models.CharField(max_length=100, blank=True)
    business_address = models.TextField(max_length=500, blank=True)
    tax_id = models.CharField(max_length=50, blank=True)
    logo_url = models.URLField(max_length=500, blank=True)
    currency = models.CharField(max_length=3, choices=Currency.choices, default=Currency.USD)

    # Stripe Connect
    stripe_account_id = models.CharField(max_length=255, blank=True, null=True, unique=True)
    stripe_connected = models.BooleanField(default=False)

    # Email notification preferences
    email_invoice_paid = models.BooleanField(default=True)
    email_contract_signed = models.BooleanField(default=True)
    email_weekly_digest = models.BooleanField(default=True)

    # Permissions
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    last_login = models.DateTimeField(null=True, blank=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []

    class Meta:
        db_table = 'users'
        indexes = [
            models.Index(fields=['email']),
            models.Index(fields=['created_at']),
        ]

    def __str__(self):
        return self.email

    def get_display_name(self):
        """Return name or email prefix."""
        return self.name or self.email.split('@')[0]

    def get_business_name(self):
        """Name printed on documents: business name, then personal name."""
        return self.business_name or self.get_display_name()

    def business_info(self):
        """Public business block shown on pay and signing pages."""
        return {
            'name': self.get_business_name(),
            'email': self.email,
            'address': self.business_address or None,
            'tax_id': self.tax_id or None,
            'logo_url': self.logo_url or None,
        }
