from rest_framework import serializers
from django.contrib.auth.password_validation import validate_password

from apps.common.money import Currency
from .models import User


class UserSerializer(serializers.ModelSerializer):
    """Current user with business profile."""

    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'name',
            'business_name',
            'business_address',
            'tax_id',
            'logo_url',
            'currency',
            'stripe_connected',
            'created_at',
        ]
        read_only_fields = fields


class UserRegistrationSerializer(serializers.Serializer):
    """Serializer for user registration."""

    email = serializers.EmailField()
    name = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    password = serializers.CharField(
        write_only=True,
        validators=[validate_password],
        style={'input_type': 'password'}
    )
    password_confirm = serializers.CharField(
        write_only=True,
        style={'input_type': 'password'}
    )

    def validate(self, attrs):
        """Validate password confirmation."""
        if attrs['password'] != attrs['password_confirm']:
            raise serializers.ValidationError({
                'password_confirm': 'Passwords do not match'
            })
        return attrs


class UserLoginSerializer(serializers.Serializer):
    """Serializer for user login."""

    email = serializers.EmailField(required=True)
    password = serializers.CharField(
        required=True,
        write_only=True,
        style={'input_type': 'password'}
    )


class BusinessSettingsSerializer(serializers.Serializer):
    """Editable business profile. All fields optional (PATCH semantics)."""

    name = serializers.CharField(max_length=100, required=False, allow_blank=True)
    business_name = serializers.CharField(max_length=100, required=False, allow_blank=True)
    business_address = serializers.CharField(max_length=500, required=False, allow_blank=True)
    tax_id = serializers.CharField(max_length=50, required=False, allow_blank=True)
    currency = serializers.ChoiceField(choices=Currency.choices, required=False)


class NotificationPreferencesSerializer(serializers.ModelSerializer):

    class Meta:
        model = User
        fields = ['email_invoice_paid', 'email_contract_signed', 'email_weekly_digest']
        extra_kwargs = {field: {'required': False} for field in fields}


class SettingsSerializer(serializers.ModelSerializer):
    """Everything shown on the settings page."""

    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'name',
            'business_name',
            'business_address',
            'tax_id',
            'logo_url',
            'currency',
            'stripe_account_id',
            'stripe_connected',
            'email_invoice_paid',
            'email_contract_signed',
            'email_weekly_digest',
        ]
        read_only_fields = fields


class LogoUploadRequestSerializer(serializers.Serializer):
    file_name = serializers.CharField(max_length=255)
    content_type = serializers.CharField(max_length=100)


class UploadUrlSerializer(serializers.Serializer):
    upload_url = serializers.URLField()
    file_url = serializers.URLField()
    key = serializers.CharField()
    expires_in = serializers.IntegerField()


class UpdateLogoSerializer(serializers.Serializer):
    logo_url = serializers.URLField(max_length=500, allow_blank=True, allow_null=True)
