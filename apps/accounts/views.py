from rest_framework import status, serializers
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.tokens import RefreshToken
from drf_spectacular.utils import extend_schema

from apps.common.storage import StorageError
from .serializers import (
    UserRegistrationSerializer,
    UserLoginSerializer,
    UserSerializer,
    SettingsSerializer,
    BusinessSettingsSerializer,
    NotificationPreferencesSerializer,
    LogoUploadRequestSerializer,
    UploadUrlSerializer,
    UpdateLogoSerializer,
)
from .services import (
    register_user,
    authenticate_user,
    update_business_settings,
    update_notification_preferences,
    get_logo_upload_url,
    update_logo,
    UserRegistrationError,
    InvalidCredentialsError,
    InactiveAccountError,
    InvalidLogoError,
)


# Response serializers for API documentation
class TokensResponseSerializer(serializers.Serializer):
    refresh = serializers.CharField()
    access = serializers.CharField()


class AuthResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
    user = UserSerializer()
    tokens = TokensResponseSerializer()


class ErrorResponseSerializer(serializers.Serializer):
    error = serializers.CharField()


def _auth_response(user, message, status_code=status.HTTP_200_OK):
    refresh = RefreshToken.for_user(user)
    return Response({
        'message': message,
        'user': UserSerializer(user).data,
        'tokens': {
            'refresh': str(refresh),
            'access': str(refresh.access_token),
        }
    }, status=status_code)


@extend_schema(
    request=UserRegistrationSerializer,
    responses={
        201: AuthResponseSerializer,
        400: ErrorResponseSerializer,
    },
    description="Register a new freelancer account and receive JWT tokens.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """Register a new user account."""
    serializer = UserRegistrationSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    data = serializer.validated_data.copy()
    data.pop('password_confirm', None)

    try:
        user = register_user(**data)
    except UserRegistrationError as e:
        return Response(
            {'error': str(e)},
            status=status.HTTP_400_BAD_REQUEST
        )

    return _auth_response(user, 'Registration successful', status.HTTP_201_CREATED)


@extend_schema(
    request=UserLoginSerializer,
    responses={
        200: AuthResponseSerializer,
        400: ErrorResponseSerializer,
        401: ErrorResponseSerializer,
        403: ErrorResponseSerializer,
    },
    description="Authenticate with email and password to receive JWT tokens.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def login(request):
    """Login with email and password."""
    serializer = UserLoginSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        user = authenticate_user(**serializer.validated_data)
    except InvalidCredentialsError as e:
        return Response({'error': str(e)}, status=status.HTTP_401_UNAUTHORIZED)
    except InactiveAccountError as e:
        return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

    return _auth_response(user, 'Login successful')


@extend_schema(
    responses={200: UserSerializer},
    description="Get the current authenticated user's profile.",
    tags=['auth'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def get_current_user(request):
    """Get current authenticated user profile."""
    return Response(UserSerializer(request.user).data)


# =============================================================================
# Settings
# =============================================================================

@extend_schema(
    methods=['GET'],
    responses={200: SettingsSerializer},
    description="Get business settings, Stripe status and email preferences.",
    tags=['settings'],
)
@extend_schema(
    methods=['PATCH'],
    request=BusinessSettingsSerializer,
    responses={200: SettingsSerializer, 400: ErrorResponseSerializer},
    description="Update business name, address, tax ID, currency or name.",
    tags=['settings'],
)
@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def business_settings(request):
    if request.method == 'PATCH':
        serializer = BusinessSettingsSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        update_business_settings(user=request.user, **serializer.validated_data)

    return Response(SettingsSerializer(request.user).data)


@extend_schema(
    request=NotificationPreferencesSerializer,
    responses={200: SettingsSerializer},
    description="Toggle email notification preferences.",
    tags=['settings'],
)
@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def notification_preferences(request):
    serializer = NotificationPreferencesSerializer(data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    update_notification_preferences(user=request.user, **serializer.validated_data)
    return Response(SettingsSerializer(request.user).data)


@extend_schema(
    request=LogoUploadRequestSerializer,
    responses={200: UploadUrlSerializer, 400: ErrorResponseSerializer, 502: ErrorResponseSerializer},
    description="Get a presigned URL for uploading a business logo (images only).",
    tags=['settings'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logo_upload_url(request):
    serializer = LogoUploadRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        result = get_logo_upload_url(user=request.user, **serializer.validated_data)
    except InvalidLogoError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except StorageError as e:
        return Response({'error': str(e)}, status=status.HTTP_502_BAD_GATEWAY)

    return Response(result)


@extend_schema(
    request=UpdateLogoSerializer,
    responses={200: SettingsSerializer},
    description="Save the uploaded logo URL (or clear it). The previous file is removed.",
    tags=['settings'],
)
@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def logo(request):
    serializer = UpdateLogoSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    update_logo(user=request.user, logo_url=serializer.validated_data['logo_url'])
    return Response(SettingsSerializer(request.user).data)
