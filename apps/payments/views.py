import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, authentication_classes
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema
from drf_spectacular.types import OpenApiTypes

from apps.invoices.services import InvoiceNotFoundError
from .serializers import (
    ConnectStatusSerializer,
    LinkSerializer,
    BalanceSerializer,
    RefundSerializer,
    CheckoutRequestSerializer,
    CheckoutSessionSerializer,
    ErrorSerializer,
)
from .services import (
    get_connect_status,
    get_onboarding_link,
    get_dashboard_link,
    get_balance,
    disconnect,
    create_refund,
    create_checkout_session,
    process_webhook,
    # Exceptions
    PaymentsServiceError,
    WebhookSignatureError,
)
from .stripe_client import PaymentProviderError

logger = logging.getLogger(__name__)


# =============================================================================
# Stripe Connect
# =============================================================================

@extend_schema(responses={200: ConnectStatusSerializer}, tags=['payments'])
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def connect_status(request):
    return Response(get_connect_status(request.user))


@extend_schema(request=None, responses={200: LinkSerializer, 502: ErrorSerializer}, tags=['payments'])
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def onboarding_link(request):
    """Create the Stripe account when needed and return an onboarding URL."""
    try:
        url = get_onboarding_link(request.user)
    except PaymentProviderError as e:
        return Response({'error': str(e)}, status=status.HTTP_502_BAD_GATEWAY)
    return Response({'url': url})


@extend_schema(request=None, responses={200: LinkSerializer, 400: ErrorSerializer}, tags=['payments'])
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def dashboard_link(request):
    try:
        url = get_dashboard_link(request.user)
    except PaymentsServiceError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except PaymentProviderError as e:
        return Response({'error': str(e)}, status=status.HTTP_502_BAD_GATEWAY)
    return Response({'url': url})


@extend_schema(responses={200: BalanceSerializer}, tags=['payments'])
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def balance(request):
    """Connected account balance; null when payments are not set up."""
    return Response(get_balance(request.user))


@extend_schema(request=None, responses={200: OpenApiTypes.OBJECT}, tags=['payments'])
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def disconnect_stripe(request):
    disconnect(request.user)
    return Response({'success': True})


@extend_schema(request=RefundSerializer, responses={200: OpenApiTypes.OBJECT, 502: ErrorSerializer}, tags=['payments'])
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def refund(request):
    serializer = RefundSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        result = create_refund(**serializer.validated_data)
    except PaymentProviderError as e:
        return Response({'error': str(e)}, status=status.HTTP_502_BAD_GATEWAY)
    return Response({'id': result['id'], 'status': result['status'], 'amount': result['amount']})


# =============================================================================
# Public
# =============================================================================

@extend_schema(
    request=CheckoutRequestSerializer,
    responses={200: CheckoutSessionSerializer, 400: ErrorSerializer, 404: ErrorSerializer},
    tags=['public'],
)
@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def checkout(request):
    serializer = CheckoutRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        session = create_checkout_session(
            serializer.validated_data['pay_token'],
            amount=serializer.validated_data.get('amount'),
        )
    except InvoiceNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except PaymentsServiceError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except PaymentProviderError:
        return Response({'error': 'Failed to create checkout session'}, status=status.HTTP_502_BAD_GATEWAY)

    return Response(session)


@extend_schema(request=None, responses={200: OpenApiTypes.OBJECT, 400: ErrorSerializer}, tags=['public'])
@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def stripe_webhook(request):
    """Stripe event endpoint. Non-2xx answers make Stripe retry the delivery."""
    try:
        result = process_webhook(request.body, request.headers.get('Stripe-Signature'))
    except WebhookSignatureError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except Exception:
        logger.exception("Stripe webhook processing failed")
        return Response({'error': 'Webhook processing failed'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return Response({'received': True, 'handled': result['handled']})
