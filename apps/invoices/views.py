from rest_framework import viewsets, status
from rest_framework.decorators import action, api_view, permission_classes, authentication_classes
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema
from drf_spectacular.types import OpenApiTypes

from apps.clients.services import ClientNotFoundError
from apps.common.pdf import pdf_response
from apps.projects.services import ProjectNotFoundError, MilestoneNotFoundError
from .pdf import render_invoice_pdf
from .serializers import (
    InvoiceSerializer,
    InvoiceListSerializer,
    InvoiceCreateSerializer,
    InvoiceUpdateSerializer,
    InvoiceFromMilestoneSerializer,
    InvoiceFromTimeEntriesSerializer,
    InvoiceFilterSerializer,
    InvoicePaymentSerializer,
    MarkPaidSerializer,
    SendResultSerializer,
    NextNumberSerializer,
    ErrorSerializer,
)
from .services import (
    list_invoices,
    get_invoice,
    create_invoice,
    create_invoice_from_milestone,
    create_invoice_from_time_entries,
    update_invoice,
    delete_invoice,
    cancel_invoice,
    send_invoice,
    send_payment_reminder,
    next_invoice_number,
    mark_paid,
    list_payments,
    get_invoice_by_token,
    get_public_invoice,
    # Exceptions
    InvoicesServiceError,
    InvoiceNotFoundError,
)

UUID_REGEX = '[0-9a-f-]{36}'

# Referenced records that belong to someone else are reported as bad input
NOT_FOUND_AS_BAD_REQUEST = (ClientNotFoundError, ProjectNotFoundError, MilestoneNotFoundError)


class InvoicePagination(PageNumberPagination):
    """Custom pagination for invoices."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class InvoiceViewSet(viewsets.ModelViewSet):
    """
    ViewSet for invoices.

    list: Invoices filtered by status/client/project
    create: Create a draft invoice
    retrieve: Invoice with payments
    update / partial_update: Edit an unpaid invoice
    destroy: Delete an invoice without payments
    """

    serializer_class = InvoiceSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = InvoicePagination
    lookup_value_regex = UUID_REGEX

    def get_queryset(self):
        filter_serializer = InvoiceFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data
        return list_invoices(
            owner=self.request.user,
            status=params.get('status'),
            client_id=params.get('client'),
            project_id=params.get('project'),
        )

    def get_serializer_class(self):
        if self.action == 'list':
            return InvoiceListSerializer
        if self.action == 'create':
            return InvoiceCreateSerializer
        if self.action in ['update', 'partial_update']:
            return InvoiceUpdateSerializer
        return InvoiceSerializer

    def retrieve(self, request, *args, **kwargs):
        try:
            invoice = get_invoice(owner=request.user, invoice_id=kwargs['pk'])
        except InvoiceNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(InvoiceSerializer(invoice).data)

    def create(self, request, *args, **kwargs):
        serializer = InvoiceCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            invoice = create_invoice(owner=request.user, **serializer.validated_data)
        except NOT_FOUND_AS_BAD_REQUEST as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except InvoicesServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(InvoiceSerializer(invoice).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        serializer = InvoiceUpdateSerializer(data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        try:
            invoice = update_invoice(
                owner=request.user,
                invoice_id=kwargs['pk'],
                **serializer.validated_data
            )
        except InvoiceNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except InvoicesServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(InvoiceSerializer(invoice).data)

    def destroy(self, request, *args, **kwargs):
        try:
            delete_invoice(owner=request.user, invoice_id=kwargs['pk'])
        except InvoiceNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except InvoicesServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=InvoiceFromMilestoneSerializer, responses={201: InvoiceSerializer})
    @action(detail=False, methods=['post'], url_path='from-milestone', url_name='from-milestone')
    def from_milestone(self, request):
        """Invoice a milestone for its full amount."""
        serializer = InvoiceFromMilestoneSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            invoice = create_invoice_from_milestone(
                owner=request.user,
                milestone_id=serializer.validated_data['milestone_id']
            )
        except MilestoneNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except InvoicesServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(InvoiceSerializer(invoice).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=InvoiceFromTimeEntriesSerializer, responses={201: InvoiceSerializer})
    @action(detail=False, methods=['post'], url_path='from-time-entries', url_name='from-time-entries')
    def from_time_entries(self, request):
        """Bill selected time entries, one line per entry."""
        serializer = InvoiceFromTimeEntriesSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            invoice = create_invoice_from_time_entries(owner=request.user, **serializer.validated_data)
        except NOT_FOUND_AS_BAD_REQUEST as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except InvoicesServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(InvoiceSerializer(invoice).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=None, responses={200: NextNumberSerializer})
    @action(detail=False, methods=['get'], url_path='next-number', url_name='next-number')
    def next_number(self, request):
        return Response({'invoice_number': next_invoice_number(request.user)})

    @extend_schema(request=None, responses={200: SendResultSerializer, 400: ErrorSerializer})
    @action(detail=True, methods=['post'])
    def send(self, request, pk=None):
        """Mark as sent and email the pay link to the client."""
        try:
            invoice, email_sent = send_invoice(owner=request.user, invoice_id=pk)
        except InvoiceNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except InvoicesServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        invoice = get_invoice(owner=request.user, invoice_id=invoice.id)
        return Response({'invoice': InvoiceSerializer(invoice).data, 'email_sent': email_sent})

    @extend_schema(request=None, responses={200: SendResultSerializer, 400: ErrorSerializer})
    @action(detail=True, methods=['post'])
    def remind(self, request, pk=None):
        """Email a payment reminder for the remaining balance."""
        try:
            invoice, email_sent = send_payment_reminder(owner=request.user, invoice_id=pk)
        except InvoiceNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except InvoicesServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        invoice = get_invoice(owner=request.user, invoice_id=invoice.id)
        return Response({'invoice': InvoiceSerializer(invoice).data, 'email_sent': email_sent})

    @extend_schema(request=MarkPaidSerializer, responses={200: InvoiceSerializer, 400: ErrorSerializer})
    @action(detail=True, methods=['post'], url_path='mark-paid', url_name='mark-paid')
    def mark_paid(self, request, pk=None):
        """Record a payment received outside Stripe."""
        serializer = MarkPaidSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            invoice, _ = mark_paid(owner=request.user, invoice_id=pk, **serializer.validated_data)
        except InvoiceNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except InvoicesServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        invoice = get_invoice(owner=request.user, invoice_id=invoice.id)
        return Response(InvoiceSerializer(invoice).data)

    @extend_schema(request=None, responses={200: InvoiceSerializer, 400: ErrorSerializer})
    @action(detail=True, methods=['post'])
    def cancel(self, request, pk=None):
        try:
            invoice = cancel_invoice(owner=request.user, invoice_id=pk)
        except InvoiceNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except InvoicesServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(InvoiceSerializer(invoice).data)

    @extend_schema(responses={200: InvoicePaymentSerializer(many=True)})
    @action(detail=True, methods=['get'])
    def payments(self, request, pk=None):
        try:
            payments = list_payments(owner=request.user, invoice_id=pk)
        except InvoiceNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(InvoicePaymentSerializer(payments, many=True).data)

    @extend_schema(responses={(200, 'application/pdf'): OpenApiTypes.BINARY})
    @action(detail=True, methods=['get'])
    def pdf(self, request, pk=None):
        try:
            invoice = get_invoice(owner=request.user, invoice_id=pk)
        except InvoiceNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

        return pdf_response(
            render_invoice_pdf(invoice),
            f"{invoice.invoice_number}.pdf",
            inline=request.query_params.get('download') != 'true',
        )


@extend_schema(
    responses={200: OpenApiTypes.OBJECT, 404: ErrorSerializer},
    description="Public payment page data. The first view marks a sent invoice as viewed.",
    tags=['public'],
)
@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def public_invoice(request, pay_token):
    try:
        data = get_public_invoice(pay_token)
    except InvoiceNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    return Response(data)


@extend_schema(
    responses={(200, 'application/pdf'): OpenApiTypes.BINARY, 404: ErrorSerializer},
    tags=['public'],
)
@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def public_invoice_pdf(request, pay_token):
    try:
        invoice = get_invoice_by_token(pay_token)
    except InvoiceNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

    return pdf_response(render_invoice_pdf(invoice), f"{invoice.invoice_number}.pdf", inline=False)
