import re

from rest_framework import viewsets, status
from rest_framework.decorators import action, api_view, permission_classes, authentication_classes
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema
from drf_spectacular.types import OpenApiTypes

from apps.clients.services import ClientNotFoundError
from apps.common.pdf import pdf_response
from apps.projects.services import ProjectNotFoundError
from .pdf import render_contract_pdf
from .serializers import (
    ContractSerializer,
    ContractListSerializer,
    ContractCreateSerializer,
    ContractFromTemplateSerializer,
    ContractUpdateSerializer,
    ContractFilterSerializer,
    ContractReminderSerializer,
    DeveloperSignSerializer,
    ReminderRequestSerializer,
    SendResultSerializer,
    SignContractSerializer,
    DeclineContractSerializer,
    TemplateSerializer,
    TemplateUpdateSerializer,
    TemplateFilterSerializer,
    ErrorSerializer,
)
from .services import (
    list_contracts,
    get_contract,
    create_contract,
    create_from_template,
    update_contract,
    delete_contract,
    developer_sign,
    send_contract,
    send_reminder,
    list_reminders,
    get_public_contract,
    sign_contract,
    decline_contract,
    get_signed_contract_by_token,
    list_templates,
    get_template,
    create_template,
    update_template,
    duplicate_template,
    delete_template,
    set_default_template,
    # Exceptions
    ContractsServiceError,
    ContractNotFoundError,
    TemplateNotFoundError,
)

UUID_REGEX = '[0-9a-f-]{36}'

NOT_FOUND_AS_BAD_REQUEST = (ClientNotFoundError, ProjectNotFoundError, TemplateNotFoundError)


def client_ip(request):
    """Originating client address, honoring ``X-Forwarded-For`` from the proxy."""
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR')


def contract_file_name(contract) -> str:
    slug = re.sub(r'[^A-Za-z0-9]+', '-', f"{contract.name} {contract.client.name}").strip('-')
    return f"{slug or 'contract'}.pdf"


class ContractPagination(PageNumberPagination):
    """Custom pagination for contracts."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class ContractViewSet(viewsets.ModelViewSet):
    """
    ViewSet for contracts.

    list: Contracts filtered by status/client/project
    create: Create a draft contract
    retrieve: Contract with signatures and audit trail
    update / partial_update: Edit a draft
    destroy: Delete an unsigned contract
    """

    serializer_class = ContractSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = ContractPagination
    lookup_value_regex = UUID_REGEX

    def get_queryset(self):
        filter_serializer = ContractFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data
        return list_contracts(
            owner=self.request.user,
            status=params.get('status'),
            client_id=params.get('client'),
            project_id=params.get('project'),
        )

    def get_serializer_class(self):
        if self.action == 'list':
            return ContractListSerializer
        if self.action == 'create':
            return ContractCreateSerializer
        if self.action in ['update', 'partial_update']:
            return ContractUpdateSerializer
        return ContractSerializer

    def retrieve(self, request, *args, **kwargs):
        try:
            contract = get_contract(owner=request.user, contract_id=kwargs['pk'])
        except ContractNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(ContractSerializer(contract).data)

    def create(self, request, *args, **kwargs):
        serializer = ContractCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            contract = create_contract(owner=request.user, **serializer.validated_data)
        except NOT_FOUND_AS_BAD_REQUEST as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(ContractSerializer(contract).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        serializer = ContractUpdateSerializer(data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        try:
            contract = update_contract(
                owner=request.user,
                contract_id=kwargs['pk'],
                **serializer.validated_data
            )
        except ContractNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except ContractsServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(ContractSerializer(contract).data)

    def destroy(self, request, *args, **kwargs):
        try:
            delete_contract(owner=request.user, contract_id=kwargs['pk'])
        except ContractNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except ContractsServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=ContractFromTemplateSerializer, responses={201: ContractSerializer})
    @action(detail=False, methods=['post'], url_path='from-template', url_name='from-template')
    def from_template(self, request):
        """Draft a contract from a template with client and project details filled in."""
        serializer = ContractFromTemplateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            contract = create_from_template(owner=request.user, **serializer.validated_data)
        except NOT_FOUND_AS_BAD_REQUEST as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(ContractSerializer(contract).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=None, responses={200: SendResultSerializer, 400: ErrorSerializer})
    @action(detail=True, methods=['post'])
    def send(self, request, pk=None):
        """Send for signature and email the signing link."""
        try:
            contract, email_sent = send_contract(owner=request.user, contract_id=pk)
        except ContractNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except ContractsServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response({'contract': ContractSerializer(contract).data, 'email_sent': email_sent})

    @extend_schema(request=ReminderRequestSerializer, responses={201: ContractReminderSerializer})
    @action(detail=True, methods=['post'])
    def remind(self, request, pk=None):
        serializer = ReminderRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            reminder, email_sent = send_reminder(
                owner=request.user,
                contract_id=pk,
                message=serializer.validated_data['message']
            )
        except ContractNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except ContractsServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        data = ContractReminderSerializer(reminder).data
        data['email_sent'] = email_sent
        return Response(data, status=status.HTTP_201_CREATED)

    @extend_schema(responses={200: ContractReminderSerializer(many=True)})
    @action(detail=True, methods=['get'])
    def reminders(self, request, pk=None):
        try:
            reminders = list_reminders(owner=request.user, contract_id=pk)
        except ContractNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(ContractReminderSerializer(reminders, many=True).data)

    @extend_schema(request=DeveloperSignSerializer, responses={200: ContractSerializer})
    @action(detail=True, methods=['post'], url_path='developer-sign', url_name='developer-sign')
    def countersign(self, request, pk=None):
        serializer = DeveloperSignSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            contract = developer_sign(
                owner=request.user,
                contract_id=pk,
                signature=serializer.validated_data['signature']
            )
        except ContractNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except ContractsServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(ContractSerializer(contract).data)

    @extend_schema(responses={(200, 'application/pdf'): OpenApiTypes.BINARY})
    @action(detail=True, methods=['get'])
    def pdf(self, request, pk=None):
        try:
            contract = get_contract(owner=request.user, contract_id=pk)
        except ContractNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

        return pdf_response(
            render_contract_pdf(contract),
            contract_file_name(contract),
            inline=request.query_params.get('download') != 'true',
        )


class TemplateViewSet(viewsets.ModelViewSet):
    """
    ViewSet for contract and invoice templates.

    list: Own and system templates (?type=contract|invoice), system first
    create: Create a template
    retrieve: Own or system template
    update / partial_update: Edit an own template
    destroy: Delete an own template
    """

    serializer_class = TemplateSerializer
    permission_classes = [IsAuthenticated]
    lookup_value_regex = UUID_REGEX

    def get_queryset(self):
        filter_serializer = TemplateFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        return list_templates(owner=self.request.user, type=filter_serializer.validated_data.get('type'))

    def get_serializer_class(self):
        if self.action in ['update', 'partial_update']:
            return TemplateUpdateSerializer
        return TemplateSerializer

    def retrieve(self, request, *args, **kwargs):
        try:
            template = get_template(owner=request.user, template_id=kwargs['pk'])
        except TemplateNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(TemplateSerializer(template).data)

    def create(self, request, *args, **kwargs):
        serializer = TemplateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        template = create_template(owner=request.user, **serializer.validated_data)
        return Response(TemplateSerializer(template).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        serializer = TemplateUpdateSerializer(data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        try:
            template = update_template(
                owner=request.user,
                template_id=kwargs['pk'],
                **serializer.validated_data
            )
        except TemplateNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except ContractsServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

        return Response(TemplateSerializer(template).data)

    def destroy(self, request, *args, **kwargs):
        try:
            delete_template(owner=request.user, template_id=kwargs['pk'])
        except TemplateNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except ContractsServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=None, responses={201: TemplateSerializer})
    @action(detail=True, methods=['post'])
    def duplicate(self, request, pk=None):
        try:
            template = duplicate_template(owner=request.user, template_id=pk)
        except TemplateNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(TemplateSerializer(template).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=None, responses={200: TemplateSerializer})
    @action(detail=True, methods=['post'], url_path='set-default', url_name='set-default')
    def set_default(self, request, pk=None):
        try:
            template = set_default_template(owner=request.user, template_id=pk)
        except TemplateNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except ContractsServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        return Response(TemplateSerializer(template).data)


# =============================================================================
# Signing page (public)
# =============================================================================

@extend_schema(
    responses={200: OpenApiTypes.OBJECT, 400: ErrorSerializer, 404: ErrorSerializer},
    description="Signing page data. The first view marks a sent contract as viewed.",
    tags=['public'],
)
@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def public_contract(request, sign_token):
    try:
        data = get_public_contract(sign_token)
    except ContractNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except ContractsServiceError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    return Response(data)


@extend_schema(
    request=SignContractSerializer,
    responses={200: OpenApiTypes.OBJECT, 400: ErrorSerializer, 404: ErrorSerializer},
    tags=['public'],
)
@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def public_sign(request, sign_token):
    serializer = SignContractSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        contract = sign_contract(
            sign_token=sign_token,
            ip_address=client_ip(request),
            user_agent=request.META.get('HTTP_USER_AGENT', ''),
            **serializer.validated_data
        )
    except ContractNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except ContractsServiceError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response({'success': True, 'signed_at': contract.signed_at})


@extend_schema(
    request=DeclineContractSerializer,
    responses={200: OpenApiTypes.OBJECT, 400: ErrorSerializer, 404: ErrorSerializer},
    tags=['public'],
)
@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def public_decline(request, sign_token):
    serializer = DeclineContractSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        decline_contract(sign_token=sign_token, reason=serializer.validated_data['reason'])
    except ContractNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except ContractsServiceError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response({'success': True})


@extend_schema(
    responses={(200, 'application/pdf'): OpenApiTypes.BINARY, 400: ErrorSerializer, 404: ErrorSerializer},
    tags=['public'],
)
@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def public_contract_pdf(request, sign_token):
    """Signed copy for the client."""
    try:
        contract = get_signed_contract_by_token(sign_token)
    except ContractNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except ContractsServiceError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return pdf_response(render_contract_pdf(contract), contract_file_name(contract), inline=False)
