from django.utils import timezone
from rest_framework import viewsets, mixins, status
from rest_framework.decorators import action, api_view, permission_classes, authentication_classes
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from apps.invoices.models import Invoice
from apps.projects.services import verify_portal_access, ProjectNotFoundError, PortalPasswordError
from .serializers import (
    TimeEntrySerializer,
    RunningTimerSerializer,
    StartTimerSerializer,
    StopTimerSerializer,
    ManualEntrySerializer,
    TimeEntryUpdateSerializer,
    TimeEntryFilterSerializer,
    TimesheetQuerySerializer,
    StatsQuerySerializer,
    UninvoicedQuerySerializer,
    MarkInvoicedSerializer,
    TimeTrackingSettingsSerializer,
    ErrorSerializer,
)
from .services import (
    calculate_duration,
    format_duration,
    get_running_timer,
    start_timer,
    stop_timer,
    discard_timer,
    create_manual_entry,
    list_entries,
    summarize_entries,
    get_entry,
    update_entry,
    delete_entry,
    get_weekly_timesheet,
    get_stats,
    get_uninvoiced_time,
    mark_as_invoiced,
    get_settings,
    update_settings,
    get_public_time_logs,
    # Exceptions
    TimeTrackingServiceError,
    TimeEntryNotFoundError,
    TimeEntryProjectNotFoundError,
)

UUID_REGEX = '[0-9a-f-]{36}'


class TimeEntryPagination(PageNumberPagination):
    """Custom pagination for time entries."""
    page_size = 50
    page_size_query_param = 'page_size'
    max_page_size = 100


class TimeEntryViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """
    Time entries and the live timer.

    list: Entries with filters and totals
    create: Manual entry (POST /entries/)
    retrieve: Entry with audit trail
    partial_update: Audited edit
    destroy: Delete an unlocked entry
    """

    serializer_class = TimeEntrySerializer
    permission_classes = [IsAuthenticated]
    pagination_class = TimeEntryPagination
    lookup_value_regex = UUID_REGEX

    def get_queryset(self):
        filter_serializer = TimeEntryFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data
        return list_entries(
            owner=self.request.user,
            project_id=params.get('project'),
            milestone_id=params.get('milestone'),
            start_date=params.get('start_date'),
            end_date=params.get('end_date'),
            billable=params.get('billable'),
            invoiced=params.get('invoiced'),
        )

    def get_serializer_class(self):
        if self.action in ['update', 'partial_update']:
            return TimeEntryUpdateSerializer
        if self.action == 'create':
            return ManualEntrySerializer
        return TimeEntrySerializer

    def list(self, request, *args, **kwargs):
        queryset = self.get_queryset()
        totals = summarize_entries(queryset)

        page = self.paginate_queryset(queryset)
        if page is not None:
            response = self.get_paginated_response(TimeEntrySerializer(page, many=True).data)
            response.data['totals'] = totals
            return response

        return Response({'results': TimeEntrySerializer(queryset, many=True).data, 'totals': totals})

    @extend_schema(request=ManualEntrySerializer, responses={201: OpenApiTypes.OBJECT, 400: ErrorSerializer})
    def create(self, request, *args, **kwargs):
        serializer = ManualEntrySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)

        try:
            entry, warning = create_manual_entry(
                owner=request.user,
                entry_date=data.pop('date'),
                **data
            )
        except TimeEntryProjectNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except TimeTrackingServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(
            {'entry': TimeEntrySerializer(entry).data, 'warning': warning},
            status=status.HTTP_201_CREATED
        )

    def retrieve(self, request, *args, **kwargs):
        try:
            entry = get_entry(owner=request.user, entry_id=kwargs['pk'])
        except TimeEntryNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(TimeEntrySerializer(entry).data)

    def update(self, request, *args, **kwargs):
        kwargs.pop('partial', False)
        serializer = TimeEntryUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        try:
            entry = update_entry(owner=request.user, entry_id=kwargs['pk'], **serializer.validated_data)
        except (TimeEntryNotFoundError, TimeEntryProjectNotFoundError) as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except TimeTrackingServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(TimeEntrySerializer(entry).data)

    def destroy(self, request, *args, **kwargs):
        try:
            delete_entry(owner=request.user, entry_id=kwargs['pk'])
        except TimeEntryNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except TimeTrackingServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(status=status.HTTP_204_NO_CONTENT)

    # =========================================================================
    # Timer
    # =========================================================================

    @extend_schema(responses={200: RunningTimerSerializer})
    @action(detail=False, methods=['get'], url_path='timer', url_name='timer')
    def running_timer(self, request):
        """Currently running timer, or null."""
        entry = get_running_timer(request.user)
        if entry is None:
            return Response(None)

        entry.current_duration = calculate_duration(entry.start_time, timezone.now())
        data = RunningTimerSerializer(entry).data
        data['formatted_duration'] = format_duration(entry.current_duration)
        return Response(data)

    @extend_schema(request=StartTimerSerializer, responses={201: TimeEntrySerializer, 400: ErrorSerializer})
    @action(detail=False, methods=['post'], url_path='timer/start', url_name='timer-start')
    def timer_start(self, request):
        serializer = StartTimerSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            entry = start_timer(owner=request.user, **serializer.validated_data)
        except TimeEntryProjectNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except TimeTrackingServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(TimeEntrySerializer(entry).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=StopTimerSerializer, responses={200: TimeEntrySerializer, 400: ErrorSerializer})
    @action(detail=True, methods=['post'])
    def stop(self, request, pk=None):
        serializer = StopTimerSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            entry = stop_timer(
                owner=request.user,
                entry_id=pk,
                description=serializer.validated_data.get('description')
            )
        except TimeEntryNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except TimeTrackingServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(TimeEntrySerializer(entry).data)

    @extend_schema(request=None, responses={204: None, 400: ErrorSerializer})
    @action(detail=True, methods=['post'])
    def discard(self, request, pk=None):
        try:
            discard_timer(owner=request.user, entry_id=pk)
        except TimeEntryNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except TimeTrackingServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(status=status.HTTP_204_NO_CONTENT)

    # =========================================================================
    # Reports & invoicing
    # =========================================================================

    @extend_schema(parameters=[TimesheetQuerySerializer], responses={200: OpenApiTypes.OBJECT})
    @action(detail=False, methods=['get'])
    def timesheet(self, request):
        """Seven days from ``week_start`` with per-day totals."""
        query = TimesheetQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        timesheet = get_weekly_timesheet(owner=request.user, week_start=query.validated_data['week_start'])
        for day in timesheet['days']:
            day['entries'] = TimeEntrySerializer(day['entries'], many=True).data
        return Response(timesheet)

    @extend_schema(parameters=[StatsQuerySerializer], responses={200: OpenApiTypes.OBJECT})
    @action(detail=False, methods=['get'])
    def stats(self, request):
        query = StatsQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        return Response(get_stats(owner=request.user, **query.validated_data))

    @extend_schema(parameters=[UninvoicedQuerySerializer], responses={200: OpenApiTypes.OBJECT})
    @action(detail=False, methods=['get'])
    def uninvoiced(self, request):
        """Billable time that has not been invoiced yet."""
        query = UninvoicedQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        result = get_uninvoiced_time(
            owner=request.user,
            project_id=query.validated_data.get('project'),
            client_id=query.validated_data.get('client'),
        )
        result['entries'] = TimeEntrySerializer(result['entries'], many=True).data
        return Response(result)

    @extend_schema(request=MarkInvoicedSerializer, responses={200: OpenApiTypes.OBJECT, 400: ErrorSerializer})
    @action(detail=False, methods=['post'], url_path='mark-invoiced', url_name='mark-invoiced')
    def mark_invoiced(self, request):
        serializer = MarkInvoicedSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            invoice = Invoice.objects.get(id=serializer.validated_data['invoice_id'], owner=request.user)
        except Invoice.DoesNotExist:
            return Response({'error': 'Invoice not found'}, status=status.HTTP_404_NOT_FOUND)

        try:
            count = mark_as_invoiced(
                owner=request.user,
                entry_ids=serializer.validated_data['entry_ids'],
                invoice=invoice
            )
        except TimeTrackingServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response({'success': True, 'count': count})


@extend_schema(
    request=TimeTrackingSettingsSerializer,
    responses={200: TimeTrackingSettingsSerializer},
    tags=['time tracking'],
)
@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def tracking_settings(request):
    """Get or update time tracking settings (created on first access)."""
    if request.method == 'PATCH':
        serializer = TimeTrackingSettingsSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        try:
            settings = update_settings(user=request.user, **serializer.validated_data)
        except TimeTrackingServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(TimeTrackingSettingsSerializer(settings).data)

    return Response(TimeTrackingSettingsSerializer(get_settings(request.user)).data)


@extend_schema(
    parameters=[
        OpenApiParameter('password', OpenApiTypes.STR, description='Portal password, when the project has one'),
    ],
    responses={200: OpenApiTypes.OBJECT, 401: ErrorSerializer, 404: ErrorSerializer},
    description="Client-visible work log for a project portal.",
    tags=['public'],
)
@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def public_time_logs(request, public_id):
    try:
        project = verify_portal_access(
            public_id=public_id,
            password=request.query_params.get('password') or request.headers.get('X-Portal-Password'),
        )
    except ProjectNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except PortalPasswordError as e:
        return Response({'error': str(e), 'password_required': True}, status=status.HTTP_401_UNAUTHORIZED)

    return Response(get_public_time_logs(project=project))
