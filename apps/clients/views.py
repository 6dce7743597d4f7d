from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from .models import Client
from .serializers import (
    ClientSerializer,
    ClientDetailSerializer,
    ClientWriteSerializer,
    ClientFilterSerializer,
    ClientNoteSerializer,
    FollowUpSerializer,
    SnoozeSerializer,
    StatusCountsSerializer,
    PaymentBehaviorSerializer,
)
from .services import (
    list_clients,
    get_client,
    create_client,
    update_client,
    delete_client,
    get_status_counts,
    list_notes,
    add_note,
    delete_note,
    set_follow_up,
    complete_follow_up,
    snooze_follow_up,
    get_upcoming_follow_ups,
    calculate_payment_behavior,
    # Exceptions
    ClientNotFoundError,
    ClientHasDependentsError,
    ClientNoteNotFoundError,
    InvalidFollowUpError,
)


class ClientPagination(PageNumberPagination):
    """Custom pagination for clients."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class ClientViewSet(viewsets.ModelViewSet):
    """
    ViewSet for the freelancer's clients.

    All business logic is handled by services.
    Views are thin HTTP handlers only.
    """

    serializer_class = ClientSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = ClientPagination

    def get_queryset(self):
        """Return only the current user's clients, filtered by query params."""
        filter_serializer = ClientFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        return list_clients(owner=self.request.user, **filter_serializer.validated_data)

    def get_serializer_class(self):
        if self.action == 'retrieve':
            return ClientDetailSerializer
        if self.action in ['create', 'update', 'partial_update']:
            return ClientWriteSerializer
        return ClientSerializer

    def create(self, request, *args, **kwargs):
        serializer = ClientWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        client = create_client(owner=request.user, **serializer.validated_data)
        return Response(ClientSerializer(client).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        serializer = ClientWriteSerializer(data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        try:
            client = update_client(
                owner=request.user,
                client_id=kwargs['pk'],
                **serializer.validated_data
            )
        except ClientNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

        return Response(ClientSerializer(client).data)

    def destroy(self, request, *args, **kwargs):
        try:
            delete_client(owner=request.user, client_id=kwargs['pk'])
        except ClientNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except ClientHasDependentsError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(responses={200: StatusCountsSerializer})
    @action(detail=False, methods=['get'])
    def status_counts(self, request):
        """Counts per status for the filter tabs."""
        return Response(get_status_counts(owner=request.user))

    @extend_schema(
        parameters=[
            OpenApiParameter('within_days', OpenApiTypes.INT, description='Only reminders due within N days'),
        ],
        responses={200: ClientSerializer(many=True)},
    )
    @action(detail=False, methods=['get'])
    def follow_ups(self, request):
        """Clients with pending follow-ups, overdue first."""
        within_days = request.query_params.get('within_days')
        try:
            within_days = int(within_days) if within_days else None
        except ValueError:
            return Response({'error': 'within_days must be an integer'}, status=status.HTTP_400_BAD_REQUEST)

        clients = get_upcoming_follow_ups(owner=request.user, within_days=within_days)
        return Response(ClientSerializer(clients, many=True).data)

    @extend_schema(request=ClientNoteSerializer, responses={200: ClientNoteSerializer(many=True)})
    @action(detail=True, methods=['get', 'post'])
    def notes(self, request, pk=None):
        """List or add notes on a client."""
        try:
            if request.method == 'POST':
                serializer = ClientNoteSerializer(data=request.data)
                serializer.is_valid(raise_exception=True)
                note = add_note(
                    owner=request.user,
                    client_id=pk,
                    content=serializer.validated_data['content']
                )
                return Response(ClientNoteSerializer(note).data, status=status.HTTP_201_CREATED)

            notes = list_notes(owner=request.user, client_id=pk)
        except ClientNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

        return Response(ClientNoteSerializer(notes, many=True).data)

    @action(detail=True, methods=['delete'], url_path=r'notes/(?P<note_id>[0-9a-f-]+)')
    def delete_note(self, request, pk=None, note_id=None):
        try:
            delete_note(owner=request.user, client_id=pk, note_id=note_id)
        except (ClientNotFoundError, ClientNoteNotFoundError) as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=FollowUpSerializer, responses={200: ClientSerializer})
    @action(detail=True, methods=['post', 'delete'])
    def follow_up(self, request, pk=None):
        """POST sets a follow-up reminder, DELETE marks it done."""
        try:
            if request.method == 'DELETE':
                client = complete_follow_up(owner=request.user, client_id=pk)
            else:
                serializer = FollowUpSerializer(data=request.data)
                serializer.is_valid(raise_exception=True)
                client = set_follow_up(
                    owner=request.user,
                    client_id=pk,
                    follow_up_date=serializer.validated_data['follow_up_date'],
                    note=serializer.validated_data['note'],
                )
        except ClientNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except InvalidFollowUpError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(ClientSerializer(client).data)

    @extend_schema(request=SnoozeSerializer, responses={200: ClientSerializer})
    @action(detail=True, methods=['post'])
    def snooze(self, request, pk=None):
        serializer = SnoozeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            client = snooze_follow_up(
                owner=request.user,
                client_id=pk,
                days=serializer.validated_data['days']
            )
        except ClientNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except InvalidFollowUpError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(ClientSerializer(client).data)

    @extend_schema(responses={200: PaymentBehaviorSerializer})
    @action(detail=True, methods=['get'])
    def payment_behavior(self, request, pk=None):
        """Average days-to-pay rating for the client."""
        try:
            client = get_client(owner=request.user, client_id=pk)
        except ClientNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(calculate_payment_behavior(client))
