from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from apps.clients.serializers import ClientSerializer
from apps.invoices.serializers import InvoiceListSerializer
from apps.projects.serializers import ProjectListSerializer
from .queries import DashboardQueries
from .search import search as search_records
from .serializers import (
    StatsSerializer,
    UpcomingMilestoneSerializer,
    SearchQuerySerializer,
    SearchResultSerializer,
)


@extend_schema(responses={200: StatsSerializer}, tags=['dashboard'])
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def stats(request):
    return Response(DashboardQueries.stats(request.user))


@extend_schema(responses={200: ProjectListSerializer(many=True)}, tags=['dashboard'])
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def recent_projects(request):
    return Response(ProjectListSerializer(DashboardQueries.recent_projects(request.user), many=True).data)


@extend_schema(responses={200: UpcomingMilestoneSerializer(many=True)}, tags=['dashboard'])
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def upcoming_milestones(request):
    milestones = DashboardQueries.upcoming_milestones(request.user)
    return Response(UpcomingMilestoneSerializer(milestones, many=True).data)


@extend_schema(responses={200: InvoiceListSerializer(many=True)}, tags=['dashboard'])
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def pending_invoices(request):
    return Response(InvoiceListSerializer(DashboardQueries.pending_invoices(request.user), many=True).data)


@extend_schema(responses={200: ClientSerializer(many=True)}, tags=['dashboard'])
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def follow_ups(request):
    return Response(ClientSerializer(DashboardQueries.follow_ups(request.user), many=True).data)


@extend_schema(
    responses={200: OpenApiTypes.OBJECT},
    description="Every dashboard panel in one response.",
    tags=['dashboard'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def overview(request):
    user = request.user
    return Response({
        'stats': DashboardQueries.stats(user),
        'recent_projects': ProjectListSerializer(DashboardQueries.recent_projects(user), many=True).data,
        'upcoming_milestones': UpcomingMilestoneSerializer(DashboardQueries.upcoming_milestones(user), many=True).data,
        'pending_invoices': InvoiceListSerializer(DashboardQueries.pending_invoices(user), many=True).data,
        'follow_ups': ClientSerializer(DashboardQueries.follow_ups(user), many=True).data,
    })


@extend_schema(
    parameters=[OpenApiParameter('q', OpenApiTypes.STR, description='Search text')],
    responses={200: SearchResultSerializer(many=True)},
    description="Search clients, projects and invoices. Returns at most 10 results, best match first.",
    tags=['dashboard'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def search(request):
    query_serializer = SearchQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    return Response(search_records(request.user, query_serializer.validated_data['q']))
