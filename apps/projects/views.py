from rest_framework import viewsets, mixins, status
from rest_framework.decorators import action, api_view, permission_classes, authentication_classes
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from apps.clients.services import ClientNotFoundError
from .serializers import (
    ProjectSerializer,
    ProjectListSerializer,
    ProjectCreateSerializer,
    ProjectUpdateSerializer,
    ProjectFilterSerializer,
    MilestoneSerializer,
    MilestoneInputSerializer,
    MilestoneUpdateSerializer,
    MilestoneStatusSerializer,
    ReorderMilestonesSerializer,
    ErrorSerializer,
)
from .services import (
    list_projects,
    get_project,
    create_project,
    update_project,
    delete_project,
    list_milestones,
    get_milestone,
    create_milestone,
    update_milestone,
    update_milestone_status,
    delete_milestone,
    reorder_milestones,
    get_public_project,
    # Exceptions
    ProjectNotFoundError,
    MilestoneNotFoundError,
    MilestoneLockedError,
    PortalPasswordError,
)

UUID_REGEX = '[0-9a-f-]{36}'


class ProjectPagination(PageNumberPagination):
    """Custom pagination for projects."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class ProjectViewSet(viewsets.ModelViewSet):
    """
    ViewSet for projects and their milestones.

    list: Projects filtered by status/client
    create: Create a project with optional milestones
    retrieve: Project with ordered milestones
    update / partial_update: Edit project fields
    destroy: Delete project
    """

    serializer_class = ProjectSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = ProjectPagination
    lookup_value_regex = UUID_REGEX

    def get_queryset(self):
        filter_serializer = ProjectFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data
        return list_projects(
            owner=self.request.user,
            status=params.get('status'),
            client_id=params.get('client'),
        )

    def get_serializer_class(self):
        if self.action == 'list':
            return ProjectListSerializer
        if self.action == 'create':
            return ProjectCreateSerializer
        if self.action in ['update', 'partial_update']:
            return ProjectUpdateSerializer
        return ProjectSerializer

    def create(self, request, *args, **kwargs):
        serializer = ProjectCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            project = create_project(owner=request.user, **serializer.validated_data)
        except ClientNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        project = get_project(owner=request.user, project_id=project.id)
        return Response(ProjectSerializer(project).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        serializer = ProjectUpdateSerializer(data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        try:
            project = update_project(
                owner=request.user,
                project_id=kwargs['pk'],
                **serializer.validated_data
            )
        except ProjectNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

        return Response(ProjectSerializer(project).data)

    def destroy(self, request, *args, **kwargs):
        try:
            delete_project(owner=request.user, project_id=kwargs['pk'])
        except ProjectNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=MilestoneInputSerializer, responses={200: MilestoneSerializer(many=True)})
    @action(detail=True, methods=['get', 'post'])
    def milestones(self, request, pk=None):
        """List milestones in order, or append a new one."""
        try:
            if request.method == 'POST':
                serializer = MilestoneInputSerializer(data=request.data)
                serializer.is_valid(raise_exception=True)
                milestone = create_milestone(
                    owner=request.user,
                    project_id=pk,
                    **serializer.validated_data
                )
                return Response(MilestoneSerializer(milestone).data, status=status.HTTP_201_CREATED)

            milestones = list_milestones(owner=request.user, project_id=pk)
        except ProjectNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

        return Response(MilestoneSerializer(milestones, many=True).data)

    @extend_schema(request=ReorderMilestonesSerializer, responses={200: MilestoneSerializer(many=True)})
    @action(detail=True, methods=['post'], url_path='milestones/reorder')
    def reorder_milestones(self, request, pk=None):
        serializer = ReorderMilestonesSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            milestones = reorder_milestones(
                owner=request.user,
                project_id=pk,
                milestone_ids=serializer.validated_data['milestone_ids']
            )
        except ProjectNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

        return Response(MilestoneSerializer(milestones, many=True).data)


class MilestoneViewSet(
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """
    Single-milestone operations. Creation and listing live on the project.
    """

    serializer_class = MilestoneSerializer
    permission_classes = [IsAuthenticated]
    lookup_value_regex = UUID_REGEX

    def get_serializer_class(self):
        if self.action in ['update', 'partial_update']:
            return MilestoneUpdateSerializer
        if self.action == 'change_status':
            return MilestoneStatusSerializer
        return MilestoneSerializer

    def retrieve(self, request, *args, **kwargs):
        try:
            milestone = get_milestone(owner=request.user, milestone_id=kwargs['pk'])
        except MilestoneNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(MilestoneSerializer(milestone).data)

    def update(self, request, *args, **kwargs):
        kwargs.pop('partial', False)
        serializer = MilestoneUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        try:
            milestone = update_milestone(
                owner=request.user,
                milestone_id=kwargs['pk'],
                **serializer.validated_data
            )
        except MilestoneNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except MilestoneLockedError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(MilestoneSerializer(milestone).data)

    def destroy(self, request, *args, **kwargs):
        try:
            delete_milestone(owner=request.user, milestone_id=kwargs['pk'])
        except MilestoneNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except MilestoneLockedError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=MilestoneStatusSerializer, responses={200: MilestoneSerializer})
    @action(detail=True, methods=['post'], url_path='status', url_name='status')
    def change_status(self, request, pk=None):
        serializer = MilestoneStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            milestone = update_milestone_status(
                owner=request.user,
                milestone_id=pk,
                status=serializer.validated_data['status']
            )
        except MilestoneNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except MilestoneLockedError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(MilestoneSerializer(milestone).data)


@extend_schema(
    parameters=[
        OpenApiParameter('password', OpenApiTypes.STR, description='Portal password, when the project has one'),
    ],
    responses={200: OpenApiTypes.OBJECT, 401: ErrorSerializer, 404: ErrorSerializer},
    description="Public client portal: project status, milestones, invoices, files and time logs.",
    tags=['public'],
)
@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def public_project(request, public_id):
    try:
        data = get_public_project(
            public_id=public_id,
            password=request.query_params.get('password') or request.headers.get('X-Portal-Password'),
        )
    except ProjectNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except PortalPasswordError as e:
        return Response({'error': str(e), 'password_required': True}, status=status.HTTP_401_UNAUTHORIZED)

    return Response(data)
