from rest_framework import viewsets, mixins, status
from rest_framework.decorators import action, api_view, permission_classes, authentication_classes
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from apps.common.storage import StorageError
from apps.projects.services import ProjectNotFoundError, MilestoneNotFoundError, PortalPasswordError
from .serializers import (
    DeliverableSerializer,
    DeliverableDetailSerializer,
    DeliverableFilterSerializer,
    DeliverableCreateSerializer,
    DeliverableVersionSerializer,
    DeliverableUpdateSerializer,
    GithubLinkSerializer,
    UploadUrlRequestSerializer,
    UploadUrlSerializer,
    ErrorSerializer,
)
from .services import (
    list_deliverables,
    get_deliverable,
    get_versions,
    get_upload_url,
    create_deliverable,
    create_version,
    add_github_link,
    update_deliverable,
    delete_deliverable,
    list_public_deliverables,
    track_download,
    # Exceptions
    DeliverablesServiceError,
    DeliverableNotFoundError,
)

UUID_REGEX = '[0-9a-f-]{36}'


class DeliverableViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    mixins.UpdateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """
    ViewSet for project deliverables.

    list: Files of a project (?project=<id>), newest first
    create: Record an uploaded file (versioned by file name)
    retrieve: File with its version history
    partial_update: Notes, milestone or repository link
    destroy: Delete the record and the stored file
    """

    serializer_class = DeliverableSerializer
    permission_classes = [IsAuthenticated]
    lookup_value_regex = UUID_REGEX

    def get_serializer_class(self):
        if self.action == 'create':
            return DeliverableCreateSerializer
        if self.action in ['update', 'partial_update']:
            return DeliverableUpdateSerializer
        if self.action == 'retrieve':
            return DeliverableDetailSerializer
        return DeliverableSerializer

    def list(self, request, *args, **kwargs):
        filter_serializer = DeliverableFilterSerializer(data=request.query_params)
        filter_serializer.is_valid(raise_exception=True)

        try:
            deliverables = list_deliverables(
                owner=request.user,
                project_id=filter_serializer.validated_data['project'],
                milestone_id=filter_serializer.validated_data.get('milestone'),
            )
        except ProjectNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

        return Response(DeliverableSerializer(deliverables, many=True).data)

    def retrieve(self, request, *args, **kwargs):
        try:
            deliverable = get_deliverable(owner=request.user, deliverable_id=kwargs['pk'])
        except DeliverableNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

        serializer = DeliverableDetailSerializer(
            deliverable,
            context={'versions': get_versions(deliverable)}
        )
        return Response(serializer.data)

    def create(self, request, *args, **kwargs):
        serializer = DeliverableCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            deliverable = create_deliverable(owner=request.user, **serializer.validated_data)
        except (ProjectNotFoundError, MilestoneNotFoundError) as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

        return Response(DeliverableSerializer(deliverable).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        kwargs.pop('partial', False)
        serializer = DeliverableUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        try:
            deliverable = update_deliverable(
                owner=request.user,
                deliverable_id=kwargs['pk'],
                **serializer.validated_data
            )
        except (DeliverableNotFoundError, MilestoneNotFoundError) as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

        return Response(DeliverableSerializer(deliverable).data)

    def destroy(self, request, *args, **kwargs):
        try:
            delete_deliverable(owner=request.user, deliverable_id=kwargs['pk'])
        except DeliverableNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=UploadUrlRequestSerializer, responses={200: UploadUrlSerializer, 400: ErrorSerializer})
    @action(detail=False, methods=['post'], url_path='upload-url', url_name='upload-url')
    def upload_url(self, request):
        """Presigned PUT URL for uploading straight to storage."""
        serializer = UploadUrlRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            result = get_upload_url(owner=request.user, **serializer.validated_data)
        except ProjectNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except DeliverablesServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except StorageError as e:
            return Response({'error': str(e)}, status=status.HTTP_502_BAD_GATEWAY)

        return Response(UploadUrlSerializer(result).data)

    @extend_schema(request=DeliverableVersionSerializer, responses={201: DeliverableSerializer})
    @action(detail=True, methods=['post'], url_path='versions', url_name='versions')
    def new_version(self, request, pk=None):
        serializer = DeliverableVersionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            deliverable = create_version(owner=request.user, previous_id=pk, **serializer.validated_data)
        except DeliverableNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

        return Response(DeliverableSerializer(deliverable).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=GithubLinkSerializer, responses={201: DeliverableSerializer, 400: ErrorSerializer})
    @action(detail=False, methods=['post'])
    def github(self, request):
        """Attach a GitHub repository link to a project."""
        serializer = GithubLinkSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            deliverable = add_github_link(owner=request.user, **serializer.validated_data)
        except ProjectNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except DeliverablesServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(DeliverableSerializer(deliverable).data, status=status.HTTP_201_CREATED)


@extend_schema(
    parameters=[
        OpenApiParameter('password', OpenApiTypes.STR, description='Portal password, when the project has one'),
    ],
    responses={200: OpenApiTypes.OBJECT, 401: ErrorSerializer, 404: ErrorSerializer},
    tags=['public'],
)
@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def public_deliverables(request, public_id):
    try:
        files = list_public_deliverables(
            public_id=public_id,
            password=request.query_params.get('password') or request.headers.get('X-Portal-Password'),
        )
    except ProjectNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except PortalPasswordError as e:
        return Response({'error': str(e), 'password_required': True}, status=status.HTTP_401_UNAUTHORIZED)

    return Response(files)


@extend_schema(
    request=None,
    responses={200: OpenApiTypes.OBJECT, 404: ErrorSerializer},
    description="Count a client download and return the file URL.",
    tags=['public'],
)
@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def download(request, deliverable_id):
    try:
        file_url = track_download(deliverable_id=deliverable_id)
    except DeliverableNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    return Response({'success': True, 'file_url': file_url})
