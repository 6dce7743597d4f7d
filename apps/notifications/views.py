from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from .serializers import (
    NotificationSerializer,
    NotificationListQuerySerializer,
    NotificationListResponseSerializer,
    UnreadCountSerializer,
    CountResponseSerializer,
    ErrorSerializer,
)
from .services import (
    list_notifications,
    get_unread_count,
    get_recent,
    mark_as_read,
    mark_all_as_read,
    delete_notification,
    delete_all_read,
    NotificationNotFoundError,
)


@extend_schema(
    parameters=[
        OpenApiParameter('unread_only', OpenApiTypes.BOOL, description='Only unread notifications'),
        OpenApiParameter('limit', OpenApiTypes.INT, description='Page size (max 100)', default=20),
        OpenApiParameter('offset', OpenApiTypes.INT, description='Items to skip', default=0),
    ],
    responses={200: NotificationListResponseSerializer},
    description="List the current user's notifications, newest first.",
    tags=['notifications'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def notification_list(request):
    query = NotificationListQuerySerializer(data=request.query_params)
    query.is_valid(raise_exception=True)

    result = list_notifications(user=request.user, **query.validated_data)

    return Response({
        'notifications': NotificationSerializer(result['notifications'], many=True).data,
        'total': result['total'],
        'unread_count': result['unread_count'],
    })


@extend_schema(
    responses={200: UnreadCountSerializer},
    description="Number of unread notifications (for the bell badge).",
    tags=['notifications'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def unread_count(request):
    return Response({'count': get_unread_count(user=request.user)})


@extend_schema(
    parameters=[
        OpenApiParameter('limit', OpenApiTypes.INT, description='Number of notifications', default=5),
    ],
    responses={200: NotificationSerializer(many=True)},
    description="Most recent notifications for the dropdown.",
    tags=['notifications'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def recent(request):
    try:
        limit = int(request.query_params.get('limit', 5))
    except ValueError:
        return Response({'error': 'limit must be an integer'}, status=status.HTTP_400_BAD_REQUEST)

    notifications = get_recent(user=request.user, limit=limit)
    return Response(NotificationSerializer(notifications, many=True).data)


@extend_schema(
    request=None,
    responses={200: NotificationSerializer, 404: ErrorSerializer},
    description="Mark one notification as read.",
    tags=['notifications'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def mark_read(request, notification_id):
    try:
        notification = mark_as_read(user=request.user, notification_id=notification_id)
    except NotificationNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    return Response(NotificationSerializer(notification).data)


@extend_schema(
    request=None,
    responses={200: CountResponseSerializer},
    description="Mark every unread notification as read.",
    tags=['notifications'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def mark_all_read(request):
    count = mark_all_as_read(user=request.user)
    return Response({'count': count, 'message': f'Marked {count} notification(s) as read'})


@extend_schema(
    responses={204: None, 404: ErrorSerializer},
    description="Delete one notification.",
    tags=['notifications'],
)
@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def delete(request, notification_id):
    try:
        delete_notification(user=request.user, notification_id=notification_id)
    except NotificationNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    return Response(status=status.HTTP_204_NO_CONTENT)


@extend_schema(
    responses={200: CountResponseSerializer},
    description="Delete every notification that has been read.",
    tags=['notifications'],
)
@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def delete_read(request):
    count = delete_all_read(user=request.user)
    return Response({'count': count, 'message': f'Deleted {count} notification(s)'})
