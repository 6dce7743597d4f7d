from django.urls import path
from . import views

app_name = 'notifications'

urlpatterns = [
    # GET    /api/notifications/                 - List (unread_only, limit, offset)
    # GET    /api/notifications/unread-count/    - Unread badge count
    # GET    /api/notifications/recent/          - Latest N
    # POST   /api/notifications/read-all/        - Mark all read
    # DELETE /api/notifications/read/            - Delete all read
    # POST   /api/notifications/{id}/read/       - Mark one read
    # DELETE /api/notifications/{id}/            - Delete one
    path('', views.notification_list, name='list'),
    path('unread-count/', views.unread_count, name='unread-count'),
    path('recent/', views.recent, name='recent'),
    path('read-all/', views.mark_all_read, name='read-all'),
    path('read/', views.delete_read, name='delete-read'),
    path('<uuid:notification_id>/read/', views.mark_read, name='mark-read'),
    path('<uuid:notification_id>/', views.delete, name='delete'),
]
