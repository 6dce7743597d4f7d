from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'timetracking'

router = DefaultRouter()
router.register(r'entries', views.TimeEntryViewSet, basename='entry')

urlpatterns = [
    # Time entry ViewSet routes
    # GET    /api/time/entries/                   - List entries + totals
    # POST   /api/time/entries/                   - Manual entry
    # GET    /api/time/entries/{id}/              - Entry with audit trail
    # PATCH  /api/time/entries/{id}/              - Audited edit
    # DELETE /api/time/entries/{id}/              - Delete entry
    # GET    /api/time/entries/timer/             - Running timer
    # POST   /api/time/entries/timer/start/       - Start timer
    # POST   /api/time/entries/{id}/stop/         - Stop timer
    # POST   /api/time/entries/{id}/discard/      - Discard running timer
    # GET    /api/time/entries/timesheet/         - Weekly timesheet
    # GET    /api/time/entries/stats/             - Stats over a range
    # GET    /api/time/entries/uninvoiced/        - Billable uninvoiced time
    # POST   /api/time/entries/mark-invoiced/     - Lock entries to an invoice

    path('settings/', views.tracking_settings, name='settings'),
    path('public/<str:public_id>/', views.public_time_logs, name='public-logs'),

    path('', include(router.urls)),
]
