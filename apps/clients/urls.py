from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'clients'

router = DefaultRouter()
router.register(r'', views.ClientViewSet, basename='client')

urlpatterns = [
    # Client ViewSet routes
    # GET    /api/clients/                        - List clients (status, search)
    # POST   /api/clients/                        - Create client
    # GET    /api/clients/{id}/                   - Client detail with payment behavior
    # PUT    /api/clients/{id}/                   - Update client
    # PATCH  /api/clients/{id}/                   - Partial update
    # DELETE /api/clients/{id}/                   - Delete (blocked with projects/invoices)

    # Custom client actions
    # GET    /api/clients/status_counts/          - Counts per status
    # GET    /api/clients/follow_ups/             - Pending follow-ups
    # GET    /api/clients/{id}/notes/             - List notes
    # POST   /api/clients/{id}/notes/             - Add note
    # DELETE /api/clients/{id}/notes/{note_id}/   - Delete note
    # POST   /api/clients/{id}/follow_up/         - Set follow-up
    # DELETE /api/clients/{id}/follow_up/         - Complete follow-up
    # POST   /api/clients/{id}/snooze/            - Snooze follow-up
    # GET    /api/clients/{id}/payment_behavior/  - Payment behavior rating
    path('', include(router.urls)),
]
