from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'deliverables'

router = DefaultRouter()
router.register(r'', views.DeliverableViewSet, basename='deliverable')

urlpatterns = [
    # Deliverable ViewSet routes
    # GET    /api/deliverables/?project={id}     - Project files
    # POST   /api/deliverables/                  - Record uploaded file
    # POST   /api/deliverables/upload-url/       - Presigned upload URL
    # POST   /api/deliverables/github/           - Add GitHub repository link
    # GET    /api/deliverables/{id}/             - File with versions
    # PATCH  /api/deliverables/{id}/             - Update notes/milestone
    # DELETE /api/deliverables/{id}/             - Delete file
    # POST   /api/deliverables/{id}/versions/    - Upload new version

    # Client portal (public)
    path('public/<str:public_id>/', views.public_deliverables, name='public-list'),
    path('<uuid:deliverable_id>/download/', views.download, name='download'),

    path('', include(router.urls)),
]
