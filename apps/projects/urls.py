from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'projects'

router = DefaultRouter()
router.register(r'milestones', views.MilestoneViewSet, basename='milestone')
router.register(r'', views.ProjectViewSet, basename='project')

urlpatterns = [
    # Project ViewSet routes
    # GET    /api/projects/                          - List projects (status, client)
    # POST   /api/projects/                          - Create project (+ milestones)
    # GET    /api/projects/{id}/                     - Project with milestones
    # PATCH  /api/projects/{id}/                     - Update project
    # DELETE /api/projects/{id}/                     - Delete project
    # GET    /api/projects/{id}/milestones/          - List milestones
    # POST   /api/projects/{id}/milestones/          - Add milestone
    # POST   /api/projects/{id}/milestones/reorder/  - Reorder milestones

    # Milestone routes
    # GET    /api/projects/milestones/{id}/          - Milestone detail
    # PATCH  /api/projects/milestones/{id}/          - Update milestone
    # DELETE /api/projects/milestones/{id}/          - Delete milestone
    # POST   /api/projects/milestones/{id}/status/   - Change status

    # Client portal (public)
    path('public/<str:public_id>/', views.public_project, name='public-project'),

    path('', include(router.urls)),
]
