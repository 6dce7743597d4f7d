from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'contracts'

router = DefaultRouter()
router.register(r'templates', views.TemplateViewSet, basename='template')
router.register(r'', views.ContractViewSet, basename='contract')

urlpatterns = [
    # Contract ViewSet routes
    # GET    /api/contracts/                         - List contracts (status, client, project)
    # POST   /api/contracts/                         - Create draft contract
    # POST   /api/contracts/from-template/           - Draft from template
    # GET    /api/contracts/{id}/                    - Contract detail
    # PATCH  /api/contracts/{id}/                    - Update draft
    # DELETE /api/contracts/{id}/                    - Delete unsigned contract
    # POST   /api/contracts/{id}/send/               - Send for signature
    # POST   /api/contracts/{id}/remind/             - Signing reminder
    # GET    /api/contracts/{id}/reminders/          - Reminder history
    # POST   /api/contracts/{id}/developer-sign/     - Countersign
    # GET    /api/contracts/{id}/pdf/                - PDF

    # Template ViewSet routes
    # GET    /api/contracts/templates/               - Own and system templates
    # POST   /api/contracts/templates/               - Create template
    # GET    /api/contracts/templates/{id}/          - Template detail
    # PATCH  /api/contracts/templates/{id}/          - Update own template
    # DELETE /api/contracts/templates/{id}/          - Delete own template
    # POST   /api/contracts/templates/{id}/duplicate/    - Copy template
    # POST   /api/contracts/templates/{id}/set-default/  - Make default for its type

    # Signing page (public)
    path('sign/<str:sign_token>/', views.public_contract, name='public-contract'),
    path('sign/<str:sign_token>/sign/', views.public_sign, name='public-sign'),
    path('sign/<str:sign_token>/decline/', views.public_decline, name='public-decline'),
    path('sign/<str:sign_token>/pdf/', views.public_contract_pdf, name='public-contract-pdf'),

    path('', include(router.urls)),
]
