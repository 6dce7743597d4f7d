from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'invoices'

router = DefaultRouter()
router.register(r'', views.InvoiceViewSet, basename='invoice')

urlpatterns = [
    # Invoice ViewSet routes
    # GET    /api/invoices/                      - List invoices (status, client, project)
    # POST   /api/invoices/                      - Create draft invoice
    # GET    /api/invoices/next-number/          - Preview next invoice number
    # POST   /api/invoices/from-milestone/       - Invoice a milestone
    # POST   /api/invoices/from-time-entries/    - Invoice tracked time
    # GET    /api/invoices/{id}/                 - Invoice detail
    # PATCH  /api/invoices/{id}/                 - Update invoice
    # DELETE /api/invoices/{id}/                 - Delete invoice
    # POST   /api/invoices/{id}/send/            - Send to client
    # POST   /api/invoices/{id}/remind/          - Payment reminder
    # POST   /api/invoices/{id}/mark-paid/       - Record manual payment
    # POST   /api/invoices/{id}/cancel/          - Cancel invoice
    # GET    /api/invoices/{id}/payments/        - Payment history
    # GET    /api/invoices/{id}/pdf/             - PDF download

    # Payment page (public)
    path('pay/<str:pay_token>/', views.public_invoice, name='public-invoice'),
    path('pay/<str:pay_token>/pdf/', views.public_invoice_pdf, name='public-invoice-pdf'),

    path('', include(router.urls)),
]
