from django.urls import path
from . import views

app_name = 'payments'

urlpatterns = [
    # Stripe Connect
    # GET  /api/payments/connect/             - Connection status
    # POST /api/payments/connect/onboarding/  - Onboarding link
    # POST /api/payments/connect/dashboard/   - Express dashboard link
    # GET  /api/payments/connect/balance/     - Account balance
    # POST /api/payments/connect/disconnect/  - Forget connected account
    # POST /api/payments/refunds/             - Refund a payment
    path('connect/', views.connect_status, name='connect-status'),
    path('connect/onboarding/', views.onboarding_link, name='connect-onboarding'),
    path('connect/dashboard/', views.dashboard_link, name='connect-dashboard'),
    path('connect/balance/', views.balance, name='connect-balance'),
    path('connect/disconnect/', views.disconnect_stripe, name='connect-disconnect'),
    path('refunds/', views.refund, name='refund'),

    # Public
    # POST /api/payments/checkout/            - Checkout session for a pay token
    # POST /api/payments/webhook/             - Stripe events
    path('checkout/', views.checkout, name='checkout'),
    path('webhook/', views.stripe_webhook, name='webhook'),
]
