from django.urls import path
from . import views

app_name = 'users'

urlpatterns = [
    # Authentication
    path('register/', views.register, name='register'),
    path('login/', views.login, name='login'),

    # User profile
    path('user/', views.get_current_user, name='current-user'),

    # Business settings
    path('settings/', views.business_settings, name='settings'),
    path('settings/notifications/', views.notification_preferences, name='notification-preferences'),
    path('settings/logo/upload-url/', views.logo_upload_url, name='logo-upload-url'),
    path('settings/logo/', views.logo, name='logo'),
]
