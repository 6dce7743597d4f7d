from django.urls import path
from . import views

app_name = 'dashboard'

urlpatterns = [
    # Panels
    path('', views.overview, name='overview'),
    path('stats/', views.stats, name='stats'),
    path('recent-projects/', views.recent_projects, name='recent-projects'),
    path('upcoming-milestones/', views.upcoming_milestones, name='upcoming-milestones'),
    path('pending-invoices/', views.pending_invoices, name='pending-invoices'),
    path('follow-ups/', views.follow_ups, name='follow-ups'),

    # Search
    path('search/', views.search, name='search'),
]
