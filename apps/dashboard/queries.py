"""
Dashboard Queries
=================

Read-only aggregates for the freelancer's home screen.

Classes:
    DashboardQueries: Static methods for each dashboard panel.

Example:
    Building the overview::

        from apps.dashboard.queries import DashboardQueries

        stats = DashboardQueries.stats(user)
        print(f"{stats['outstanding_invoices']} invoices awaiting payment")

Note:
    All money values are integer cents. Methods return plain dictionaries
    or querysets; serialization happens in the views.
"""

from datetime import datetime, time

from django.db.models import BigIntegerField, Count, F, Sum
from django.db.models.functions import Coalesce
from django.utils import timezone

from apps.clients.models import Client
from apps.clients.services import get_upcoming_follow_ups
from apps.invoices.models import Invoice, InvoicePayment, OUTSTANDING_STATUSES
from apps.projects.models import Project, ProjectStatus, Milestone, MilestoneStatus

PANEL_SIZE = 5
FOLLOW_UP_WINDOW_DAYS = 7


class DashboardQueries:
    """
    Queries behind the dashboard panels.

    Methods:
        stats: Headline counts and money totals.
        recent_projects: Most recently updated projects.
        upcoming_milestones: Open milestones due from today on.
        pending_invoices: Unpaid invoices, soonest due first.
        follow_ups: Clients to get back to this week (overdue included).
    """

    @staticmethod
    def start_of_month():
        today = timezone.localdate()
        return timezone.make_aware(datetime.combine(today.replace(day=1), time.min))

    @staticmethod
    def stats(user):
        """
        Returns:
            dict with active_projects, total_clients, outstanding_invoices,
            outstanding_amount and paid_this_month
        """
        outstanding = Invoice.objects.filter(owner=user, status__in=OUTSTANDING_STATUSES).aggregate(
            count=Count('id'),
            amount=Coalesce(Sum(F('total') - F('paid_amount')), 0, output_field=BigIntegerField()),
        )
        paid_this_month = InvoicePayment.objects.filter(
            invoice__owner=user,
            paid_at__gte=DashboardQueries.start_of_month(),
        ).aggregate(total=Coalesce(Sum('amount'), 0, output_field=BigIntegerField()))['total']

        return {
            'active_projects': Project.objects.filter(owner=user, status=ProjectStatus.ACTIVE).count(),
            'total_clients': Client.objects.filter(owner=user).count(),
            'outstanding_invoices': outstanding['count'],
            'outstanding_amount': outstanding['amount'],
            'paid_this_month': paid_this_month,
            'currency': user.currency,
        }

    @staticmethod
    def recent_projects(user, limit=PANEL_SIZE):
        return (
            Project.objects
            .filter(owner=user)
            .select_related('client')
            .prefetch_related('milestones')
            .order_by('-updated_at')[:limit]
        )

    @staticmethod
    def upcoming_milestones(user, limit=PANEL_SIZE):
        return (
            Milestone.objects
            .filter(
                project__owner=user,
                status__in=[MilestoneStatus.PENDING, MilestoneStatus.IN_PROGRESS],
                due_date__gte=timezone.localdate(),
            )
            .select_related('project', 'project__client')
            .order_by('due_date', 'order')[:limit]
        )

    @staticmethod
    def pending_invoices(user, limit=PANEL_SIZE):
        return (
            Invoice.objects
            .filter(owner=user, status__in=OUTSTANDING_STATUSES)
            .select_related('client', 'project')
            .order_by(F('due_date').asc(nulls_last=True), 'created_at')[:limit]
        )

    @staticmethod
    def follow_ups(user, limit=PANEL_SIZE):
        return get_upcoming_follow_ups(owner=user, within_days=FOLLOW_UP_WINDOW_DAYS)[:limit]
