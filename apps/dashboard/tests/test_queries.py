from datetime import timedelta

import pytest
from django.utils import timezone

from apps.clients.models import Client
from apps.dashboard.queries import DashboardQueries
from apps.invoices.models import InvoicePayment, InvoiceStatus
from apps.invoices.services import create_invoice
from apps.projects.models import MilestoneStatus, Project, ProjectStatus


@pytest.mark.django_db
class TestStats:

    def test_empty_account(self, user):
        assert DashboardQueries.stats(user) == {
            'active_projects': 0,
            'total_clients': 0,
            'outstanding_invoices': 0,
            'outstanding_amount': 0,
            'paid_this_month': 0,
            'currency': 'USD',
        }

    def test_totals(self, user, outstanding_invoice, other_user, other_client_record):
        InvoicePayment.objects.create(invoice=outstanding_invoice, amount=50000, paid_at=timezone.now())
        outstanding_invoice.paid_amount = 50000
        outstanding_invoice.status = InvoiceStatus.PARTIALLY_PAID
        outstanding_invoice.save()
        Project.objects.create(owner=other_user, client=other_client_record, name='Theirs', status=ProjectStatus.ACTIVE)

        stats = DashboardQueries.stats(user)

        assert stats['active_projects'] == 1
        assert stats['total_clients'] == 1
        assert stats['outstanding_invoices'] == 1
        assert stats['outstanding_amount'] == 100000
        assert stats['paid_this_month'] == 50000

    def test_drafts_not_outstanding(self, user, invoice):
        assert DashboardQueries.stats(user)['outstanding_invoices'] == 0

    def test_payments_before_this_month_excluded(self, user, outstanding_invoice):
        last_month = DashboardQueries.start_of_month() - timedelta(days=1)
        InvoicePayment.objects.create(invoice=outstanding_invoice, amount=50000, paid_at=last_month)

        assert DashboardQueries.stats(user)['paid_this_month'] == 0


@pytest.mark.django_db
class TestPanels:

    def test_upcoming_milestones(self, user, project, today):
        design = project.milestones.get(name='Design')
        build = project.milestones.get(name='Build')
        design.due_date = today + timedelta(days=3)
        design.save()
        build.due_date = today - timedelta(days=1)
        build.save()
        project.milestones.create(
            name='Launch',
            amount=0,
            order=2,
            due_date=today + timedelta(days=1),
            status=MilestoneStatus.COMPLETED,
        )

        milestones = list(DashboardQueries.upcoming_milestones(user))

        assert [m.name for m in milestones] == ['Design']

    def test_pending_invoices_soonest_due_first(self, user, client_record, outstanding_invoice, today):
        no_due = create_invoice(
            owner=user,
            client_id=client_record.id,
            line_items=[{'description': 'Retainer', 'quantity': 1, 'unit_price': 1000}],
        )
        sooner = create_invoice(
            owner=user,
            client_id=client_record.id,
            line_items=[{'description': 'Audit', 'quantity': 1, 'unit_price': 1000}],
            due_date=today + timedelta(days=2),
        )
        for invoice in (no_due, sooner):
            invoice.status = InvoiceStatus.SENT
            invoice.save()

        invoices = list(DashboardQueries.pending_invoices(user))

        assert [i.id for i in invoices] == [sooner.id, outstanding_invoice.id, no_due.id]

    def test_follow_ups_within_a_week(self, user, client_record, today):
        client_record.follow_up_date = today - timedelta(days=2)
        client_record.save()
        Client.objects.create(owner=user, name='Soon', email='soon@example.com', follow_up_date=today + timedelta(days=7))
        Client.objects.create(owner=user, name='Later', email='later@example.com', follow_up_date=today + timedelta(days=8))

        names = [c.name for c in DashboardQueries.follow_ups(user)]

        assert names == ['Acme Corp', 'Soon']

    def test_recent_projects_limited(self, user, client_record):
        for index in range(7):
            Project.objects.create(owner=user, client=client_record, name=f'Project {index}')

        assert len(DashboardQueries.recent_projects(user)) == 5
