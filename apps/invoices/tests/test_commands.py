from datetime import timedelta
from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError
from django.utils import timezone

from apps.invoices.models import InvoiceStatus


@pytest.mark.django_db
class TestMarkOverdueInvoicesCommand:

    def test_nothing_overdue(self, sent_invoice):
        out = StringIO()
        call_command('mark_overdue_invoices', stdout=out)

        assert 'No invoices became overdue.' in out.getvalue()

    def test_marks_overdue(self, sent_invoice):
        sent_invoice.due_date = timezone.localdate() - timedelta(days=2)
        sent_invoice.save()

        out = StringIO()
        call_command('mark_overdue_invoices', stdout=out)

        assert 'Marked 1 invoice(s) as overdue.' in out.getvalue()
        sent_invoice.refresh_from_db()
        assert sent_invoice.status == InvoiceStatus.OVERDUE

    def test_with_date(self, sent_invoice):
        later = (sent_invoice.due_date + timedelta(days=1)).isoformat()
        out = StringIO()
        call_command('mark_overdue_invoices', '--date', later, stdout=out)

        assert 'Marked 1 invoice(s) as overdue.' in out.getvalue()

    def test_invalid_date(self, db):
        with pytest.raises(CommandError):
            call_command('mark_overdue_invoices', '--date', 'tomorrow')
