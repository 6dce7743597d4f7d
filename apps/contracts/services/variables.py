"""
Placeholder substitution for contract templates.

Templates reference values as ``{{ key }}``. Keys are matched without
regard to surrounding whitespace or case; unknown keys are left in place.
"""

import re
from datetime import date
from typing import Optional

from django.utils import timezone

from apps.common.money import format_money

PLACEHOLDER = re.compile(r'\{\{\s*([A-Za-z0-9_]+)\s*\}\}')

NOT_SET = 'TBD'
NOT_DEFINED = 'To be defined'


def format_date(value: Optional[date]) -> str:
    if not value:
        return NOT_SET
    return f"{value:%B} {value.day}, {value.year}"


def milestones_text(milestones, currency: str) -> str:
    """Numbered Markdown list of milestones with amounts and due dates."""
    rows = []
    for index, milestone in enumerate(milestones, start=1):
        row = f"{index}. **{milestone.name}** - {format_money(milestone.amount, currency)}"
        if milestone.due_date:
            row += f" (Due: {format_date(milestone.due_date)})"
        rows.append(row)
    return '\n'.join(rows)


def default_variables(*, owner, client, project=None, name: str = '') -> dict:
    currency = owner.currency
    milestones = list(project.milestones.order_by('order', 'created_at')) if project else []

    return {
        'date': format_date(timezone.localdate()),
        'client_name': client.name,
        'client_company': client.company or '',
        'client_email': client.email,
        'developer_name': owner.get_business_name(),
        'developer_email': owner.email,
        'business_name': owner.get_business_name(),
        'business_address': owner.business_address or '',
        'project_name': project.name if project else name,
        'start_date': format_date(project.start_date) if project else NOT_SET,
        'end_date': format_date(project.end_date) if project else NOT_SET,
        'total_amount': format_money(project.total_amount, currency) if project and project.total_amount else NOT_SET,
        'milestones': milestones_text(milestones, currency) or NOT_DEFINED,
        'scope_description': (project.description if project else '') or NOT_DEFINED,
    }


def substitute(content: str, variables: dict) -> str:
    lookup = {str(key).lower(): str(value) for key, value in variables.items()}

    def replace(match):
        return lookup.get(match.group(1).lower(), match.group(0))

    return PLACEHOLDER.sub(replace, content)
