"""Built-in templates installed by ``manage.py seed_templates``."""

from apps.contracts.models import TemplateType

WEB_DEVELOPMENT_AGREEMENT = """# Web Development Agreement

**Date:** {{date}}
**Project:** {{project_name}}

This Web Development Agreement ("Agreement") is made between:

**Developer:** {{developer_name}} ({{developer_email}})
**Client:** {{client_name}}, {{client_company}} ({{client_email}})

## 1. Scope of Work

The Developer will design and build the following:

{{scope_description}}

## 2. Timeline

- **Start:** {{start_date}}
- **Estimated completion:** {{end_date}}

### Milestones

{{milestones}}

## 3. Payment

**Total project cost:** {{total_amount}}

Each milestone is invoiced on completion. Invoices are payable within 14 days of receipt.

## 4. Intellectual Property

Once the project is paid in full, the Client owns the custom code, designs and content produced for this project. The Developer keeps the rights to pre-existing code and tools. Open-source components stay under their own licenses.

## 5. Revisions

Two rounds of revisions are included per milestone. Further changes are quoted separately and must be requested in writing.

## 6. Confidentiality

Both parties will keep confidential any proprietary information shared during the project.

## 7. Warranty

The Developer will fix defects reported within **30 days** of completion at no extra cost.

## 8. Limitation of Liability

The Developer's total liability is limited to the amount paid under this Agreement.

## 9. Termination

Either party may end this Agreement with **14 days** written notice. The Client pays for work completed up to that date and receives everything delivered so far.
"""

CONSULTING_AGREEMENT = """# Consulting Agreement

**Effective date:** {{date}}

This Consulting Agreement is made between:

**Consultant:** {{developer_name}}
**Client:** {{client_name}}

## 1. Services

The Consultant will provide the following technical consulting services:

{{scope_description}}

## 2. Term

This Agreement runs from {{start_date}} until {{end_date}}, unless ended earlier by either party.

## 3. Compensation

Work is billed hourly and invoiced monthly. Invoices are due within 14 days.

## 4. Relationship

The Consultant works as an independent contractor and controls their own schedule and methods.

## 5. Confidentiality

The Consultant will not disclose the Client's proprietary information to third parties.

## 6. Termination

Either party may end this Agreement with **7 days** written notice. Completed work is invoiced and payable within 14 days.
"""

SYSTEM_TEMPLATES = [
    {
        'type': TemplateType.CONTRACT,
        'name': 'Web Development Agreement',
        'description': 'Standard contract for website development projects',
        'content': WEB_DEVELOPMENT_AGREEMENT,
        'is_default': True,
    },
    {
        'type': TemplateType.CONTRACT,
        'name': 'Consulting Agreement',
        'description': 'Hourly consulting engagement',
        'content': CONSULTING_AGREEMENT,
    },
]
