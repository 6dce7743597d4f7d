"""
Contract and invoice templates.

Users see their own templates plus the built-in system templates. System
templates are read-only; users duplicate them to customize.
"""

import logging
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.db.models import Q, QuerySet

from apps.accounts.models import User
from apps.contracts.models import Template, TemplateType
from apps.contracts.system_templates import SYSTEM_TEMPLATES

from .exceptions import TemplateNotFoundError, SystemTemplateError

logger = logging.getLogger(__name__)


def visible_templates(owner: User) -> QuerySet[Template]:
    return Template.objects.filter(Q(owner=owner) | Q(is_system=True))


def list_templates(*, owner: User, type: Optional[str] = None) -> QuerySet[Template]:
    """Own and system templates, system ones first."""
    queryset = visible_templates(owner)
    if type:
        queryset = queryset.filter(type=type)
    return queryset.order_by('-is_system', '-created_at')


def get_template(*, owner: User, template_id: UUID) -> Template:
    try:
        return visible_templates(owner).get(id=template_id)
    except Template.DoesNotExist:
        raise TemplateNotFoundError("Template not found")


def _get_own_template(owner: User, template_id: UUID, action: str) -> Template:
    template = get_template(owner=owner, template_id=template_id)
    if template.is_system:
        raise SystemTemplateError(f"Cannot {action} system templates. Duplicate it first.")
    return template


def _clear_default(owner: User, type: str, keep_id: Optional[UUID] = None) -> None:
    others = Template.objects.filter(owner=owner, type=type, is_default=True)
    if keep_id:
        others = others.exclude(id=keep_id)
    others.update(is_default=False)


@transaction.atomic
def create_template(
    *,
    owner: User,
    type: str,
    name: str,
    content: str,
    description: str = '',
    is_default: bool = False
) -> Template:
    if is_default:
        _clear_default(owner, type)
    return Template.objects.create(
        owner=owner,
        type=type,
        name=name,
        content=content,
        description=description,
        is_default=is_default,
        is_system=False,
    )


@transaction.atomic
def update_template(*, owner: User, template_id: UUID, **changes) -> Template:
    template = _get_own_template(owner, template_id, 'edit')

    if changes.get('is_default'):
        _clear_default(owner, changes.get('type', template.type), keep_id=template.id)

    for field, value in changes.items():
        setattr(template, field, value)
    template.save()
    return template


def duplicate_template(*, owner: User, template_id: UUID) -> Template:
    """Owned, non-default copy of a template (system templates included)."""
    source = get_template(owner=owner, template_id=template_id)
    return Template.objects.create(
        owner=owner,
        type=source.type,
        name=f"{source.name} (Copy)",
        description=source.description,
        content=source.content,
        is_default=False,
        is_system=False,
    )


def delete_template(*, owner: User, template_id: UUID) -> None:
    template = _get_own_template(owner, template_id, 'delete')
    template.delete()


@transaction.atomic
def set_default_template(*, owner: User, template_id: UUID) -> Template:
    template = _get_own_template(owner, template_id, 'change')
    _clear_default(owner, template.type, keep_id=template.id)
    if not template.is_default:
        template.is_default = True
        template.save(update_fields=['is_default', 'updated_at'])
    return template


def seed_system_templates() -> list:
    """
    Install the built-in templates that are missing.

    Returns:
        Names of the templates created
    """
    created = []
    for data in SYSTEM_TEMPLATES:
        _, was_created = Template.objects.get_or_create(
            is_system=True,
            owner=None,
            name=data['name'],
            defaults={
                'type': data.get('type', TemplateType.CONTRACT),
                'description': data['description'],
                'content': data['content'],
                'is_default': data.get('is_default', False),
            },
        )
        if was_created:
            created.append(data['name'])
            logger.info("Installed system template %s", data['name'])
    return created
