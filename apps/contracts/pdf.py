"""
Contract PDF rendering.

The Markdown body is rendered line by line: ``#`` headings, bullet and
numbered lists, ``---`` rules, ``**bold**`` and paragraphs. Signed
contracts end with a signature block carrying the audit metadata.
"""

import base64
import binascii
import io
import logging
import re

from reportlab.lib.units import mm
from reportlab.platypus import Image, Paragraph, Spacer, Table, HRFlowable

from apps.common.pdf import RULE, build_styles, text, lines, render

logger = logging.getLogger(__name__)

BOLD = re.compile(r'\*\*(.+?)\*\*')
NUMBERED = re.compile(r'^\d+\.\s+')
DATA_URL = re.compile(r'^data:image/(png|jpe?g);base64,(.+)$', re.DOTALL)


def inline_markup(value: str) -> str:
    """Escape a line and turn ``**bold**`` into reportlab markup."""
    return BOLD.sub(r'<b>\1</b>', text(value))


def markdown_flowables(content: str, styles: dict) -> list:
    elements = []
    paragraph = []

    def flush():
        if paragraph:
            elements.append(Paragraph(inline_markup(' '.join(paragraph)), styles['body']))
            elements.append(Spacer(1, 4))
            paragraph.clear()

    for raw in (content or '').splitlines():
        line = raw.strip()
        if not line:
            flush()
        elif line.startswith('### '):
            flush()
            elements.append(Paragraph(inline_markup(line[4:]), styles['subheading']))
        elif line.startswith('## '):
            flush()
            elements.append(Paragraph(inline_markup(line[3:]), styles['heading']))
        elif line.startswith('# '):
            flush()
            elements.append(Paragraph(inline_markup(line[2:]), styles['title']))
        elif line == '---':
            flush()
            elements.append(HRFlowable(width='100%', color=RULE, spaceBefore=6, spaceAfter=6))
        elif line.startswith(('- ', '* ')):
            flush()
            elements.append(Paragraph(inline_markup(line[2:]), styles['body'], bulletText='•'))
        elif NUMBERED.match(line):
            flush()
            number = line.split('.', 1)[0]
            elements.append(Paragraph(inline_markup(NUMBERED.sub('', line)), styles['body'], bulletText=f'{number}.'))
        else:
            paragraph.append(line)
    flush()
    return elements


def signature_image(signature: str, width=60 * mm, height=20 * mm):
    """Image for a drawn (data URL) signature, or None for typed ones."""
    match = DATA_URL.match(signature or '')
    if not match:
        return None
    try:
        data = base64.b64decode(match.group(2))
    except (binascii.Error, ValueError):
        logger.warning("Unreadable signature image")
        return None
    return Image(io.BytesIO(data), width=width, height=height, kind='proportional')


def _signature_cell(signature: str, styles: dict):
    image = signature_image(signature)
    if image is not None:
        return image
    return Paragraph(f"<i>{text(signature)}</i>" if signature else '&nbsp;', styles['heading'])


def signature_block(contract, styles: dict) -> list:
    owner = contract.owner
    client_details = lines(
        contract.client_signed_name or contract.client.name,
        contract.client_signed_email,
        contract.signed_at and f"Signed {contract.signed_at:%B %d, %Y at %H:%M UTC}",
        contract.client_ip and f"IP address: {contract.client_ip}",
        contract.client_user_agent and f"Device: {contract.client_user_agent}",
    )
    developer_details = lines(
        owner.get_business_name(),
        owner.email,
        contract.developer_signed_at and f"Signed {contract.developer_signed_at:%B %d, %Y at %H:%M UTC}",
    )

    table = Table(
        [
            [Paragraph('<b>CLIENT</b>', styles['body']), Paragraph('<b>DEVELOPER</b>', styles['body'])],
            [_signature_cell(contract.client_signature, styles), _signature_cell(contract.developer_signature, styles)],
            [Paragraph(client_details, styles['small']), Paragraph(developer_details, styles['small'])],
        ],
        colWidths=['50%', '50%'],
    )
    return [
        Spacer(1, 16),
        HRFlowable(width='100%', color=RULE, spaceBefore=6, spaceAfter=10),
        Paragraph('Signatures', styles['heading']),
        table,
    ]


def render_contract_pdf(contract) -> bytes:
    styles = build_styles()
    owner = contract.owner

    elements = [
        Paragraph(
            f"<b>{text(owner.get_business_name())}</b><br/>" + lines(owner.business_address, owner.email),
            styles['small']
        ),
        Spacer(1, 12),
    ]
    if not (contract.content or '').lstrip().startswith('# '):
        elements.append(Paragraph(text(contract.name), styles['title']))
    elements.append(Paragraph(
        lines(
            f"Client: {contract.client.name}",
            contract.project and f"Project: {contract.project.name}",
        ),
        styles['small']
    ))
    elements.append(Spacer(1, 10))
    elements.extend(markdown_flowables(contract.content, styles))
    elements.extend(signature_block(contract, styles))
    elements.append(Spacer(1, 12))
    elements.append(Paragraph(f"Contract ID: {contract.id}", styles['footer']))

    return render(elements, title=contract.name)
