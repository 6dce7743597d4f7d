"""
Invoice PDF rendering.

The document carries the business header, bill-to block, line items,
totals and a QR code that opens the online payment page.
"""

import io

import qrcode
from reportlab.lib.units import mm
from reportlab.platypus import Image, Paragraph, Spacer, Table, TableStyle

from apps.common.money import format_money
from apps.common.pdf import build_styles, table_style, text, lines, render
from apps.notifications.emails import pay_url


def _format_quantity(quantity) -> str:
    value = float(quantity)
    return f'{value:g}' if value != int(value) else str(int(value))


def pay_link_qr(url: str, size=32 * mm) -> Image:
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=2,
    )
    qr.add_data(url)
    qr.make(fit=True)

    buffer = io.BytesIO()
    qr.make_image(fill_color="black", back_color="white").save(buffer, format='PNG')
    buffer.seek(0)
    return Image(buffer, width=size, height=size)


def render_invoice_pdf(invoice) -> bytes:
    styles = build_styles()
    owner = invoice.owner
    client = invoice.client
    currency = invoice.currency

    def money(amount):
        return format_money(amount, currency)

    elements = []

    # Header
    business = Paragraph(
        f"<b>{text(owner.get_business_name())}</b><br/>"
        + lines(owner.business_address, owner.email, owner.tax_id and f"Tax ID: {owner.tax_id}"),
        styles['body']
    )
    meta = Paragraph(
        f"<b>INVOICE</b><br/>{text(invoice.invoice_number)}<br/>"
        f"Issued: {(invoice.sent_at or invoice.created_at):%b %d, %Y}"
        + (f"<br/>Due: {invoice.due_date:%b %d, %Y}" if invoice.due_date else '')
        + f"<br/>Status: {text(invoice.get_status_display())}",
        styles['right']
    )
    header = Table([[business, meta]], colWidths=[300, 195])
    header.setStyle(TableStyle([('VALIGN', (0, 0), (-1, -1), 'TOP')]))
    elements.append(header)
    elements.append(Spacer(1, 18))

    # Bill to
    elements.append(Paragraph('Bill To', styles['subheading']))
    elements.append(Paragraph(
        lines(client.name, client.company, client.email, client.address),
        styles['body']
    ))
    if invoice.project:
        elements.append(Paragraph(f"Project: {text(invoice.project.name)}", styles['small']))
    elements.append(Spacer(1, 14))

    # Line items
    rows = [['Description', 'Qty', 'Unit Price', 'Amount']]
    for item in invoice.line_items:
        rows.append([
            Paragraph(text(item.get('description')), styles['body']),
            _format_quantity(item.get('quantity', 1)),
            money(item.get('unit_price', 0)),
            money(item.get('amount', 0)),
        ])
    items_table = Table(rows, colWidths=[265, 50, 90, 90], repeatRows=1)
    items_table.setStyle(table_style())
    elements.append(items_table)
    elements.append(Spacer(1, 10))

    # Totals
    totals = [['Subtotal', money(invoice.subtotal)]]
    if invoice.tax:
        totals.append([f"Tax ({invoice.tax_rate}%)", money(invoice.tax)])
    totals.append(['Total', money(invoice.total)])
    if invoice.paid_amount:
        totals.append(['Amount Paid', money(invoice.paid_amount)])
    totals.append(['Balance Due', money(invoice.balance_due)])

    totals_table = Table(totals, colWidths=[405, 90])
    totals_table.setStyle(TableStyle([
        ('ALIGN', (0, 0), (-1, -1), 'RIGHT'),
        ('FONTSIZE', (0, 0), (-1, -1), 10),
        ('FONTNAME', (0, -1), (-1, -1), 'Helvetica-Bold'),
        ('TOPPADDING', (0, 0), (-1, -1), 3),
    ]))
    elements.append(totals_table)

    if invoice.notes:
        elements.append(Paragraph('Notes', styles['subheading']))
        elements.append(Paragraph(text(invoice.notes).replace('\n', '<br/>'), styles['body']))

    # Pay online
    if invoice.balance_due > 0:
        url = pay_url(invoice)
        elements.append(Spacer(1, 18))
        pay_block = Table([[
            pay_link_qr(url),
            Paragraph(
                f"<b>Pay online</b><br/>Scan the code or visit<br/>{text(url)}",
                styles['body']
            ),
        ]], colWidths=[100, 395])
        pay_block.setStyle(TableStyle([('VALIGN', (0, 0), (-1, -1), 'MIDDLE')]))
        elements.append(pay_block)

    return render(elements, title=f"Invoice {invoice.invoice_number}")
