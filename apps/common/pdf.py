"""
Shared reportlab building blocks for generated documents.
"""

import io
from xml.sax.saxutils import escape

from django.http import HttpResponse
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.platypus import SimpleDocTemplate, TableStyle

PRIMARY = colors.Color(0.07, 0.09, 0.15)
MUTED = colors.Color(0.42, 0.45, 0.5)
RULE = colors.Color(0.85, 0.86, 0.88)


def build_styles() -> dict:
    base = getSampleStyleSheet()
    return {
        'title': ParagraphStyle(
            'DocTitle',
            parent=base['Title'],
            textColor=PRIMARY,
            fontSize=22,
            spaceAfter=6,
            alignment=0,
        ),
        'heading': ParagraphStyle(
            'DocHeading',
            parent=base['Heading2'],
            textColor=PRIMARY,
            fontSize=13,
            spaceBefore=12,
            spaceAfter=6,
        ),
        'subheading': ParagraphStyle(
            'DocSubheading',
            parent=base['Heading3'],
            textColor=PRIMARY,
            fontSize=11,
            spaceBefore=8,
            spaceAfter=4,
        ),
        'body': ParagraphStyle(
            'DocBody',
            parent=base['Normal'],
            fontSize=10,
            leading=14,
        ),
        'small': ParagraphStyle(
            'DocSmall',
            parent=base['Normal'],
            textColor=MUTED,
            fontSize=8,
            leading=11,
        ),
        'right': ParagraphStyle(
            'DocRight',
            parent=base['Normal'],
            fontSize=10,
            alignment=TA_RIGHT,
        ),
        'footer': ParagraphStyle(
            'DocFooter',
            parent=base['Normal'],
            textColor=MUTED,
            fontSize=8,
            alignment=TA_CENTER,
        ),
    }


def table_style() -> TableStyle:
    return TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), PRIMARY),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 9),
        ('FONTNAME', (0, 1), (-1, -1), 'Helvetica'),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 6),
        ('TOPPADDING', (0, 0), (-1, -1), 6),
        ('LINEBELOW', (0, 1), (-1, -1), 0.5, RULE),
        ('ALIGN', (1, 0), (-1, -1), 'RIGHT'),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
    ])


def text(value) -> str:
    """Escape a value for use inside a Paragraph."""
    return escape(str(value or ''))


def lines(*values) -> str:
    return '<br/>'.join(text(v) for v in values if v)


def render(elements: list, title: str = '') -> bytes:
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=50,
        leftMargin=50,
        topMargin=50,
        bottomMargin=50,
        title=title,
    )
    doc.build(elements)
    return buffer.getvalue()


def pdf_response(pdf_bytes: bytes, file_name: str, inline: bool = True) -> HttpResponse:
    response = HttpResponse(pdf_bytes, content_type='application/pdf')
    disposition = 'inline' if inline else 'attachment'
    response['Content-Disposition'] = f'{disposition}; filename="{file_name}"'
    return response
