"""
Invoice PDF rendering with reportlab.

Layout: company header, party and invoice metadata, line-item table,
total row, bank details footer and a generation note.
"""

from datetime import datetime
from io import BytesIO
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.enums import TA_CENTER
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle

from fuelwale.app.core.config import settings
from fuelwale.app.domain.invoicing.invoice_builder import Invoice, format_money, format_qty


class InvoicePDF:
    """Render an `Invoice` to PDF bytes."""

    def __init__(self, invoice: Invoice):
        self.invoice = invoice
        self.styles = getSampleStyleSheet()
        self._setup_custom_styles()

    def _setup_custom_styles(self):
        self.title_style = ParagraphStyle(
            'CompanyTitle',
            parent=self.styles['Heading1'],
            fontSize=16,
            textColor=colors.HexColor('#1e3a5f'),
            alignment=TA_CENTER,
            spaceAfter=4,
            fontName='Helvetica-Bold'
        )
        self.center_style = ParagraphStyle(
            'Center',
            parent=self.styles['Normal'],
            fontSize=9,
            alignment=TA_CENTER,
            leading=12
        )
        self.heading_style = ParagraphStyle(
            'InvoiceHeading',
            parent=self.styles['Heading2'],
            fontSize=13,
            alignment=TA_CENTER,
            spaceBefore=8,
            spaceAfter=8,
            fontName='Helvetica-Bold'
        )
        self.small_style = ParagraphStyle(
            'Small',
            parent=self.styles['Normal'],
            fontSize=8,
            textColor=colors.HexColor('#475569'),
            leading=10
        )

    def _header(self):
        contact = f"Phone: {settings.company_phone} | Email: {settings.company_email} | {settings.company_website}"
        return [
            Paragraph(escape(settings.company_name), self.title_style),
            Paragraph(escape(settings.company_address), self.center_style),
            Paragraph(escape(contact), self.center_style),
            Paragraph("TAX INVOICE", self.heading_style),
        ]

    def _metadata(self):
        inv = self.invoice
        data = [
            ['Billed To:', inv.customer_name, 'Invoice No:', inv.invoice_no],
            ['Address:', inv.bill_address or '', 'Invoice Date:', inv.invoice_date.strftime('%d-%m-%Y')],
            ['Ship To:', inv.ship_to or '', 'Trip No:', inv.trip_no],
            ['GSTIN:', inv.customer_gstin or '', 'Vehicle No:', inv.vehicle_no],
            ['', '', 'Credit Period:', f"{settings.invoice_credit_period_days} days"],
        ]
        return Table(
            data,
            colWidths=[65, 200, 80, 170],
            style=TableStyle([
                ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
                ('FONTNAME', (2, 0), (2, -1), 'Helvetica-Bold'),
                ('FONTSIZE', (0, 0), (-1, -1), 9),
                ('VALIGN', (0, 0), (-1, -1), 'TOP'),
                ('BOX', (0, 0), (-1, -1), 0.5, colors.black),
            ])
        )

    def _items(self):
        inv = self.invoice
        rows = [['#', 'DC No', 'Product', 'Qty (L)', 'Rate', 'Amount']]
        for i, line in enumerate(inv.lines, start=1):
            rows.append([
                str(i),
                line.dc_no,
                line.product,
                format_qty(line.qty),
                format_money(line.rate),
                format_money(line.amount),
            ])
        rows.append(['', '', 'Total', format_qty(inv.total_qty), '', format_money(inv.total_amount)])

        return Table(
            rows,
            colWidths=[25, 110, 120, 80, 70, 110],
            repeatRows=1,
            style=TableStyle([
                ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#dbeafe')),
                ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
                ('FONTNAME', (0, -1), (-1, -1), 'Helvetica-Bold'),
                ('FONTSIZE', (0, 0), (-1, -1), 9),
                ('ALIGN', (3, 1), (-1, -1), 'RIGHT'),
                ('GRID', (0, 0), (-1, -1), 0.5, colors.black),
            ])
        )

    def _footer(self):
        parts = [Spacer(1, 14)]
        for line in settings.bank_details:
            parts.append(Paragraph(escape(line), self.small_style))
        parts.append(Spacer(1, 10))
        generated = datetime.now().strftime('%d-%m-%Y %H:%M')
        parts.append(Paragraph(
            f"This is a computer generated invoice and does not require a signature. Generated on {generated}.",
            self.small_style
        ))
        return parts

    def render(self) -> bytes:
        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            rightMargin=40,
            leftMargin=40,
            topMargin=40,
            bottomMargin=40,
            title=self.invoice.invoice_no
        )

        story = []
        story.extend(self._header())
        story.append(self._metadata())
        story.append(Spacer(1, 12))
        story.append(self._items())
        story.extend(self._footer())

        doc.build(story)
        return buffer.getvalue()


def render_invoice_pdf(invoice: Invoice) -> bytes:
    return InvoicePDF(invoice).render()
