"""
PDF rendering for invoices, CSV consignments, bills and reports.

Django templates under billing/templates/billing/pdf/ are rendered to HTML
and converted with WeasyPrint.
"""

import logging
from io import BytesIO
from typing import Any, Dict

from django.conf import settings
from django.template.loader import render_to_string
from django.utils import timezone
from django.utils.html import escape

from rates.services.distance import distance_display
from rates.services.pricing import pricing_engine, RateBreakup, round2, to_decimal
from .formatting import amount_in_words

logger = logging.getLogger(__name__)

CSV_TEMPLATES = {
    'default': 'billing/pdf/csv_default.html',
    'sales': 'billing/pdf/csv_sales.html',
    'courier_aryan': 'billing/pdf/csv_courier_aryan.html',
}
INVOICE_TEMPLATES = {
    'courier_aryan': 'billing/pdf/invoice_courier_aryan.html',
    'default': 'billing/pdf/invoice_default.html',
}
BILL_TEMPLATES = {
    'default': 'billing/pdf/bill_default.html',
}

BASE_CSS = '''
    @page {
        size: A4;
        margin: 1.2cm;
    }
    body {
        font-family: "Helvetica Neue", Helvetica, Arial, sans-serif;
        font-size: 9pt;
        color: #111827;
        line-height: 1.4;
    }
    h1 { font-size: 16pt; margin: 0 0 0.3em 0; }
    table { width: 100%; border-collapse: collapse; margin: 0.8em 0; }
    th, td { padding: 5px 6px; border: 1px solid #d1d5db; text-align: left; vertical-align: top; }
    th { background: #f3f4f6; font-weight: 600; }
    td.num, th.num { text-align: right; }
    .header { display: flex; justify-content: space-between; border-bottom: 2px solid #1f2937; padding-bottom: 0.6em; }
    .header img.logo { max-height: 60px; max-width: 160px; }
    .company-name { font-size: 14pt; font-weight: bold; }
    .title { text-align: center; font-size: 13pt; font-weight: bold; margin: 0.6em 0; letter-spacing: 1px; }
    .party-box { border: 1px solid #d1d5db; padding: 0.5em; width: 48%; display: inline-block; vertical-align: top; }
    .breakdown { width: 45%; margin-left: auto; }
    .breakdown td { border: none; border-bottom: 1px solid #e5e7eb; }
    .breakdown tr.total td { font-weight: bold; border-top: 2px solid #1f2937; }
    .words { margin-top: 0.8em; font-style: italic; }
    .signature { margin-top: 2em; text-align: right; }
    .signature img { max-height: 50px; }
    .footer { margin-top: 1.5em; padding-top: 0.5em; border-top: 1px solid #e5e7eb; font-size: 8pt; color: #6b7280; text-align: center; }
'''

ERROR_HTML = '''<!DOCTYPE html>
<html><head><meta charset="utf-8"><title>Error</title></head>
<body><h1>Error generating PDF</h1><p>Details have been logged.</p><p>{reference}</p></body></html>'''


class InvoicePdfRenderer:
    """
    Template-driven PDF documents.

    A failing template is logged and replaced with a minimal error
    document so the endpoint still answers with a PDF.
    """

    @staticmethod
    def _render_html(template_name: str, context: Dict[str, Any]) -> str:
        return render_to_string(template_name, context)

    @staticmethod
    def _html_to_pdf(html_content: str) -> bytes:
        """Convert HTML to PDF bytes with WeasyPrint."""
        try:
            from weasyprint import HTML, CSS
            from weasyprint.text.fonts import FontConfiguration
        except ImportError:
            logger.error("WeasyPrint not installed. Run: pip install weasyprint")
            raise

        font_config = FontConfiguration()
        base_css = CSS(string=BASE_CSS, font_config=font_config)
        buffer = BytesIO()
        HTML(string=html_content).write_pdf(buffer, stylesheets=[base_css], font_config=font_config)
        return buffer.getvalue()

    @classmethod
    def render(cls, template_name: str, context: Dict[str, Any], reference: str = '') -> bytes:
        try:
            html = cls._render_html(template_name, context)
        except Exception:
            logger.exception(f"PDF template {template_name} failed for {reference or 'document'}")
            html = ERROR_HTML.format(reference=escape(reference))
        return cls._html_to_pdf(html)

    # ===========================================
    # CONTEXT HELPERS
    # ===========================================

    @staticmethod
    def company_context(company) -> Dict[str, Any]:
        address = ', '.join(p for p in [company.business_address, company.state, company.pincode] if p)
        return {
            'name': company.business_name,
            'address': address,
            'gstin': company.gstin,
            'phone': company.phone_number,
            'email': company.email_id,
            'logo': company.logo,
            'signature': company.signature if company.has_signature_image else '',
        }

    @staticmethod
    def base_context(company, title: str) -> Dict[str, Any]:
        return {
            'company': InvoicePdfRenderer.company_context(company),
            'title': title,
            'generated_at': timezone.localtime(),
        }

    @staticmethod
    def template_for(templates: dict, name: str, default: str) -> str:
        key = (name or default or 'default').strip().lower()
        return templates.get(key) or templates[default if default in templates else 'default']

    # ===========================================
    # DOCUMENTS
    # ===========================================

    @classmethod
    def csv_row_pdf(cls, row, company, template: str = None) -> bytes:
        """Single consignment invoice from a CSV row."""
        template_name = cls.template_for(CSV_TEMPLATES, template, settings.BILLING_CSV_PDF_TEMPLATE)

        breakup = pricing_engine.complete_breakup(row.rate_breakup) if row.rate_breakup else None
        if breakup is None:
            amount = round2(row.calculated_amount or row.final_collected or row.retail_price)
            breakup = RateBreakup(base=amount, subtotal=amount, total=amount)
        received = round2(row.final_collected or row.prepaid_amount)

        party = None
        if row.sender_name:
            from parties.models import Party
            party = Party.objects.find_by_name(row.sender_name)

        context = cls.base_context(company, 'Tax Invoice')
        context.update({
            'row': row,
            'party': party,
            'distance': distance_display(row.region, row.recipient_address),
            'breakup': breakup,
            'received': received,
            'balance': max(breakup.total - received, to_decimal(0)),
            'amount_in_words': amount_in_words(breakup.total),
            'document_number': row.consignment_no or row.booking_reference or str(row.pk),
        })
        return cls.render(template_name, context, reference=f"csv row {row.pk}")

    @classmethod
    def invoice_pdf(cls, invoice, company, template: str = None) -> bytes:
        """Party invoice with one line per billed consignment."""
        from .services.invoicing import InvoiceService

        template_name = cls.template_for(INVOICE_TEMPLATES, template, settings.BILLING_INVOICE_PDF_TEMPLATE)
        totals = InvoiceService.invoice_totals(invoice)

        context = cls.base_context(company, 'Tax Invoice')
        context.update({
            'invoice': invoice,
            'party': invoice.party,
            'totals': totals,
            'lines': totals.lines,
            'document_number': invoice.invoice_number,
        })
        return cls.render(template_name, context, reference=f"invoice {invoice.invoice_number}")

    @classmethod
    def bill_pdf(cls, bill, company, template: str = None) -> bytes:
        from .services.bills import BillService

        template_name = cls.template_for(BILL_TEMPLATES, template, 'default')
        gst = bill.cgst_amount + bill.sgst_amount + bill.igst_amount

        context = cls.base_context(company, 'Bill')
        context.update({
            'bill': bill,
            'party': bill.party,
            'lines': BillService.bill_lines(bill),
            'gst': gst,
            'amount_in_words': amount_in_words(bill.total_amount),
            'document_number': bill.bill_number,
        })
        return cls.render(template_name, context, reference=f"bill {bill.bill_number}")
