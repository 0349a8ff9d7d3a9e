"""
Invoice generation and totals.

Two ways to bill CSV consignments:
- consolidated: one invoice per sender for every unbilled row
- party invoice: an invoice from selected rows, repriced with optional
  slab overrides

Both link the billed rows to the invoice so a row is never billed twice.
"""

import logging
from dataclasses import dataclass, asdict, field
from decimal import Decimal
from typing import List, Optional

from django.db import transaction
from rest_framework import status

from parties.models import Party
from rates.services.distance import distance_display
from rates.services.pricing import (
    pricing_engine, to_decimal, round2, first_positive, RateBreakup, ZERO,
)
from ..exceptions import InvoicingError
from ..formatting import amount_in_words
from ..models import (
    CsvInvoice, Invoice, InvoiceItem,
    generate_invoice_number, generate_party_invoice_number,
)

logger = logging.getLogger('billing.audit')


def row_amount(row: CsvInvoice) -> Decimal:
    """
    Amount column of an invoice line:
    rate_breakup.base -> calculated_amount -> prepaid_amount ->
    final_collected -> retail_price
    """
    rb = row.rate_breakup
    for candidate in (rb.get('base'), row.calculated_amount, row.prepaid_amount,
                      row.final_collected, row.retail_price):
        if candidate is not None and candidate != '':
            return round2(candidate)
    return ZERO


def row_unit_price(row: CsvInvoice) -> Decimal:
    """Consolidated line price: calculated_amount -> final_collected -> retail_price."""
    for candidate in (row.calculated_amount, row.final_collected, row.retail_price):
        if candidate is not None:
            return round2(candidate)
    return ZERO


@dataclass
class InvoiceTotals:
    """Figures printed in the totals box of an invoice PDF."""
    subtotal: Decimal
    fuel_pct: Decimal
    fuel: Decimal
    packing: Decimal
    handling: Decimal
    gst_pct: Decimal
    sgst: Decimal
    cgst: Decimal
    gst: Decimal
    total: Decimal
    received: Decimal
    balance: Decimal
    amount_in_words: str
    lines: List[dict] = field(default_factory=list)

    @property
    def half_gst_pct(self) -> Decimal:
        return round2(self.gst_pct / 2)

    def to_dict(self):
        return asdict(self)


class InvoiceService:
    """Creates invoices from CSV rows and keeps their totals consistent."""

    # ===========================================
    # CONSOLIDATED INVOICES
    # ===========================================

    @classmethod
    def generate_consolidated_invoices(cls, party_name: Optional[str] = None, user=None) -> List[dict]:
        """
        One invoice per sender for all unbilled CSV rows.

        Each party is committed separately; a failure is reported in its
        result entry and does not affect the other parties.
        """
        rows = CsvInvoice.objects.unbilled().exclude(sender_name__isnull=True)
        if party_name:
            party = Party.objects.find_by_name(party_name)
            if party is None:
                raise InvoicingError(f"Party not found: {party_name.strip()}")
            rows = rows.for_sender(party.party_name)

        groups = {}
        for row in rows.order_by('sender_name', 'booking_date', 'created_at'):
            key = row.sender_name.strip()
            if key:
                groups.setdefault(key.lower(), (key, []))[1].append(row)

        results = []
        for display_name, group in groups.values():
            party = Party.objects.find_by_name(display_name)
            if party is None:
                results.append({'party': display_name, 'error': 'Party not found'})
                continue
            try:
                invoice = cls._create_consolidated(party, group, user)
            except Exception as e:
                logger.exception(f"Consolidated invoice failed for '{display_name}'")
                results.append({'party': display_name, 'error': str(e) or 'Failed to generate invoice'})
                continue
            results.append({
                'party': display_name,
                'invoice_id': invoice.pk,
                'invoice_number': invoice.invoice_number,
                'rows': len(group),
                'total': float(invoice.total_amount),
            })
        return results

    @staticmethod
    @transaction.atomic
    def _create_consolidated(party, rows, user) -> Invoice:
        locked = list(
            CsvInvoice.objects.select_for_update()
            .filter(pk__in=[r.pk for r in rows], invoice__isnull=True)
        )
        if not locked:
            raise InvoicingError("Rows were billed by another request")

        items = []
        subtotal = ZERO
        for row in locked:
            price = row_unit_price(row)
            region = f" - {row.region}" if row.region else ''
            description = f"Consignment {row.consignment_no or ''} - {row.service_type or ''} - {row.mode or ''}{region}"
            items.append(InvoiceItem(
                description=description.strip()[:255] or 'Service Charge',
                quantity=Decimal('1'),
                unit_price=price,
                total_price=price,
                booking_date=row.booking_date,
                consignment_no=row.consignment_no or '',
                shipment_type=row.shipment_type or '',
                service_type=row.service_type or '',
                weight=row.weight,
            ))
            subtotal += price

        invoice = Invoice.objects.create(
            invoice_number=generate_invoice_number(),
            party=party,
            subtotal=subtotal,
            tax_amount=ZERO,
            additional_charges=ZERO,
            total_amount=subtotal,
            notes=f"Generated from {len(locked)} CSV invoice rows",
            created_by=user,
        )
        for item in items:
            item.invoice = invoice
        InvoiceItem.objects.bulk_create(items)
        CsvInvoice.objects.filter(pk__in=[r.pk for r in locked]).update(invoice=invoice)

        logger.info(f"Invoice {invoice.invoice_number} generated for {party} from {len(locked)} rows")
        return invoice

    # ===========================================
    # PARTY INVOICES
    # ===========================================

    @staticmethod
    def _line_breakup(row: CsvInvoice, overrides: dict) -> RateBreakup:
        stored = RateBreakup.from_meta(row.rate_breakup)
        base = overrides['base_rate'] if overrides.get('base_rate') is not None else stored.base
        fuel_pct = overrides.get('fuel_pct')
        if fuel_pct is None:
            fuel_pct = stored.fuel_pct
            if not fuel_pct and stored.base > 0 and stored.fuel > 0:
                fuel_pct = stored.fuel * 100 / stored.base
        packing = overrides['packing'] if overrides.get('packing') is not None else stored.packing
        handling = overrides['handling'] if overrides.get('handling') is not None else stored.handling
        gst_pct = overrides.get('gst_percent')
        if gst_pct is None:
            gst_pct = first_positive(stored.gst_pct) or pricing_engine.default_gst_pct
        return pricing_engine.calculate_rate(
            base=base, fuel_pct=fuel_pct, handling=handling,
            gst_pct=gst_pct, slab_name=stored.slab_name, packing=packing,
        )

    @classmethod
    @transaction.atomic
    def create_party_invoice(cls, row_ids, party_name=None, overrides=None, metadata=None, user=None) -> Invoice:
        """
        Invoice selected CSV rows of a single party.

        Args:
            row_ids: CsvInvoice ids to bill
            party_name: Restrict the selection to this sender
            overrides: base_rate, fuel_pct, packing, handling, gst_percent
            metadata: shipment_type, mode, service_type, distance_region,
                weight_slab, period_from, period_to, payment_mode

        Raises:
            InvoicingError: 400 for mixed or unmatched parties, 404 when no
                row exists, 409 when a row is already invoiced
        """
        overrides = {k: to_decimal(v) for k, v in (overrides or {}).items() if v is not None and v != ''}
        metadata = metadata or {}
        if not row_ids:
            raise InvoicingError("rowIds is required")

        rows = list(CsvInvoice.objects.select_for_update().filter(pk__in=row_ids).order_by('booking_date', 'created_at'))
        if not rows:
            raise InvoicingError("No rows found for given ids", status_code=status.HTTP_404_NOT_FOUND)

        def norm(value):
            return (value or '').strip().lower()

        if party_name:
            rows = [r for r in rows if norm(r.sender_name) == norm(party_name)]
            if not rows:
                raise InvoicingError("No consignments match the selected party")
        else:
            senders = {norm(r.sender_name) for r in rows if norm(r.sender_name)}
            if len(senders) != 1:
                raise InvoicingError(
                    "All rows must belong to the same party",
                    diagnostics={'parties': sorted(senders)},
                )

        billed = [r for r in rows if r.invoice_id is not None]
        if billed:
            labels = [str(r) for r in billed]
            raise InvoicingError(
                "Some consignments are already invoiced",
                status_code=status.HTTP_409_CONFLICT,
                diagnostics={'consignments': labels[:10], 'count': len(labels)},
            )

        display_name = (party_name or rows[0].sender_name or 'Unknown Party').strip()
        party = Party.objects.find_by_name(display_name)
        if party is None:
            party = Party.objects.create(party_name=display_name)
            logger.info(f"Created party '{display_name}' while invoicing")

        items = []
        subtotal_sum = gst_sum = total_sum = ZERO
        for row in rows:
            breakup = cls._line_breakup(row, overrides)
            left = row.consignment_no or row.booking_reference or str(row.pk)
            description = f"{left} - {row.region}" if row.region else left
            items.append(InvoiceItem(
                description=description[:255],
                quantity=Decimal('1'),
                unit_price=breakup.total,
                total_price=breakup.total,
                booking_date=row.booking_date,
                consignment_no=row.consignment_no or '',
                shipment_type=row.shipment_type or '',
                service_type=row.service_type or '',
                weight=row.weight,
            ))
            subtotal_sum += breakup.subtotal
            gst_sum += breakup.gst
            total_sum += breakup.total

        notes = ' | '.join(filter(None, [
            metadata.get('period_from') and f"Period From: {metadata['period_from']}",
            metadata.get('period_to') and f"Period To: {metadata['period_to']}",
            metadata.get('payment_mode') and f"Payment Mode: {metadata['payment_mode']}",
        ]))

        slab_breakdown = {
            key: metadata.get(key)
            for key in ('shipment_type', 'mode', 'service_type', 'distance_region', 'weight_slab')
        }
        slab_breakdown.update({
            'base_rate': _float_or_none(overrides.get('base_rate')),
            'fuel_pct': _float_or_none(overrides.get('fuel_pct')),
            'packing': _float_or_none(overrides.get('packing')),
            'handling': _float_or_none(overrides.get('handling')),
            'gst_pct': _float_or_none(overrides.get('gst_percent')),
        })

        invoice = Invoice.objects.create(
            invoice_number=generate_party_invoice_number(),
            party=party,
            subtotal=round2(subtotal_sum),
            tax_amount=round2(gst_sum),
            total_amount=round2(total_sum),
            notes=notes,
            slab_breakdown=slab_breakdown,
            created_by=user,
        )
        for item in items:
            item.invoice = invoice
        InvoiceItem.objects.bulk_create(items)
        CsvInvoice.objects.filter(pk__in=[r.pk for r in rows]).update(invoice=invoice)

        logger.info(
            f"Party invoice {invoice.invoice_number} for {party}: {len(rows)} rows, total {invoice.total_amount}"
        )
        return invoice

    # ===========================================
    # UPDATES & TOTALS
    # ===========================================

    @staticmethod
    @transaction.atomic
    def update_invoice(invoice: Invoice, data: dict, items=None) -> Invoice:
        """
        Update an invoice and recompute its totals.

        Supplied items replace the existing ones and set
        subtotal = sum(quantity * unit_price).
        """
        for attr, value in data.items():
            setattr(invoice, attr, value)
        if invoice.pk is None:
            invoice.save()

        if items is not None:
            invoice.items.all().delete()
            subtotal = ZERO
            new_items = []
            for item in items:
                quantity = to_decimal(item.get('quantity', 1)) or Decimal('1')
                unit_price = round2(item.get('unit_price'))
                line_total = round2(quantity * unit_price)
                new_items.append(InvoiceItem(
                    invoice=invoice,
                    description=item.get('description', '')[:255],
                    quantity=quantity,
                    unit_price=unit_price,
                    total_price=line_total,
                    booking_date=item.get('booking_date'),
                    consignment_no=item.get('consignment_no') or '',
                    shipment_type=item.get('shipment_type') or '',
                    service_type=item.get('service_type') or '',
                    weight=item.get('weight'),
                ))
                subtotal += line_total
            InvoiceItem.objects.bulk_create(new_items)
            invoice.subtotal = round2(subtotal)

        invoice.total_amount = round2(invoice.compute_total())
        if 'payment_status' not in data:
            invoice.payment_status = invoice.derive_payment_status()
        invoice.save()
        return invoice

    @staticmethod
    def invoice_totals(invoice: Invoice) -> InvoiceTotals:
        """Totals box of the invoice PDF, computed from the billed rows."""
        rows = list(invoice.csv_rows.all().order_by('booking_date', 'created_at'))
        lines = []
        if rows:
            for row in rows:
                lines.append({
                    'consignment_no': row.consignment_no or '',
                    'quantity': 1,
                    'shipment_type': row.shipment_type or '',
                    'mode': row.mode or '',
                    'service_type': row.service_type or '',
                    'distance': distance_display(row.region, row.recipient_address),
                    'weight': to_decimal(row.weight),
                    'amount': row_amount(row),
                })
        else:
            for item in invoice.items.all():
                lines.append({
                    'consignment_no': item.consignment_no or item.description,
                    'quantity': item.quantity,
                    'shipment_type': item.shipment_type,
                    'mode': '',
                    'service_type': item.service_type,
                    'distance': '',
                    'weight': to_decimal(item.weight),
                    'amount': round2(item.total_price),
                })

        slab = invoice.slab_breakdown or {}
        subtotal = round2(sum((line['amount'] for line in lines), ZERO))
        fuel_pct = to_decimal(slab.get('fuel_pct'))
        packing = round2(slab.get('packing'))
        handling = round2(slab.get('handling'))
        first_rb = rows[0].rate_breakup if rows else {}
        gst_pct = (
            first_positive(slab.get('gst_pct'), slab.get('gst_percent'))
            or first_positive(first_rb.get('gstPct'), first_rb.get('gst_pct'))
            or pricing_engine.default_gst_pct
        )

        fuel = round2(subtotal * fuel_pct / 100)
        taxable = subtotal + fuel + packing + handling
        gst = round2(taxable * gst_pct / 100)
        sgst = round2(gst / 2)
        cgst = gst - sgst
        total = round2(taxable + gst)
        received = round2(invoice.received_amount)

        return InvoiceTotals(
            subtotal=subtotal,
            fuel_pct=fuel_pct,
            fuel=fuel,
            packing=packing,
            handling=handling,
            gst_pct=gst_pct,
            sgst=sgst,
            cgst=cgst,
            gst=gst,
            total=total,
            received=received,
            balance=max(total - received, ZERO),
            amount_in_words=amount_in_words(total),
            lines=lines,
        )


def _float_or_none(value):
    return float(value) if value is not None else None
