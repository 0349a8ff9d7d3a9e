"""
REPORTS App - Daily collection and monthly billing summary

Daily collection: invoice lines joined with their invoice and party, newest
invoice first, rendered as JSON, CSV or a WeasyPrint PDF.

Billing summary: one row per sender for a month of account and cash
bookings, with what has been billed and what the party has paid.
"""

import calendar
import csv
import io
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional

from django.db.models import F, Q, Sum, Count

from billing.models import InvoiceItem, BillBooking, BookingType, PartyPayment, PERIOD_BILL_TYPE
from billing.pdf import InvoicePdfRenderer
from bookings.models import AccountBooking, CashBooking
from parties.models import Party

logger = logging.getLogger(__name__)

COLLECTION_HEADERS = [
    'Date', 'Invoice #', 'Client', 'Consignment #', 'Package Type', 'Courier', 'Weight (kg)', 'Amount'
]


@dataclass
class CollectionFilters:
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    party_id: Optional[int] = None
    service_type: str = ''

    @classmethod
    def for_day(cls, day: date, **kwargs):
        return cls(date_from=day, date_to=day, **kwargs)


@dataclass
class DailyCollection:
    filters: CollectionFilters
    rows: List[dict] = field(default_factory=list)
    total_amount: Decimal = Decimal('0.00')
    total_weight: Decimal = Decimal('0.000')
    invoice_count: int = 0

    def to_dict(self):
        return {
            'filters': {
                'date_from': self.filters.date_from.isoformat() if self.filters.date_from else None,
                'date_to': self.filters.date_to.isoformat() if self.filters.date_to else None,
                'party_id': self.filters.party_id,
                'service_type': self.filters.service_type or None,
            },
            'summary': {
                'rows': len(self.rows),
                'invoices': self.invoice_count,
                'total_amount': float(self.total_amount),
                'total_weight': float(self.total_weight),
            },
            'data': [
                {**row, 'date': row['date'].isoformat() if row['date'] else None,
                 'weight': float(row['weight']), 'amount': float(row['amount'])}
                for row in self.rows
            ],
        }


class ReportGenerator:
    """Builds the daily collection report and its exports."""

    @staticmethod
    def daily_collection(filters: CollectionFilters) -> DailyCollection:
        items = InvoiceItem.objects.select_related('invoice__party')
        if filters.date_from:
            items = items.filter(invoice__invoice_date__gte=filters.date_from)
        if filters.date_to:
            items = items.filter(invoice__invoice_date__lte=filters.date_to)
        if filters.party_id:
            items = items.filter(invoice__party_id=filters.party_id)
        if filters.service_type:
            items = items.filter(service_type__iexact=filters.service_type.strip())

        items = items.order_by('-invoice__invoice_date', '-invoice_id', 'id')
        rows = [
            {
                'date': item.invoice.invoice_date,
                'invoice_number': item.invoice.invoice_number,
                'client': item.invoice.party.party_name,
                'consignment_no': item.consignment_no,
                'package_type': item.shipment_type,
                'courier': item.service_type,
                'weight': item.weight or Decimal('0.000'),
                'amount': item.total_price,
            }
            for item in items
        ]

        totals = items.aggregate(
            amount=Sum('total_price'),
            weight=Sum('weight'),
            invoices=Count(F('invoice_id'), distinct=True),
        )
        return DailyCollection(
            filters=filters,
            rows=rows,
            total_amount=totals['amount'] or Decimal('0.00'),
            total_weight=totals['weight'] or Decimal('0.000'),
            invoice_count=totals['invoices'] or 0,
        )

    @staticmethod
    def daily_collection_csv(report: DailyCollection) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer)
        writer.writerow(COLLECTION_HEADERS)
        for row in report.rows:
            writer.writerow([
                row['date'].isoformat() if row['date'] else '',
                row['invoice_number'],
                row['client'],
                row['consignment_no'],
                row['package_type'],
                row['courier'],
                row['weight'],
                row['amount'],
            ])
        return '\ufeff' + buffer.getvalue()

    @staticmethod
    def daily_collection_pdf(report: DailyCollection, company) -> bytes:
        context = InvoicePdfRenderer.base_context(company, 'Daily Collection')
        context.update({
            'report': report,
            'rows': report.rows,
            'document_number': '',
            'period_from': report.filters.date_from,
            'period_to': report.filters.date_to,
        })
        logger.info(f"Daily collection PDF: {len(report.rows)} rows, total {report.total_amount}")
        return InvoicePdfRenderer.render('reports/daily_collection.html', context, reference='daily collection')


# ===========================================
# MONTHLY BILLING SUMMARY
# ===========================================

def month_bounds(month: str):
    """'2024-05' -> (date(2024, 5, 1), date(2024, 5, 31))."""
    year, number = (int(part) for part in month.split('-'))
    return date(year, number, 1), date(year, number, calendar.monthrange(year, number)[1])


def normalise_name(name) -> str:
    return (name or '').strip().lower()


def summary_status(unbilled_count: int, bill_count: int, grand_total: Decimal, total_paid: Decimal) -> str:
    if unbilled_count:
        return 'Pending'
    if bill_count and total_paid >= grand_total:
        return 'Paid'
    if total_paid > 0:
        return 'Partially Paid'
    if bill_count:
        return 'Billed'
    return 'Pending'


class BillingSummary:
    """
    Month view of bookings per sender.

    A booking counts as billed once it sits on a regular bill. Bookings
    whose only bill is a period bill are left out of the month entirely.
    Payments are all-time and net of TDS and discount.
    """

    def __init__(self, month: str):
        self.month = month
        self.date_from, self.date_to = month_bounds(month)

    def _bookings(self) -> list:
        account = AccountBooking.objects.filter(
            booking_date__gte=self.date_from, booking_date__lte=self.date_to
        ).values_list('id', 'sender', 'net_amount', 'gross_amount')
        cash = CashBooking.objects.filter(
            date__gte=self.date_from, date__lte=self.date_to
        ).values_list('id', 'sender', 'net_amount', 'gross_amount')
        return (
            [(BookingType.ACCOUNT, pk, sender, net if net is not None else gross or Decimal('0.00'))
             for pk, sender, net, gross in account]
            + [(BookingType.CASH, pk, sender, net if net is not None else gross or Decimal('0.00'))
               for pk, sender, net, gross in cash]
        )

    @staticmethod
    def _links(bookings) -> dict:
        ids = defaultdict(list)
        for booking_type, pk, _, _ in bookings:
            ids[booking_type].append(pk)
        condition = Q(pk__in=[])
        for booking_type, pks in ids.items():
            condition |= Q(booking_type=booking_type, booking_id__in=pks)

        links = defaultdict(list)
        for link in BillBooking.objects.filter(condition).select_related('bill'):
            links[(link.booking_type, link.booking_id)].append(link.bill)
        return links

    @staticmethod
    def _payments() -> dict:
        totals = PartyPayment.objects.values('party_id').annotate(
            paid=Sum(F('amount') - F('tds_deduct') - F('discount'))
        )
        return {row['party_id']: row['paid'] or Decimal('0.00') for row in totals}

    def rows(self) -> list:
        bookings = self._bookings()
        links = self._links(bookings)

        groups = {}
        for booking_type, pk, sender, amount in bookings:
            bills = links.get((booking_type, pk), [])
            regular = [bill for bill in bills if bill.bill_type != PERIOD_BILL_TYPE]
            if bills and not regular:
                continue

            key = normalise_name(sender)
            group = groups.setdefault(key, {
                'display_name': (sender or '').strip(),
                'booking_amount': Decimal('0.00'),
                'booking_count': 0,
                'billed_amount': Decimal('0.00'),
                'pending_amount': Decimal('0.00'),
                'unbilled_count': 0,
                'booking_types': set(),
                'bills': {},
            })
            group['booking_amount'] += amount
            group['booking_count'] += 1
            group['booking_types'].add(booking_type)
            if regular:
                group['billed_amount'] += amount
                for bill in regular:
                    group['bills'][bill.pk] = bill
            else:
                group['pending_amount'] += amount
                group['unbilled_count'] += 1

        parties = {normalise_name(party.party_name): party for party in Party.objects.all()}
        payments = self._payments()

        rows = []
        for key, group in groups.items():
            party = parties.get(key)
            bills = sorted(group['bills'].values(), key=lambda b: (b.created_at, b.pk))
            grand_total = sum((bill.total_amount for bill in bills), Decimal('0.00'))
            total_paid = payments.get(party.pk, Decimal('0.00')) if party else Decimal('0.00')
            rows.append({
                'party_id': party.pk if party else None,
                'party_name': party.party_name if party else group['display_name'],
                'booking_types': sorted(group['booking_types']),
                'booking_count': group['booking_count'],
                'booking_amount': float(group['booking_amount']),
                'billed_amount': float(group['billed_amount']),
                'pending_amount': float(group['pending_amount']),
                'unbilled_count': group['unbilled_count'],
                'bill_count': len(bills),
                'bill_id': bills[-1].pk if bills else None,
                'bill_numbers': ', '.join(bill.bill_number for bill in bills),
                'grand_total': float(grand_total),
                'total_paid': float(total_paid),
                'balance_credit': float(grand_total - total_paid),
                'status': summary_status(group['unbilled_count'], len(bills), grand_total, total_paid),
            })

        rows.sort(key=lambda row: row['party_name'].lower())
        logger.info(f"Billing summary {self.month}: {len(bookings)} bookings, {len(rows)} senders")
        return rows

    def to_dict(self):
        return {
            'month': self.month,
            'date_from': self.date_from.isoformat(),
            'date_to': self.date_to.isoformat(),
            'data': self.rows(),
        }
