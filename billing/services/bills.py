"""
Bills generated from account and cash bookings.
"""

import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import Max, Min, Sum
from django.db.models.functions import Coalesce, Trim
from django.utils import timezone
from rest_framework import status

from bookings.models import AccountBooking, CashBooking
from parties.models import Party
from ..exceptions import InvoicingError
from ..models import Bill, BillBooking, BookingType, PERIOD_BILL_TYPE

logger = logging.getLogger('billing.audit')

AMOUNT_FIELDS = (
    'base_amount', 'service_charges', 'fuel_charges', 'other_charges',
    'cgst_amount', 'sgst_amount', 'igst_amount',
)


class BillService:

    @staticmethod
    def _check_bookings_belong_to(party, model, ids, label):
        if not ids:
            return
        matched = model.objects.filter(id__in=ids, sender__iexact=party.party_name.strip()).count()
        if matched != len(set(ids)):
            raise InvoicingError(f"Selected {label} bookings do not match the selected party")

    @classmethod
    @transaction.atomic
    def generate_bill(cls, party: Party, bill_number, total_amount, bill_date=None,
                      selected_bookings=None, template='Default', send_email=False,
                      bill_type='', **amounts) -> Bill:
        """
        Create a bill and link it to the selected bookings.

        When base_amount differs from the account bookings' sum of
        net (or gross) amounts, the difference is added to the net amount
        of the last selected account booking.
        """
        selected_bookings = selected_bookings or []
        account_ids = [b['id'] for b in selected_bookings if b.get('booking_type') == BookingType.ACCOUNT]
        cash_ids = [b['id'] for b in selected_bookings if b.get('booking_type') == BookingType.CASH]

        cls._check_bookings_belong_to(party, AccountBooking, account_ids, 'account')
        cls._check_bookings_belong_to(party, CashBooking, cash_ids, 'cash')

        values = {name: amounts.get(name) or Decimal('0.00') for name in AMOUNT_FIELDS}
        bill_kwargs = {'bill_date': bill_date} if bill_date else {}
        bill = Bill.objects.create(
            party=party,
            bill_number=bill_number,
            total_amount=total_amount,
            template=template or 'Default',
            email_sent=bool(send_email),
            bill_type=bill_type or '',
            **bill_kwargs,
            **values
        )

        BillBooking.objects.bulk_create([
            BillBooking(bill=bill, booking_type=b['booking_type'], booking_id=b['id'])
            for b in selected_bookings
        ])

        base_amount = amounts.get('base_amount')
        if base_amount is not None and account_ids:
            current = AccountBooking.objects.filter(id__in=account_ids).aggregate(
                total=Sum(Coalesce('net_amount', 'gross_amount', Decimal('0.00')))
            )['total'] or Decimal('0.00')
            diff = Decimal(base_amount) - current
            if abs(diff) > Decimal('0.01'):
                last = AccountBooking.objects.get(id=account_ids[-1])
                last.net_amount = (last.net_amount if last.net_amount is not None
                                   else (last.gross_amount or Decimal('0.00'))) + diff
                last.save(update_fields=['net_amount', 'updated_at'])
                logger.info(f"Bill {bill.bill_number}: adjusted booking {last.pk} net by {diff}")

        logger.info(f"Bill {bill.bill_number} generated for {party}: {bill.total_amount}")
        return bill

    @staticmethod
    def bill_lines(bill: Bill) -> list:
        """Bookings of a bill in selection order, for the bill PDF."""
        account = {b.pk: b for b in AccountBooking.objects.filter(
            id__in=bill.bookings.filter(booking_type=BookingType.ACCOUNT).values('booking_id'))}
        cash = {b.pk: b for b in CashBooking.objects.filter(
            id__in=bill.bookings.filter(booking_type=BookingType.CASH).values('booking_id'))}

        lines = []
        for link in bill.bookings.all():
            source = account if link.booking_type == BookingType.ACCOUNT else cash
            booking = source.get(link.booking_id)
            if booking is None:
                continue
            booking_date = getattr(booking, 'booking_date', None) or getattr(booking, 'date', None)
            lines.append({
                'booking_type': link.booking_type,
                'date': booking_date,
                'reference_number': booking.reference_number,
                'receiver': booking.receiver,
                'carrier': booking.carrier,
                'weight': booking.weight,
                'weight_unit': booking.weight_unit,
                'amount': booking.net_amount if booking.net_amount is not None else booking.gross_amount,
            })
        return lines

    # ===========================================
    # PERIOD BILLS
    # ===========================================

    @staticmethod
    def _party_bookings(party, date_from, date_to):
        name = party.party_name.strip()
        account = AccountBooking.objects.annotate(sender_name=Trim('sender')).filter(
            sender_name__iexact=name, booking_date__gte=date_from, booking_date__lte=date_to
        )
        cash = CashBooking.objects.annotate(sender_name=Trim('sender')).filter(
            sender_name__iexact=name, date__gte=date_from, date__lte=date_to
        )
        return account, cash

    @staticmethod
    def _amount_total(queryset) -> Decimal:
        return queryset.aggregate(
            total=Sum(Coalesce('net_amount', 'gross_amount', Decimal('0.00')))
        )['total'] or Decimal('0.00')

    @classmethod
    @transaction.atomic
    def generate_period_bill(cls, party: Party, date_from, date_to, user=None) -> Bill:
        """
        Bill every account and cash booking of a party in a date range.

        Bookings already on other bills are included; the total is the sum
        of net (or gross) amounts.

        Raises:
            InvoicingError: 404 when the range holds no bookings
        """
        account, cash = cls._party_bookings(party, date_from, date_to)
        account_ids = list(account.order_by('booking_date', 'id').values_list('id', flat=True))
        cash_ids = list(cash.order_by('date', 'id').values_list('id', flat=True))
        if not account_ids and not cash_ids:
            raise InvoicingError(
                f'No bookings found for "{party.party_name}" between {date_from} and {date_to}.',
                status_code=status.HTTP_404_NOT_FOUND,
            )

        total = cls._amount_total(account) + cls._amount_total(cash)
        bill = Bill.objects.create(
            party=party,
            bill_number=f"PERIOD-{int(timezone.now().timestamp() * 1000)}",
            total_amount=total,
            base_amount=total,
            bill_type=PERIOD_BILL_TYPE,
        )
        BillBooking.objects.bulk_create(
            [BillBooking(bill=bill, booking_type=BookingType.ACCOUNT, booking_id=pk) for pk in account_ids]
            + [BillBooking(bill=bill, booking_type=BookingType.CASH, booking_id=pk) for pk in cash_ids]
        )

        logger.info(
            f"Period bill {bill.bill_number} for {party} ({date_from} to {date_to}): "
            f"{len(account_ids) + len(cash_ids)} bookings, {total}"
            + (f" by {user}" if user else "")
        )
        return bill

    @staticmethod
    def period_bills() -> list:
        """Period bills, newest first, with the booking date span they cover."""
        bills = Bill.objects.filter(bill_type=PERIOD_BILL_TYPE).select_related('party').prefetch_related(
            'bookings'
        ).order_by('-created_at')
        rows = []
        for bill in bills:
            links = bill.bookings.all()
            account_ids = [b.booking_id for b in links if b.booking_type == BookingType.ACCOUNT]
            cash_ids = [b.booking_id for b in links if b.booking_type == BookingType.CASH]
            account_span = AccountBooking.objects.filter(id__in=account_ids).aggregate(
                start=Min('booking_date'), end=Max('booking_date'))
            cash_span = CashBooking.objects.filter(id__in=cash_ids).aggregate(start=Min('date'), end=Max('date'))
            starts = [d for d in (account_span['start'], cash_span['start']) if d]
            ends = [d for d in (account_span['end'], cash_span['end']) if d]
            rows.append({
                'id': bill.pk,
                'bill_number': bill.bill_number,
                'bill_date': bill.bill_date,
                'total_amount': bill.total_amount,
                'status': bill.status,
                'created_at': bill.created_at,
                'party_id': bill.party_id,
                'party_name': bill.party.party_name,
                'start_date': min(starts) if starts else None,
                'end_date': max(ends) if ends else None,
                'booking_count': len(links),
            })
        return rows
