"""
Party payments and outstanding balances.
"""

import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import Sum

from ..exceptions import InvoicingError
from ..models import Invoice, PartyPayment, PaymentAllocation

logger = logging.getLogger('billing.audit')


class PaymentService:

    @staticmethod
    @transaction.atomic
    def record_payment(party, payment_date, amount, allocations=None, user=None, **details) -> PartyPayment:
        """
        Record a party payment with optional invoice allocations.

        received_amount of every allocated invoice is recomputed as the sum
        of all its allocations.

        Args:
            allocations: [{'invoice': Invoice, 'amount': Decimal}, ...]
            details: tds_deduct, discount, payment_method, reference_no, notes
        """
        allocations = allocations or []
        for allocation in allocations:
            if allocation['invoice'].party_id != party.pk:
                raise InvoicingError(
                    f"Invoice {allocation['invoice'].invoice_number} does not belong to {party}"
                )

        payment = PartyPayment.objects.create(
            party=party,
            payment_date=payment_date,
            amount=amount,
            created_by=user,
            **details
        )

        affected = {}
        for allocation in allocations:
            PaymentAllocation.objects.create(
                party_payment=payment,
                invoice=allocation['invoice'],
                amount=allocation['amount'],
            )
            affected[allocation['invoice'].pk] = allocation['invoice']

        for invoice in affected.values():
            PaymentService.recompute_received(invoice)

        logger.info(
            f"Payment {payment.pk} of {amount} recorded for {party} "
            f"({len(allocations)} allocations)"
        )
        return payment

    @staticmethod
    def recompute_received(invoice: Invoice) -> Invoice:
        received = invoice.allocations.aggregate(total=Sum('amount'))['total'] or Decimal('0.00')
        invoice.received_amount = received
        invoice.payment_status = invoice.derive_payment_status()
        invoice.save(update_fields=['received_amount', 'payment_status', 'updated_at'])
        return invoice

    @staticmethod
    def outstanding_summary(party) -> dict:
        """
        Open invoices of a party; balance = max(total - received, 0).
        """
        invoices = Invoice.objects.filter(party=party).order_by('invoice_date', 'id')
        open_invoices = []
        total_outstanding = Decimal('0.00')
        for invoice in invoices:
            balance = invoice.balance
            if balance <= 0:
                continue
            total_outstanding += balance
            open_invoices.append({
                'id': invoice.pk,
                'invoice_number': invoice.invoice_number,
                'invoice_date': invoice.invoice_date,
                'total_amount': float(invoice.total_amount),
                'received_amount': float(invoice.received_amount),
                'balance': float(balance),
                'payment_status': invoice.payment_status,
            })

        return {
            'party_id': party.pk,
            'party_name': party.party_name,
            'total_invoices': invoices.count(),
            'total_open': len(open_invoices),
            'total_outstanding': float(total_outstanding),
            'open_invoices': open_invoices,
        }
