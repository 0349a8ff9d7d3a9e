"""
Reports Tests
=============

Tests for:
1. Daily collection: filters, totals and output formats
2. Monthly billing summary per sender
"""

from datetime import date
from decimal import Decimal
from unittest.mock import patch

from django.test import TestCase
from rest_framework.test import APIClient

from billing.models import Invoice, InvoiceItem, Bill, BillBooking, BookingType, PartyPayment, PERIOD_BILL_TYPE
from billing.pdf import InvoicePdfRenderer
from bookings.models import AccountBooking, CashBooking
from core.models import User, UserRole, Company
from parties.models import Party
from reports.services import ReportGenerator, CollectionFilters, BillingSummary, month_bounds, summary_status


class CollectionFixtureMixin:

    def create_invoices(self):
        self.acme = Party.objects.create(party_name='Acme Traders')
        self.other = Party.objects.create(party_name='Other Co')

        may1 = Invoice.objects.create(party=self.acme, invoice_number='INV-1', invoice_date=date(2024, 5, 1))
        InvoiceItem.objects.create(
            invoice=may1, description='CN1', consignment_no='CN1', shipment_type='DOCUMENT',
            service_type='EXPRESS', weight=Decimal('0.500'), unit_price=100, total_price=Decimal('100.00')
        )
        InvoiceItem.objects.create(
            invoice=may1, description='CN2', consignment_no='CN2', shipment_type='DOCUMENT',
            service_type='STANDARD', weight=Decimal('1.250'), unit_price=60, total_price=Decimal('60.00')
        )

        may2 = Invoice.objects.create(party=self.other, invoice_number='INV-2', invoice_date=date(2024, 5, 2))
        InvoiceItem.objects.create(
            invoice=may2, description='CN3', consignment_no='CN3', shipment_type='NON_DOCUMENT',
            service_type='EXPRESS', weight=None, unit_price=40, total_price=Decimal('40.00')
        )


class TestDailyCollectionService(CollectionFixtureMixin, TestCase):

    def setUp(self):
        self.create_invoices()

    def test_all_rows_newest_first(self):
        report = ReportGenerator.daily_collection(CollectionFilters())

        self.assertEqual([r['consignment_no'] for r in report.rows], ['CN3', 'CN1', 'CN2'])
        self.assertEqual(report.total_amount, Decimal('200.00'))
        self.assertEqual(report.invoice_count, 2)
        self.assertEqual(report.rows[0]['weight'], Decimal('0.000'))
        self.assertEqual(report.rows[1]['client'], 'Acme Traders')

    def test_single_day(self):
        report = ReportGenerator.daily_collection(CollectionFilters.for_day(date(2024, 5, 1)))
        self.assertEqual(len(report.rows), 2)
        self.assertEqual(report.total_weight, Decimal('1.750'))

    def test_party_and_courier_filters(self):
        report = ReportGenerator.daily_collection(
            CollectionFilters(party_id=self.acme.pk, service_type='express')
        )
        self.assertEqual([r['consignment_no'] for r in report.rows], ['CN1'])

    def test_csv_export(self):
        report = ReportGenerator.daily_collection(CollectionFilters())
        lines = ReportGenerator.daily_collection_csv(report).lstrip('\ufeff').splitlines()
        self.assertEqual(lines[0], 'Date,Invoice #,Client,Consignment #,Package Type,Courier,Weight (kg),Amount')
        self.assertEqual(len(lines), 4)


class TestDailyCollectionEndpoint(CollectionFixtureMixin, TestCase):

    def setUp(self):
        self.create_invoices()
        self.user = User.objects.create_user(
            email='operator@example.com', password='testpass123', role=UserRole.BILLING_OPERATOR
        )
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)

    def test_json(self):
        response = self.client.get('/api/reports/daily-collection/', {'date': '2024-05-02'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['summary']['rows'], 1)
        self.assertEqual(response.data['summary']['total_amount'], 40.0)
        self.assertEqual(response.data['data'][0]['date'], '2024-05-02')

    def test_invalid_range(self):
        response = self.client.get('/api/reports/daily-collection/', {
            'date_from': '2024-05-10', 'date_to': '2024-05-01'
        })
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['error'], 'date_from must not be after date_to')

    def test_csv(self):
        response = self.client.get('/api/reports/daily-collection/', {'format': 'csv'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Content-Type'], 'text/csv')
        self.assertIn('attachment; filename="daily_collection_all.csv"', response['Content-Disposition'])

    @patch.object(InvoicePdfRenderer, '_html_to_pdf', return_value=b'%PDF-1.4 report')
    def test_pdf(self, mock_pdf):
        Company.objects.create(business_name='Swift Couriers')

        response = self.client.get('/api/reports/daily-collection/', {
            'format': 'pdf', 'date_from': '2024-05-01', 'date_to': '2024-05-31'
        })

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Content-Type'], 'application/pdf')
        self.assertEqual(
            response['Content-Disposition'],
            'inline; filename="daily-collection-2024-05-01_2024-05-31.pdf"'
        )
        html = mock_pdf.call_args[0][0]
        self.assertIn('INV-1', html)
        self.assertIn('DAILY COLLECTION', html)

    def test_pdf_without_company(self):
        response = self.client.get('/api/reports/daily-collection/', {'format': 'pdf'})
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.data['error'], 'No active company configured')


# ===========================================
# Billing summary
# ===========================================

class TestBillingSummary(TestCase):

    def setUp(self):
        self.acme = Party.objects.create(party_name='Acme Traders')
        self.beta = Party.objects.create(party_name='Beta Cargo')

        billed = AccountBooking.objects.create(
            booking_date=date(2024, 5, 3), sender='Acme Traders', receiver='X', gross_amount=Decimal('100.00')
        )
        AccountBooking.objects.create(
            booking_date=date(2024, 5, 4), sender=' acme traders', receiver='Y', gross_amount=Decimal('50.00')
        )
        on_period_bill = AccountBooking.objects.create(
            booking_date=date(2024, 5, 6), sender='Acme Traders', receiver='Z', gross_amount=Decimal('30.00')
        )
        AccountBooking.objects.create(
            booking_date=date(2024, 6, 1), sender='Acme Traders', receiver='Late', gross_amount=Decimal('75.00')
        )
        cash = CashBooking.objects.create(
            date=date(2024, 5, 5), sender='Beta Cargo', receiver='W', gross_amount=Decimal('200.00')
        )
        CashBooking.objects.create(date=date(2024, 5, 7), sender='Walk In', receiver='V', gross_amount=Decimal('10.00'))

        bill = Bill.objects.create(party=self.acme, bill_number='B-1', total_amount=Decimal('118.00'))
        BillBooking.objects.create(bill=bill, booking_type=BookingType.ACCOUNT, booking_id=billed.pk)
        period = Bill.objects.create(
            party=self.acme, bill_number='PERIOD-1', total_amount=Decimal('30.00'), bill_type=PERIOD_BILL_TYPE
        )
        BillBooking.objects.create(bill=period, booking_type=BookingType.ACCOUNT, booking_id=on_period_bill.pk)
        beta_bill = Bill.objects.create(party=self.beta, bill_number='B-2', total_amount=Decimal('236.00'))
        BillBooking.objects.create(bill=beta_bill, booking_type=BookingType.CASH, booking_id=cash.pk)

        PartyPayment.objects.create(
            party=self.beta, payment_date=date(2024, 6, 5), amount=Decimal('240.00'), tds_deduct=Decimal('4.00')
        )

    def test_month_bounds(self):
        self.assertEqual(month_bounds('2024-02'), (date(2024, 2, 1), date(2024, 2, 29)))

    def test_rows_per_sender(self):
        rows = BillingSummary('2024-05').rows()

        self.assertEqual([r['party_name'] for r in rows], ['Acme Traders', 'Beta Cargo', 'Walk In'])
        acme, beta, walk_in = rows

        self.assertEqual(acme['party_id'], self.acme.pk)
        self.assertEqual(acme['booking_count'], 2)
        self.assertEqual(acme['booking_amount'], 150.0)
        self.assertEqual(acme['billed_amount'], 100.0)
        self.assertEqual(acme['pending_amount'], 50.0)
        self.assertEqual(acme['unbilled_count'], 1)
        self.assertEqual(acme['bill_numbers'], 'B-1')
        self.assertEqual(acme['grand_total'], 118.0)
        self.assertEqual(acme['status'], 'Pending')

        self.assertEqual(beta['booking_types'], ['cash'])
        self.assertEqual(beta['total_paid'], 236.0)
        self.assertEqual(beta['balance_credit'], 0.0)
        self.assertEqual(beta['status'], 'Paid')

        self.assertIsNone(walk_in['party_id'])
        self.assertEqual(walk_in['bill_count'], 0)

    def test_status_rules(self):
        self.assertEqual(summary_status(0, 1, Decimal('100'), Decimal('40')), 'Partially Paid')
        self.assertEqual(summary_status(0, 1, Decimal('100'), Decimal('0')), 'Billed')
        self.assertEqual(summary_status(0, 0, Decimal('0'), Decimal('0')), 'Pending')

    def test_endpoint(self):
        user = User.objects.create_user(
            email='operator@example.com', password='testpass123', role=UserRole.BILLING_OPERATOR
        )
        client = APIClient()
        client.force_authenticate(user=user)

        response = client.get('/api/reports/billing-summary/', {'month': '2024-05'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['date_to'], '2024-05-31')
        self.assertEqual(len(response.data['data']), 3)

        response = client.get('/api/reports/billing-summary/', {'month': '2024-13'})
        self.assertEqual(response.status_code, 400)
        self.assertIn('month (YYYY-MM) is required', response.data['error'])
