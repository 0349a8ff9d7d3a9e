"""
Billing Tests
=============

Tests for:
1. Money formatting and amounts in words
2. CSV import skip rules
3. Rate application (errors and success)
4. Party and consolidated invoices (no double billing)
5. Invoice totals and updates
6. Party payments, allocations and outstanding balances
7. Bills and period bills
8. PDF and CSV exports
"""

import uuid
from datetime import date
from decimal import Decimal
from unittest.mock import patch

from django.core.files.uploadedfile import SimpleUploadedFile
from django.template import TemplateSyntaxError
from django.test import TestCase
from rest_framework.test import APIClient

from bookings.models import AccountBooking, CashBooking
from core.exceptions import CsvImportError
from core.models import User, UserRole, Company
from parties.models import Party
from rates.models import Mode, ServiceType, DistanceSlab, WeightSlab, PartyRateSlab, ShipmentType
from billing.exceptions import InvoicingError, RatingError
from billing.formatting import inr_number, amount_in_words
from billing.models import CsvInvoice, Invoice, InvoiceItem, PaymentStatus, Bill, PERIOD_BILL_TYPE
from billing.pdf import InvoicePdfRenderer
from billing.services.csv_import import import_csv
from billing.services.invoicing import InvoiceService
from billing.services.rating import RatingService, match_master

SENDER_ADDRESS = '14 Race Course Road, Coimbatore, Tamil Nadu 641018'
RECIPIENT_ADDRESS = '3 West Masi Street, Madurai, Tamil Nadu 625001'
FAKE_PDF = b'%PDF-1.4 test document'


class BillingFixtureMixin:
    """Party Acme Traders with a DOCUMENT / EXPRESS / Within State / 0-500g slab."""

    def create_rate_fixtures(self):
        self.party = Party.objects.create(party_name='Acme Traders', state='Tamil Nadu')
        self.mode = Mode.objects.create(code='DOCUMENT', title='Document')
        self.service_type = ServiceType.objects.create(code='EXPRESS', title='Express')
        self.distance_slab = DistanceSlab.objects.create(code='WITHIN_STATE', title='Within State')
        self.weight_slab = WeightSlab.objects.create(
            slab_name='Upto 500g', min_weight_grams=0, max_weight_grams=500
        )
        # 100 + fuel 10 + packing 5 + handling 5 = 120; GST 21.60; total 141.60
        self.rate_slab = PartyRateSlab.objects.create(
            party=self.party,
            shipment_type=ShipmentType.DOCUMENT,
            mode=self.mode,
            service_type=self.service_type,
            distance_slab=self.distance_slab,
            slab=self.weight_slab,
            rate=Decimal('100.00'),
            fuel_pct=Decimal('10.00'),
            packing=Decimal('5.00'),
            handling=Decimal('5.00'),
            gst_pct=Decimal('18.00'),
        )

    def create_row(self, consignment_no, sender='Acme Traders', **kwargs):
        values = {
            'booking_date': date(2024, 5, 1),
            'booking_reference': f"REF-{consignment_no}",
            'consignment_no': consignment_no,
            'mode': 'DOCUMENT',
            'service_type': 'EXPRESS',
            'weight': Decimal('0.300'),
            'sender_name': sender,
            'sender_address': SENDER_ADDRESS,
            'recipient_address': RECIPIENT_ADDRESS,
            'final_collected': Decimal('150.00'),
        }
        values.update(kwargs)
        return CsvInvoice.objects.create(**values)

    def create_priced_row(self, consignment_no, **kwargs):
        return RatingService.apply_rate(self.create_row(consignment_no, **kwargs))


class TestFormatting(TestCase):

    def test_indian_digit_grouping(self):
        self.assertEqual(inr_number(Decimal('1234567.891')), '12,34,567.89')
        self.assertEqual(inr_number(999), '999.00')
        self.assertEqual(inr_number(-150000), '-1,50,000.00')

    def test_amount_in_words_with_paisa(self):
        self.assertEqual(
            amount_in_words(Decimal('1234.50')),
            'One Thousand Two Hundred and Thirty Four Rupees and Fifty Paisa only'
        )

    def test_amount_in_words_lakh_and_crore(self):
        self.assertEqual(amount_in_words(2500000), 'Twenty Five Lakh Rupees only')
        self.assertEqual(amount_in_words(10000000), 'One Crore Rupees only')

    def test_amount_in_words_zero(self):
        self.assertEqual(amount_in_words(0), 'Zero Rupees only')


class TestCsvImport(BillingFixtureMixin, TestCase):

    HEADER = 'DATE OF BOOKING,BOOKING REFERENCE,CONSIGNMENT NO,MODE,SERVICE TYPE,WEIGHT (IN Kg),SENDER NAME,SENDER ADDRESS,RECIPIENT ADDRESS\n'

    def setUp(self):
        self.create_rate_fixtures()
        self.user = User.objects.create_user(
            email='operator@example.com', password='testpass123', role=UserRole.BILLING_OPERATOR
        )
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)

    def _csv(self, *lines):
        return (self.HEADER + ''.join(line + '\n' for line in lines)).encode('utf-8')

    # ==========================================
    # Skip rules
    # ==========================================

    def test_import_skips_unknown_party_and_duplicates(self):
        content = self._csv(
            f'2024-05-01,R1,CN1,DOCUMENT,EXPRESS,0.3,Acme Traders,"{SENDER_ADDRESS}","{RECIPIENT_ADDRESS}"',
            '2024-05-01,R2,CN2,DOCUMENT,EXPRESS,0.3,Unknown Co,Chennai,Madurai',
            '2024-05-02,R3,CN1,DOCUMENT,EXPRESS,0.3,Acme Traders,Chennai,Madurai',
            '02/05/2024,R4,CN4,DOCUMENT,EXPRESS,0.4, acme traders ,Chennai,Madurai',
        )
        result = import_csv(content)

        self.assertEqual(result, {
            'inserted': 2, 'skipped': 2, 'skipped_no_party': 1, 'skipped_duplicate': 1,
            'skipped_invalid': 0, 'invalid_rows': [],
        })
        row = CsvInvoice.objects.get(consignment_no='CN1')
        self.assertEqual(row.region, 'Within State')
        self.assertEqual(row.weight, Decimal('0.300'))
        self.assertEqual(CsvInvoice.objects.get(consignment_no='CN4').booking_date, date(2024, 5, 2))

    def test_import_skips_rows_already_stored(self):
        self.create_row('CN1')
        result = import_csv(self._csv('2024-05-01,R9,CN1,DOCUMENT,EXPRESS,0.3,Acme Traders,Chennai,Madurai'))
        self.assertEqual(result['inserted'], 0)
        self.assertEqual(result['skipped_duplicate'], 1)

    def test_import_skips_numbers_that_do_not_fit_their_column(self):
        content = (
            b"SENDER NAME,CONSIGNMENT NO,PREPAID AMOUNT,WEIGHT (IN Kg)\n"
            b"Acme Traders,C1,99999999999999,123456789\n"
            b"Acme Traders,C2,120.555,1.23456\n"
        )

        result = import_csv(content)

        self.assertEqual(result['inserted'], 1)
        self.assertEqual(result['skipped_invalid'], 1)
        self.assertEqual(result['invalid_rows'], [{
            'consignment_no': 'C1',
            'booking_reference': None,
            'columns': ['WEIGHT (IN Kg)', 'PREPAID AMOUNT'],
        }])
        self.assertEqual(
            list(CsvInvoice.objects.values_list('consignment_no', 'prepaid_amount', 'weight')),
            [('C2', Decimal('120.56'), Decimal('1.235'))]
        )

    def test_import_with_bom_header(self):
        content = '\ufeff'.encode('utf-8') + self._csv('2024-05-01,R1,CN1,DOCUMENT,EXPRESS,0.3,Acme Traders,Chennai,Madurai')
        self.assertEqual(import_csv(content)['inserted'], 1)

    def test_empty_csv_is_rejected(self):
        with self.assertRaises(CsvImportError) as ctx:
            import_csv(self.HEADER.encode('utf-8'))
        self.assertEqual(ctx.exception.message, 'CSV is empty')

    # ==========================================
    # Endpoints
    # ==========================================

    def test_import_endpoint_requires_file(self):
        response = self.client.post('/api/csv-invoices/import/', {}, format='multipart')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['error'], 'No file provided')

    def test_import_endpoint(self):
        upload = SimpleUploadedFile(
            'bookings.csv',
            self._csv('2024-05-01,R1,CN1,DOCUMENT,EXPRESS,0.3,Acme Traders,Chennai,Madurai'),
            content_type='text/csv'
        )
        response = self.client.post('/api/csv-invoices/import/', {'file': upload}, format='multipart')
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['inserted'], 1)

    def test_template_download(self):
        response = self.client.get('/api/csv-invoices/template/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Content-Type'], 'text/csv')
        self.assertTrue(response.content.decode().startswith('DATE OF BOOKING,BOOKING REFERENCE'))

    def test_unbilled_filter(self):
        self.create_row('CN1')
        response = self.client.get('/api/csv-invoices/?billed=false')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['pagination']['total'], 1)


class TestApplyRate(BillingFixtureMixin, TestCase):

    def setUp(self):
        self.create_rate_fixtures()
        self.user = User.objects.create_user(
            email='operator@example.com', password='testpass123', role=UserRole.BILLING_OPERATOR
        )
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)

    def test_apply_rate_stores_breakup(self):
        row = RatingService.apply_rate(self.create_row('CN1'))

        self.assertEqual(row.calculated_amount, Decimal('141.60'))
        self.assertEqual(row.region, 'Within State')
        meta = row.pricing_meta
        self.assertEqual(meta['source'], 'party_rate_slab')
        self.assertEqual(meta['party_id'], self.party.pk)
        self.assertEqual(meta['weight_slab_id'], self.weight_slab.pk)
        self.assertEqual(meta['distance']['code'], 'WITHIN_STATE')
        self.assertEqual(meta['rate_breakup']['subtotal'], 120.0)
        self.assertEqual(meta['rate_breakup']['gst'], 21.6)

    def test_normalised_mode_code(self):
        non_document = Mode.objects.create(code='NON_DOCUMENT', title='Non-Doc')
        self.assertEqual(match_master(Mode, 'Non Document'), non_document)
        self.assertEqual(match_master(Mode, 'non-doc'), non_document)
        self.assertIsNone(match_master(Mode, 'SURFACE'))

    def test_unknown_mode(self):
        with self.assertRaises(RatingError) as ctx:
            RatingService.apply_rate(self.create_row('CN1', mode='SURFACE'))
        self.assertEqual(ctx.exception.message, 'Mode not recognized')
        self.assertEqual(ctx.exception.status_code, 400)

    def test_unresolved_distance(self):
        with self.assertRaises(RatingError) as ctx:
            RatingService.apply_rate(self.create_row('CN1', recipient_address='Somewhere', region=None))
        self.assertEqual(ctx.exception.message, 'Unable to resolve distance category')

    def test_missing_weight(self):
        with self.assertRaises(RatingError) as ctx:
            RatingService.apply_rate(self.create_row('CN1', weight=None))
        self.assertEqual(ctx.exception.message, 'Weight not available to determine slab')

    def test_missing_rate_slab_returns_404_with_diagnostics(self):
        self.rate_slab.delete()
        row = self.create_row('CN1')

        response = self.client.post(f'/api/csv-invoices/{row.pk}/apply-rate/')

        self.assertEqual(response.status_code, 404)
        self.assertIn('error', response.data)
        self.assertEqual(response.data['diagnostics']['party'], 'Acme Traders')
        self.assertEqual(response.data['diagnostics']['grams'], 300)

    def test_apply_rate_endpoint(self):
        row = self.create_row('CN1')
        response = self.client.post(f'/api/csv-invoices/{row.pk}/apply-rate/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(Decimal(response.data['data']['calculated_amount']), Decimal('141.60'))

    def test_bulk_apply_reports_failures(self):
        good = self.create_row('CN1')
        bad = self.create_row('CN2', service_type='OVERNIGHT')

        response = self.client.post(
            '/api/csv-invoices/apply-rates/', {'ids': [str(good.pk), str(bad.pk)]}, format='json'
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['applied'], 1)
        self.assertEqual(response.data['failed'], [{'id': str(bad.pk), 'error': 'Service Type not recognized'}])


class TestPartyInvoice(BillingFixtureMixin, TestCase):

    def setUp(self):
        self.create_rate_fixtures()
        self.user = User.objects.create_user(
            email='operator@example.com', password='testpass123', role=UserRole.BILLING_OPERATOR
        )
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)
        self.row1 = self.create_priced_row('CN1')
        self.row2 = self.create_priced_row('CN2')

    def test_party_invoice_from_rows(self):
        invoice = InvoiceService.create_party_invoice([self.row1.pk, self.row2.pk], user=self.user)

        self.assertTrue(invoice.invoice_number.startswith('PI-'))
        self.assertEqual(invoice.party, self.party)
        self.assertEqual(invoice.subtotal, Decimal('240.00'))
        self.assertEqual(invoice.tax_amount, Decimal('43.20'))
        self.assertEqual(invoice.total_amount, Decimal('283.20'))
        self.assertEqual(invoice.items.count(), 2)
        self.assertEqual(CsvInvoice.objects.filter(invoice=invoice).count(), 2)

    def test_overrides_reprice_lines(self):
        invoice = InvoiceService.create_party_invoice(
            [self.row1.pk],
            overrides={'base_rate': Decimal('200'), 'gst_percent': Decimal('0')},
            metadata={'period_from': '2024-05-01', 'payment_mode': 'Credit'},
        )
        # 200 + fuel 20 + packing 5 + handling 5, no GST
        self.assertEqual(invoice.total_amount, Decimal('230.00'))
        self.assertEqual(invoice.notes, 'Period From: 2024-05-01 | Payment Mode: Credit')
        self.assertEqual(invoice.slab_breakdown['base_rate'], 200.0)

    def test_rows_cannot_be_billed_twice(self):
        InvoiceService.create_party_invoice([self.row1.pk])
        with self.assertRaises(InvoicingError) as ctx:
            InvoiceService.create_party_invoice([self.row1.pk, self.row2.pk])
        self.assertEqual(ctx.exception.status_code, 409)
        self.assertEqual(Invoice.objects.count(), 1)

    def test_mixed_parties_rejected(self):
        Party.objects.create(party_name='Other Co')
        other = self.create_row('CN3', sender='Other Co')
        with self.assertRaises(InvoicingError) as ctx:
            InvoiceService.create_party_invoice([self.row1.pk, other.pk])
        self.assertEqual(ctx.exception.message, 'All rows must belong to the same party')

    def test_party_name_filters_rows(self):
        other = self.create_row('CN3', sender='Other Co')
        invoice = InvoiceService.create_party_invoice([self.row1.pk, other.pk], party_name='acme traders')
        self.assertEqual(invoice.items.count(), 1)
        other.refresh_from_db()
        self.assertIsNone(other.invoice_id)

    def test_missing_party_is_created(self):
        row = self.create_row('CN3', sender='New Customer')
        invoice = InvoiceService.create_party_invoice([row.pk])
        self.assertEqual(invoice.party.party_name, 'New Customer')

    # ==========================================
    # Endpoint
    # ==========================================

    def test_endpoint_creates_invoice(self):
        response = self.client.post('/api/party-invoices/', {
            'rowIds': [str(self.row1.pk), str(self.row2.pk)],
            'partyName': 'Acme Traders',
        }, format='json')
        self.assertEqual(response.status_code, 201)
        self.assertEqual(Decimal(response.data['data']['total_amount']), Decimal('283.20'))

    def test_endpoint_requires_row_ids(self):
        response = self.client.post('/api/party-invoices/', {'rowIds': []}, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['error'], 'rowIds is required')

    def test_endpoint_unknown_rows(self):
        response = self.client.post('/api/party-invoices/', {'rowIds': [str(uuid.uuid4())]}, format='json')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data['error'], 'No rows found for given ids')

    def test_endpoint_conflict_on_billed_rows(self):
        InvoiceService.create_party_invoice([self.row1.pk])
        response = self.client.post('/api/party-invoices/', {'rowIds': [str(self.row1.pk)]}, format='json')
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data['error'], 'Some consignments are already invoiced')


class TestConsolidatedInvoices(BillingFixtureMixin, TestCase):

    def setUp(self):
        self.create_rate_fixtures()
        self.create_priced_row('CN1')
        self.create_priced_row('CN2')

    def test_one_invoice_per_party(self):
        results = InvoiceService.generate_consolidated_invoices()

        self.assertEqual(len(results), 1)
        self.assertEqual(results[0]['party'], 'Acme Traders')
        self.assertEqual(results[0]['rows'], 2)
        invoice = Invoice.objects.get(pk=results[0]['invoice_id'])
        self.assertTrue(invoice.invoice_number.startswith('INV-'))
        self.assertEqual(invoice.total_amount, Decimal('283.20'))
        self.assertFalse(CsvInvoice.objects.unbilled().exists())

    def test_second_run_bills_nothing(self):
        InvoiceService.generate_consolidated_invoices()
        self.assertEqual(InvoiceService.generate_consolidated_invoices(), [])
        self.assertEqual(Invoice.objects.count(), 1)

    def test_unknown_party_filter(self):
        with self.assertRaises(InvoicingError) as ctx:
            InvoiceService.generate_consolidated_invoices(party_name='Nobody')
        self.assertEqual(ctx.exception.message, 'Party not found: Nobody')

    def test_row_without_party_reported(self):
        self.create_row('CN9', sender='Walk In')
        results = InvoiceService.generate_consolidated_invoices()
        self.assertIn({'party': 'Walk In', 'error': 'Party not found'}, results)


class TestInvoiceTotals(BillingFixtureMixin, TestCase):

    def setUp(self):
        self.create_rate_fixtures()

    def test_totals_from_billed_rows(self):
        rows = [self.create_priced_row('CN1'), self.create_priced_row('CN2')]
        invoice = InvoiceService.create_party_invoice(
            [r.pk for r in rows], overrides={'fuel_pct': Decimal('10')}
        )

        totals = InvoiceService.invoice_totals(invoice)

        # line amounts are the slab bases; fuel 10% of 200; GST 18% of 220
        self.assertEqual(totals.subtotal, Decimal('200.00'))
        self.assertEqual(totals.fuel, Decimal('20.00'))
        self.assertEqual(totals.gst_pct, Decimal('18'))
        self.assertEqual(totals.gst, Decimal('39.60'))
        self.assertEqual(totals.sgst + totals.cgst, totals.gst)
        self.assertEqual(totals.total, Decimal('259.60'))
        self.assertEqual(len(totals.lines), 2)
        self.assertEqual(totals.lines[0]['distance'], 'Madurai')

    def test_totals_from_items_use_default_gst(self):
        invoice = Invoice.objects.create(party=self.party)
        InvoiceItem.objects.create(invoice=invoice, description='A', unit_price=100, total_price=100)
        InvoiceItem.objects.create(invoice=invoice, description='B', unit_price=50, total_price=50)

        totals = InvoiceService.invoice_totals(invoice)

        self.assertEqual(totals.subtotal, Decimal('150.00'))
        self.assertEqual(totals.gst, Decimal('27.00'))
        self.assertEqual(totals.sgst, Decimal('13.50'))
        self.assertEqual(totals.total, Decimal('177.00'))
        self.assertEqual(totals.amount_in_words, 'One Hundred and Seventy Seven Rupees only')


class TestInvoiceEndpoints(BillingFixtureMixin, TestCase):

    def setUp(self):
        self.create_rate_fixtures()
        self.operator = User.objects.create_user(
            email='operator@example.com', password='testpass123', role=UserRole.BILLING_OPERATOR
        )
        self.admin = User.objects.create_user(
            email='admin@example.com', password='testpass123', role=UserRole.ADMIN
        )
        self.client = APIClient()
        self.client.force_authenticate(user=self.operator)
        self.invoice = Invoice.objects.create(
            party=self.party, invoice_date=date(2024, 5, 10),
            subtotal=Decimal('100.00'), total_amount=Decimal('100.00')
        )

    def test_update_replaces_items_and_recomputes_total(self):
        response = self.client.patch(f'/api/invoices/{self.invoice.pk}/', {
            'tax_amount': '10.00',
            'items': [
                {'description': 'Courier charges', 'quantity': '2', 'unit_price': '50.00'},
                {'description': 'Packing', 'quantity': '1', 'unit_price': '25.50'},
            ],
        }, format='json')

        self.assertEqual(response.status_code, 200)
        self.invoice.refresh_from_db()
        self.assertEqual(self.invoice.subtotal, Decimal('125.50'))
        self.assertEqual(self.invoice.total_amount, Decimal('135.50'))
        self.assertEqual(self.invoice.items.count(), 2)

    def test_slab_amount_counts_when_applied(self):
        response = self.client.patch(f'/api/invoices/{self.invoice.pk}/', {
            'apply_slab': True, 'slab_amount': '20.00', 'additional_charges': '5.00',
        }, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(Decimal(response.data['total_amount']), Decimal('125.00'))

    def test_list_filters_by_date_and_party(self):
        other = Party.objects.create(party_name='Other Co')
        Invoice.objects.create(party=other, invoice_date=date(2024, 4, 1))

        response = self.client.get('/api/invoices/', {'party_id': self.party.pk, 'date_from': '2024-05-01'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual([i['id'] for i in response.data['data']], [self.invoice.pk])

    def test_delete_is_admin_only(self):
        response = self.client.delete(f'/api/invoices/{self.invoice.pk}/')
        self.assertEqual(response.status_code, 403)
        self.assertTrue(Invoice.objects.filter(pk=self.invoice.pk).exists())

        self.client.force_authenticate(user=self.admin)
        response = self.client.delete(f'/api/invoices/{self.invoice.pk}/')
        self.assertEqual(response.status_code, 204)

    def test_missing_invoice_is_404(self):
        response = self.client.get('/api/invoices/999999/')
        self.assertEqual(response.status_code, 404)
        self.assertIn('error', response.data)

    def test_requires_authentication(self):
        response = APIClient().get('/api/invoices/')
        self.assertEqual(response.status_code, 401)


class TestPartyPayments(BillingFixtureMixin, TestCase):

    def setUp(self):
        self.create_rate_fixtures()
        self.user = User.objects.create_user(
            email='operator@example.com', password='testpass123', role=UserRole.BILLING_OPERATOR
        )
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)
        self.invoice = Invoice.objects.create(
            party=self.party, subtotal=Decimal('300.00'), total_amount=Decimal('300.00')
        )

    def _pay(self, amount, allocated):
        return self.client.post('/api/party-payments/', {
            'party': self.party.pk,
            'payment_date': '2024-06-01',
            'amount': amount,
            'payment_method': 'NEFT',
            'allocations': [{'invoice': self.invoice.pk, 'amount': allocated}],
        }, format='json')

    def test_allocations_update_received_amount(self):
        response = self._pay('200.00', '100.00')
        self.assertEqual(response.status_code, 201)
        self.invoice.refresh_from_db()
        self.assertEqual(self.invoice.received_amount, Decimal('100.00'))
        self.assertEqual(self.invoice.payment_status, PaymentStatus.PARTIAL)

        self._pay('200.00', '200.00')
        self.invoice.refresh_from_db()
        self.assertEqual(self.invoice.received_amount, Decimal('300.00'))
        self.assertEqual(self.invoice.payment_status, PaymentStatus.PAID)

    def test_allocations_cannot_exceed_payment(self):
        response = self._pay('50.00', '100.00')
        self.assertEqual(response.status_code, 400)

    def test_allocation_to_other_party_rejected(self):
        other = Party.objects.create(party_name='Other Co')
        foreign = Invoice.objects.create(party=other, total_amount=Decimal('10.00'))
        response = self.client.post('/api/party-payments/', {
            'party': self.party.pk, 'payment_date': '2024-06-01', 'amount': '10.00',
            'allocations': [{'invoice': foreign.pk, 'amount': '10.00'}],
        }, format='json')
        self.assertEqual(response.status_code, 400)

    def test_list_requires_party(self):
        response = self.client.get('/api/party-payments/')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['error'], 'party_id is required')

        self._pay('100.00', '100.00')
        response = self.client.get('/api/party-payments/', {'party_id': self.party.pk})
        self.assertEqual(response.data['pagination']['total'], 1)

    def test_outstanding_summary(self):
        self._pay('120.00', '120.00')
        response = self.client.get(f'/api/parties/{self.party.pk}/outstanding/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['total_open'], 1)
        self.assertEqual(response.data['total_outstanding'], 180.0)

    def test_payment_records_deductions(self):
        response = self.client.post('/api/party-payments/', {
            'party': self.party.pk, 'payment_date': '2024-06-01', 'amount': '100.00',
            'tds_deduct': '2.00', 'discount': '1.50',
        }, format='json')
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['tds_deduct'], '2.00')
        self.assertEqual(response.data['discount'], '1.50')

        response = self.client.post('/api/party-payments/', {
            'party': self.party.pk, 'payment_date': '2024-06-01', 'amount': '100.00', 'tds_deduct': '-1',
        }, format='json')
        self.assertEqual(response.status_code, 400)

    def test_invoice_allocations(self):
        self._pay('100.00', '100.00')
        self._pay('80.00', '50.00')

        response = self.client.get(f'/api/invoices/{self.invoice.pk}/allocations/')
        self.assertEqual(response.status_code, 200)
        amounts = [a['amount'] for a in response.data['allocations']]
        self.assertEqual(amounts, ['50.00', '100.00'])
        self.assertEqual(response.data['allocations'][0]['party_payment_amount'], '80.00')
        self.assertEqual(response.data['invoice']['received_amount'], Decimal('150.00'))
        self.assertEqual(response.data['invoice']['balance'], Decimal('150.00'))


class TestBills(BillingFixtureMixin, TestCase):

    def setUp(self):
        self.create_rate_fixtures()
        self.user = User.objects.create_user(
            email='operator@example.com', password='testpass123', role=UserRole.BILLING_OPERATOR
        )
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)
        self.b1 = AccountBooking.objects.create(
            booking_date=date(2024, 5, 1), sender='Acme Traders', receiver='X', gross_amount=Decimal('100.00')
        )
        self.b2 = AccountBooking.objects.create(
            booking_date=date(2024, 5, 2), sender='Acme Traders', receiver='Y', gross_amount=Decimal('50.00')
        )

    def _generate(self, **extra):
        body = {
            'party_id': self.party.pk,
            'invoice_number': 'B-001',
            'invoice_date': '2024-05-31',
            'total_amount': '188.80',
            'base_amount': '160.00',
            'cgst_amount': '14.40',
            'sgst_amount': '14.40',
            'selected_bookings': [
                {'id': self.b1.pk, 'booking_type': 'account'},
                {'id': self.b2.pk, 'booking_type': 'account'},
            ],
        }
        body.update(extra)
        return self.client.post('/api/bills/generate/', body, format='json')

    def test_generate_adjusts_last_booking(self):
        response = self._generate()

        self.assertEqual(response.status_code, 201)
        self.assertEqual(len(response.data['data']['bookings']), 2)
        self.b2.refresh_from_db()
        self.assertEqual(self.b2.net_amount, Decimal('60.00'))

    def test_bookings_must_match_party(self):
        other = AccountBooking.objects.create(
            booking_date=date(2024, 5, 3), sender='Someone Else', receiver='Z', gross_amount=Decimal('10.00')
        )
        response = self._generate(selected_bookings=[{'id': other.pk, 'booking_type': 'account'}])
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['error'], 'Selected account bookings do not match the selected party')

    # ===========================================
    # Period bills
    # ===========================================

    def test_period_bill_covers_account_and_cash_bookings(self):
        CashBooking.objects.create(
            date=date(2024, 5, 10), sender='ACME TRADERS ', receiver='Z', gross_amount=Decimal('20.00')
        )
        AccountBooking.objects.create(
            booking_date=date(2024, 6, 1), sender='Acme Traders', receiver='Late', gross_amount=Decimal('999.00')
        )

        response = self.client.post('/api/bills/period/', {
            'party_id': self.party.pk, 'date_from': '2024-05-01', 'date_to': '2024-05-31',
        }, format='json')

        self.assertEqual(response.status_code, 201)
        bill = Bill.objects.get(pk=response.data['data']['id'])
        self.assertEqual(bill.bill_type, PERIOD_BILL_TYPE)
        self.assertTrue(bill.bill_number.startswith('PERIOD-'))
        self.assertEqual(bill.total_amount, Decimal('170.00'))
        self.assertEqual(bill.bookings.count(), 3)

        response = self.client.get('/api/bills/period/')
        row = response.data['data'][0]
        self.assertEqual(row['booking_count'], 3)
        self.assertEqual(row['start_date'], date(2024, 5, 1))
        self.assertEqual(row['end_date'], date(2024, 5, 10))
        self.assertEqual(row['party_name'], 'Acme Traders')

    def test_period_bill_without_bookings_is_404(self):
        response = self.client.post('/api/bills/period/', {
            'party_id': self.party.pk, 'date_from': '2023-01-01', 'date_to': '2023-01-31',
        }, format='json')
        self.assertEqual(response.status_code, 404)
        self.assertIn('No bookings found', response.data['error'])
        self.assertFalse(Bill.objects.exists())

    def test_period_bill_requires_range(self):
        response = self.client.post('/api/bills/period/', {'party_id': self.party.pk}, format='json')
        self.assertEqual(response.status_code, 400)


class TestDocumentExports(BillingFixtureMixin, TestCase):

    def setUp(self):
        self.create_rate_fixtures()
        self.user = User.objects.create_user(
            email='operator@example.com', password='testpass123', role=UserRole.BILLING_OPERATOR
        )
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)
        self.company = Company.objects.create(business_name='Swift Couriers', gstin='33ABCDE1234F1Z5')
        self.row = self.create_priced_row('CN1')
        self.invoice = InvoiceService.create_party_invoice([self.row.pk])

    def assertPdfResponse(self, response, filename):
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Content-Type'], 'application/pdf')
        self.assertEqual(response['Content-Disposition'], f'inline; filename="{filename}"')
        self.assertEqual(response['Cache-Control'], 'no-store, no-cache, must-revalidate, max-age=0')
        self.assertEqual(response['Pragma'], 'no-cache')
        self.assertEqual(response['Expires'], '0')
        self.assertEqual(response.content, FAKE_PDF)

    @patch.object(InvoicePdfRenderer, '_html_to_pdf', return_value=FAKE_PDF)
    def test_invoice_pdf(self, mock_pdf):
        response = self.client.get(f'/api/invoices/{self.invoice.pk}/pdf/')

        self.assertPdfResponse(response, f"invoice-{self.invoice.invoice_number}.pdf")
        html = mock_pdf.call_args[0][0]
        self.assertIn(self.invoice.invoice_number, html)
        self.assertIn('Swift Couriers', html)

    @patch.object(InvoicePdfRenderer, '_html_to_pdf', return_value=FAKE_PDF)
    def test_csv_row_pdf_templates(self, mock_pdf):
        for template in ('default', 'sales', 'courier_aryan', 'unknown'):
            response = self.client.get(f'/api/csv-invoices/{self.row.pk}/pdf/', {'template': template})
            self.assertPdfResponse(response, f"csv-invoice-{self.row.pk}.pdf")
            self.assertIn('CN1', mock_pdf.call_args[0][0])

    @patch.object(InvoicePdfRenderer, '_html_to_pdf', return_value=FAKE_PDF)
    def test_template_failure_renders_error_document(self, mock_pdf):
        with patch.object(InvoicePdfRenderer, '_render_html', side_effect=TemplateSyntaxError('bad')):
            response = self.client.get(f'/api/invoices/{self.invoice.pk}/pdf/')
        self.assertEqual(response.status_code, 200)
        self.assertIn('Error generating PDF', mock_pdf.call_args[0][0])

    @patch.object(InvoicePdfRenderer, '_html_to_pdf', side_effect=RuntimeError('boom'))
    def test_pdf_failure_is_500(self, mock_pdf):
        response = self.client.get(f'/api/invoices/{self.invoice.pk}/pdf/')
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.data, {'error': 'Failed to generate PDF', 'message': 'boom'})

    def test_pdf_without_active_company(self):
        self.company.is_active = False
        self.company.save()
        response = self.client.get(f'/api/invoices/{self.invoice.pk}/pdf/')
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.data['error'], 'No active company configured')

    def test_pdf_for_missing_row_is_404(self):
        response = self.client.get(f'/api/csv-invoices/{uuid.uuid4()}/pdf/')
        self.assertEqual(response.status_code, 404)

    @patch.object(InvoicePdfRenderer, '_html_to_pdf', return_value=FAKE_PDF)
    def test_bill_pdf(self, mock_pdf):
        booking = AccountBooking.objects.create(
            booking_date=date(2024, 5, 1), sender='Acme Traders', receiver='X', gross_amount=Decimal('100.00')
        )
        response = self.client.post('/api/bills/generate/', {
            'party_id': self.party.pk, 'invoice_number': 'B-7', 'total_amount': '118.00',
            'selected_bookings': [{'id': booking.pk, 'booking_type': 'account'}],
        }, format='json')
        bill_id = response.data['data']['id']

        response = self.client.get(f'/api/bills/{bill_id}/pdf/')

        self.assertPdfResponse(response, 'bill-B-7.pdf')
        self.assertIn('One Hundred and Eighteen Rupees only', mock_pdf.call_args[0][0])

    def test_row_csv_export(self):
        response = self.client.get(f'/api/csv-invoices/{self.row.pk}/csv/')
        self.assertEqual(response.status_code, 200)
        lines = response.content.decode().splitlines()
        self.assertEqual(len(lines), 2)
        self.assertIn('CN1', lines[1])
