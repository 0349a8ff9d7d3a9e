"""
Bookings Tests
==============

Tests for:
1. Net amount computation (cash and account)
2. Slab gross quote lookup
3. Gross amount provenance (slab vs manual)
4. Bulk delete and quote endpoints
5. Account booking CSV upload
"""

from datetime import date
from decimal import Decimal

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase
from rest_framework.test import APIClient

from core.exceptions import CsvImportError
from core.models import User, UserRole
from parties.models import Party
from rates.models import Region, Center, QuotationDefault
from bookings.models import CashBooking, AccountBooking, GrossAmountSource
from bookings.imports import upload_account_bookings
from bookings.services import quote_gross_amount, resolve_gross_amount


class QuotationFixtureMixin:

    def create_quotations(self):
        self.region = Region.objects.create(name='South', code='S')
        Center.objects.create(city='Chennai', region=self.region)
        QuotationDefault.objects.create(
            region=self.region, package_type='DOCUMENT',
            min_weight_grams=0, max_weight_grams=500, base_rate=Decimal('50.00')
        )
        QuotationDefault.objects.create(
            region=self.region, package_type='DOCUMENT',
            min_weight_grams=500, max_weight_grams=1000, base_rate=Decimal('80.00')
        )


class TestNetAmount(TestCase):

    # ==========================================
    # Cash bookings
    # ==========================================

    def test_cash_net_includes_fuel_insurance_and_gst(self):
        booking = CashBooking.objects.create(
            date=date(2024, 5, 1), sender='A', receiver='B',
            gross_amount=Decimal('100.00'), fuel_charge_percent=Decimal('10'),
            insurance_amount=Decimal('5'), cgst_amount=Decimal('9'), sgst_amount=Decimal('9'),
        )
        self.assertEqual(booking.net_amount, Decimal('133.00'))

    def test_cash_net_with_missing_amounts(self):
        booking = CashBooking.objects.create(date=date(2024, 5, 1), sender='A', receiver='B')
        self.assertEqual(booking.net_amount, Decimal('0.00'))

    def test_cash_net_rounds_half_up(self):
        # 10.10 + 5% fuel = 10.605
        booking = CashBooking.objects.create(
            date=date(2024, 5, 1), sender='A', receiver='B',
            gross_amount=Decimal('10.10'), fuel_charge_percent=Decimal('5'),
        )
        self.assertEqual(booking.net_amount, Decimal('10.61'))

    def test_explicit_net_is_kept(self):
        booking = CashBooking.objects.create(
            date=date(2024, 5, 1), sender='A', receiver='B',
            gross_amount=Decimal('100.00'), net_amount=Decimal('99.00'),
        )
        self.assertEqual(booking.net_amount, Decimal('99.00'))

    # ==========================================
    # Account bookings
    # ==========================================

    def test_account_net_adds_other_charges_and_insurance(self):
        booking = AccountBooking.objects.create(
            booking_date=date(2024, 5, 1), sender='A', receiver='B',
            gross_amount=Decimal('200.00'), other_charges=Decimal('15'), insurance_amount=Decimal('5'),
        )
        self.assertEqual(booking.net_amount, Decimal('220.00'))

    def test_account_defaults(self):
        booking = AccountBooking.objects.create(booking_date=date(2024, 5, 1), sender='A', receiver='B')
        self.assertTrue(booking.reference_number.startswith('AB'))
        self.assertEqual(booking.status, 'pending')
        self.assertEqual(booking.weight_unit, 'kg')


class TestGrossQuote(QuotationFixtureMixin, TestCase):

    def setUp(self):
        self.create_quotations()

    def test_quote_matches_exclusive_lower_bound(self):
        quote = quote_gross_amount('chennai', 'document', Decimal('0.5'), 'kg')
        self.assertEqual(quote.gross_amount, Decimal('50.00'))
        quote = quote_gross_amount('Chennai', 'DOCUMENT', Decimal('501'), 'g')
        self.assertEqual(quote.gross_amount, Decimal('80.00'))

    def test_unknown_center_has_no_quote(self):
        self.assertIsNone(quote_gross_amount('Delhi', 'DOCUMENT', Decimal('0.2')))

    def test_missing_weight_has_no_quote(self):
        self.assertIsNone(quote_gross_amount('Chennai', 'DOCUMENT', None))

    # ==========================================
    # Provenance
    # ==========================================

    def test_missing_gross_takes_slab(self):
        gross, source = resolve_gross_amount(None, 'Chennai', 'DOCUMENT', Decimal('0.3'))
        self.assertEqual(gross, Decimal('50.00'))
        self.assertEqual(source, GrossAmountSource.SLAB)

    def test_supplied_gross_equal_to_quote_is_slab(self):
        _, source = resolve_gross_amount(Decimal('50.00'), 'Chennai', 'DOCUMENT', Decimal('0.3'))
        self.assertEqual(source, GrossAmountSource.SLAB)

    def test_supplied_gross_differing_is_manual(self):
        gross, source = resolve_gross_amount(Decimal('65.00'), 'Chennai', 'DOCUMENT', Decimal('0.3'))
        self.assertEqual(gross, Decimal('65.00'))
        self.assertEqual(source, GrossAmountSource.MANUAL)

    def test_no_quote_and_no_gross_is_manual(self):
        gross, source = resolve_gross_amount(None, 'Nowhere', 'DOCUMENT', Decimal('0.3'))
        self.assertIsNone(gross)
        self.assertEqual(source, GrossAmountSource.MANUAL)


class TestBookingEndpoints(QuotationFixtureMixin, TestCase):

    def setUp(self):
        self.create_quotations()
        self.user = User.objects.create_user(
            email='operator@example.com', password='testpass123', role=UserRole.BILLING_OPERATOR
        )
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)

    def test_create_cash_booking_uses_slab_gross(self):
        response = self.client.post('/api/bookings/cash/', {
            'date': '2024-05-01', 'sender': 'Acme', 'receiver': 'Bob',
            'center': 'Chennai', 'package_type': 'DOCUMENT', 'weight': '0.4',
            'fuel_charge_percent': '10',
        }, format='json')
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['gross_amount_source'], 'slab')
        self.assertEqual(Decimal(response.data['gross_amount']), Decimal('50.00'))
        self.assertEqual(Decimal(response.data['net_amount']), Decimal('55.00'))

    def test_create_account_booking_manual_gross(self):
        response = self.client.post('/api/bookings/account/', {
            'booking_date': '2024-05-01', 'sender': 'Acme', 'receiver': 'Bob',
            'center': 'Chennai', 'package_type': 'DOCUMENT', 'weight': '0.4',
            'gross_amount': '70.00',
        }, format='json')
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['gross_amount_source'], 'manual')
        self.assertEqual(Decimal(response.data['net_amount']), Decimal('70.00'))

    def test_sender_and_receiver_required(self):
        response = self.client.post('/api/bookings/cash/', {'date': '2024-05-01'}, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertIn('error', response.data)

    def test_update_recomputes_net(self):
        booking = AccountBooking.objects.create(
            booking_date=date(2024, 5, 1), sender='A', receiver='B', gross_amount=Decimal('100.00')
        )
        response = self.client.patch(
            f'/api/bookings/account/{booking.id}/', {'other_charges': '20.00'}, format='json'
        )
        self.assertEqual(response.status_code, 200)
        booking.refresh_from_db()
        self.assertEqual(booking.net_amount, Decimal('120.00'))

    def test_bulk_delete(self):
        ids = [
            CashBooking.objects.create(date=date(2024, 5, 1), sender='A', receiver='B').id
            for _ in range(3)
        ]
        response = self.client.post('/api/bookings/cash/bulk-delete/', {'ids': ids[:2]}, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['count'], 2)
        self.assertEqual(CashBooking.objects.count(), 1)

    def test_bulk_delete_requires_ids(self):
        response = self.client.post('/api/bookings/account/bulk-delete/', {'ids': []}, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['error'], 'Ids array is required and should not be empty')

    def test_quote_endpoint(self):
        response = self.client.get('/api/bookings/quote/', {
            'center': 'Chennai', 'package_type': 'DOCUMENT', 'weight': '700', 'weight_unit': 'g'
        })
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['data']['gross_amount'], 80.0)

    def test_unauthenticated_request_rejected(self):
        response = APIClient().get('/api/bookings/cash/')
        self.assertEqual(response.status_code, 401)


# ===========================================
# CSV upload
# ===========================================

UPLOAD_CSV = (
    'DATE OF BOOKING,SENDER NAME,CENTER,RECEIVER NAME,MOBILE,REFERENCE NUMBER,PACKAGE TYPE,WEIGHT,'
    'GROSS AMOUNT,OTHER CHARGES\n'
    '05-05-2024,Acme Traders,Chennai,Bob,9000000001,REF-1,DOCUMENT,400,,10\n'
    '2024-05-06,Unknown Co,,Carl,,REF-2,,,20,\n'
    '2024-05-06,acme traders,,Dan,,REF-1,,,30,\n'
    '2024-05-07,Acme Traders,,Eve,9000000002,,,,25,\n'
    '2024-05-07,Acme Traders,,Eve,9000000002,,,,25,\n'
    'not-a-date,Acme Traders,,Fay,,REF-6,,,99999999999,\n'
)


class TestAccountBookingUpload(QuotationFixtureMixin, TestCase):

    def setUp(self):
        self.create_quotations()
        Party.objects.create(party_name='Acme Traders')
        self.user = User.objects.create_user(
            email='operator@example.com', password='testpass123', role=UserRole.BILLING_OPERATOR
        )
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)

    def _upload(self, content, name='bookings.csv'):
        upload = SimpleUploadedFile(name, content.encode('utf-8'), content_type='text/csv')
        return self.client.post('/api/bookings/account/bulk-upload/', {'file': upload}, format='multipart')

    def test_upload_skips_unknown_party_duplicates_and_invalid_rows(self):
        result = upload_account_bookings(UPLOAD_CSV, user=self.user)

        self.assertEqual(result['uploaded_count'], 2)
        self.assertEqual(result['total_records'], 6)
        self.assertEqual(result['missing_parties'], [{'row': 2, 'party': 'Unknown Co'}])
        self.assertEqual([d['row'] for d in result['duplicates']], [3, 5])
        self.assertEqual(result['duplicates'][0]['reason'], 'Duplicate reference number')
        self.assertEqual(result['invalid_rows'], [{'row': 6, 'reference': 'REF-6', 'columns': ['GROSS AMOUNT']}])

    def test_uploaded_rows_are_priced_and_referenced(self):
        upload_account_bookings(UPLOAD_CSV, user=self.user)

        first = AccountBooking.objects.get(reference_number='REF-1')
        self.assertEqual(first.booking_date, date(2024, 5, 5))
        self.assertEqual(first.weight_unit, 'g')
        self.assertEqual(first.gross_amount, Decimal('50.00'))
        self.assertEqual(first.gross_amount_source, GrossAmountSource.SLAB)
        self.assertEqual(first.net_amount, Decimal('60.00'))
        self.assertEqual(first.number_of_boxes, 1)
        self.assertEqual(first.created_by, self.user)

        unreferenced = AccountBooking.objects.get(receiver='Eve')
        self.assertTrue(unreferenced.reference_number.startswith('AB'))
        self.assertEqual(unreferenced.net_amount, Decimal('25.00'))

    def test_second_upload_is_all_duplicates(self):
        upload_account_bookings(UPLOAD_CSV)
        result = upload_account_bookings(UPLOAD_CSV)
        self.assertEqual(result['uploaded_count'], 0)
        self.assertEqual(AccountBooking.objects.count(), 2)

    def test_missing_required_headers(self):
        with self.assertRaises(CsvImportError) as ctx:
            upload_account_bookings('DATE OF BOOKING,SENDER NAME\n2024-05-01,Acme Traders\n')
        self.assertEqual(ctx.exception.diagnostics['missing_fields'], ['RECEIVER NAME'])

    def test_endpoint(self):
        response = self._upload(UPLOAD_CSV)
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['uploaded_count'], 2)
        self.assertEqual(response.data['message'], 'Uploaded 2 of 6 bookings')

    def test_endpoint_rejects_other_files(self):
        response = self._upload(UPLOAD_CSV, name='bookings.xlsx')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['error'], 'Only CSV files are allowed')

        response = self.client.post('/api/bookings/account/bulk-upload/', {}, format='multipart')
        self.assertEqual(response.data['error'], 'No file provided')

    def test_endpoint_header_only_file(self):
        response = self._upload('DATE OF BOOKING,SENDER NAME,RECEIVER NAME\n')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['error'], 'No valid records found in CSV')
