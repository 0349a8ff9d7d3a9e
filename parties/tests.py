"""
Parties Tests
=============

Tests for:
1. Name matching (trimmed, case-insensitive)
2. Party CRUD validation
3. Search, pagination and the picker list
4. Delete guarded by invoices and payments
"""

from django.test import TestCase
from rest_framework.test import APIClient

from core.models import User, UserRole
from billing.models import Invoice
from parties.models import Party, GstType


class TestPartyNameMatching(TestCase):

    def setUp(self):
        self.party = Party.objects.create(party_name='Acme Traders', city='Chennai', state='Tamil Nadu')

    def test_find_by_name_ignores_case_and_spaces(self):
        self.assertEqual(Party.objects.find_by_name('  acme TRADERS '), self.party)

    def test_find_by_name_blank(self):
        self.assertIsNone(Party.objects.find_by_name('   '))
        self.assertFalse(Party.objects.by_name(None).exists())

    def test_full_address(self):
        self.party.address = '12 Anna Salai'
        self.assertEqual(self.party.full_address, '12 Anna Salai, Chennai, Tamil Nadu')


class TestPartyEndpoints(TestCase):

    def setUp(self):
        self.user = User.objects.create_user(
            email='operator@example.com', password='testpass123', role=UserRole.BILLING_OPERATOR
        )
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)
        Party.objects.create(party_name='Acme Traders', city='Chennai')
        Party.objects.create(party_name='Blue Ocean Exports', city='Kochi')
        Party.objects.create(party_name='Dormant Ltd', city='Pune', is_active=False)

    # ==========================================
    # Create / validate
    # ==========================================

    def test_create_party(self):
        response = self.client.post('/api/parties/', {
            'party_name': '  New Customer ', 'gst_type': GstType.REGISTERED, 'gst_number': '33abcde1234f1z5',
        }, format='json')
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['party_name'], 'New Customer')
        self.assertEqual(response.data['gst_number'], '33ABCDE1234F1Z5')

    def test_duplicate_name_rejected(self):
        response = self.client.post('/api/parties/', {'party_name': 'ACME traders'}, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['error'], 'party_name: A party with this name already exists')

    def test_registered_party_needs_gstin(self):
        response = self.client.post('/api/parties/', {
            'party_name': 'Tax Co', 'gst_type': GstType.REGISTERED,
        }, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertIn('gst_number', response.data['details'])

    def test_rename_to_own_name_allowed(self):
        party = Party.objects.get(party_name='Acme Traders')
        response = self.client.patch(f'/api/parties/{party.pk}/', {'party_name': 'Acme traders'}, format='json')
        self.assertEqual(response.status_code, 200)

    # ==========================================
    # Listing
    # ==========================================

    def test_search_and_pagination(self):
        response = self.client.get('/api/parties/', {'search': 'kochi', 'limit': 1})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['pagination']['total'], 1)
        self.assertEqual(response.data['data'][0]['party_name'], 'Blue Ocean Exports')

    def test_simple_lists_active_only(self):
        response = self.client.get('/api/parties/simple/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            sorted(p['party_name'] for p in response.data),
            ['Acme Traders', 'Blue Ocean Exports']
        )

    def test_outstanding_without_invoices(self):
        party = Party.objects.get(party_name='Acme Traders')
        response = self.client.get(f'/api/parties/{party.pk}/outstanding/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['total_outstanding'], 0.0)
        self.assertEqual(response.data['open_invoices'], [])

    # ==========================================
    # Delete
    # ==========================================

    def test_delete_party_without_documents(self):
        party = Party.objects.get(party_name='Dormant Ltd')
        response = self.client.delete(f'/api/parties/{party.pk}/')
        self.assertEqual(response.status_code, 204)
        self.assertFalse(Party.objects.filter(pk=party.pk).exists())

    def test_delete_party_with_invoice_conflicts(self):
        party = Party.objects.get(party_name='Acme Traders')
        Invoice.objects.create(party=party)

        response = self.client.delete(f'/api/parties/{party.pk}/')

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data['error'], 'Party has invoices/payments and cannot be deleted')
        self.assertTrue(Party.objects.filter(pk=party.pk).exists())
