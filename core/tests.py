"""
Core Tests
==========

Tests for:
1. Custom User model (email login, roles)
2. Active company selection
3. Role permissions and the API error shape
4. Pagination and health endpoints
"""

from datetime import timedelta

from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from core.models import User, UserRole, Company


class TestUserModel(TestCase):
    """Tests for the custom User model."""

    def setUp(self):
        self.admin = User.objects.create_user(
            email='admin@example.com',
            password='testpass123',
            role=UserRole.ADMIN,
            full_name='Admin Test',
        )
        self.operator = User.objects.create_user(
            email='Operator@Example.COM',
            password='testpass123',
            full_name='Operator Test',
        )

    # ==========================================
    # User Creation Tests
    # ==========================================

    def test_user_creation_with_email(self):
        """User should be created with email as identifier."""
        self.assertEqual(self.operator.email, 'Operator@example.com')
        self.assertTrue(self.operator.check_password('testpass123'))

    def test_email_is_required(self):
        with self.assertRaises(ValueError):
            User.objects.create_user(email='', password='testpass123')

    def test_default_role_is_operator(self):
        self.assertEqual(self.operator.role, UserRole.BILLING_OPERATOR)
        self.assertFalse(self.operator.is_admin_role)
        self.assertTrue(self.operator.is_billing_operator)

    def test_superuser_is_admin(self):
        superuser = User.objects.create_superuser(email='root@example.com', password='testpass123')
        self.assertTrue(superuser.is_staff)
        self.assertEqual(superuser.role, UserRole.ADMIN)
        self.assertTrue(superuser.is_admin_role)

    def test_str(self):
        self.assertEqual(str(self.admin), 'Admin Test (ADMIN)')


class TestCompany(TestCase):

    def test_get_active_prefers_latest_active(self):
        Company.objects.create(business_name='Old Co', is_active=False)
        first = Company.objects.create(business_name='First Co')
        second = Company.objects.create(business_name='Second Co')
        self.assertEqual(Company.get_active(), second)

        Company.objects.filter(pk=first.pk).update(updated_at=timezone.now() + timedelta(minutes=1))
        self.assertEqual(Company.get_active(), first)

    def test_get_active_none(self):
        Company.objects.create(business_name='Old Co', is_active=False)
        self.assertIsNone(Company.get_active())

    def test_signature_image(self):
        company = Company(business_name='Co', signature='data:image/png;base64,AAAA')
        self.assertTrue(company.has_signature_image)
        company.signature = 'Ravi'
        self.assertFalse(company.has_signature_image)


class TestCoreEndpoints(TestCase):

    def setUp(self):
        self.admin = User.objects.create_user(
            email='admin@example.com', password='testpass123', role=UserRole.ADMIN
        )
        self.operator = User.objects.create_user(
            email='operator@example.com', password='testpass123', role=UserRole.BILLING_OPERATOR
        )
        self.client = APIClient()

    def test_me(self):
        self.client.force_authenticate(user=self.operator)
        response = self.client.get('/api/users/me/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['email'], 'operator@example.com')

    def test_user_list_is_admin_only(self):
        self.client.force_authenticate(user=self.operator)
        response = self.client.get('/api/users/')
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.data, {'error': 'Forbidden'})

        self.client.force_authenticate(user=self.admin)
        response = self.client.get('/api/users/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['pagination']['total'], 2)

    def test_unauthenticated_error_shape(self):
        response = self.client.get('/api/companies/')
        self.assertEqual(response.status_code, 401)
        self.assertIn('error', response.data)

    def test_validation_error_shape(self):
        self.client.force_authenticate(user=self.operator)
        response = self.client.post('/api/companies/', {'business_name': 'Co', 'gstin': 'SHORT'}, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['error'], 'gstin: GSTIN must be 15 characters')
        self.assertIn('gstin', response.data['details'])

    def test_active_company(self):
        self.client.force_authenticate(user=self.operator)
        response = self.client.get('/api/companies/active/')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data['error'], 'No active company configured')

        Company.objects.create(business_name='Swift Couriers', gstin='33ABCDE1234F1Z5')
        response = self.client.get('/api/companies/active/')
        self.assertEqual(response.data['business_name'], 'Swift Couriers')

    def test_page_size_limit(self):
        self.client.force_authenticate(user=self.admin)
        for i in range(3):
            User.objects.create_user(email=f'user{i}@example.com', password='testpass123')

        response = self.client.get('/api/users/', {'limit': 2, 'page': 2})

        self.assertEqual(response.data['pagination'], {'page': 2, 'limit': 2, 'total': 5, 'total_pages': 3})
        self.assertEqual(len(response.data['data']), 2)


class TestHealthEndpoints(TestCase):

    def test_liveness(self):
        response = self.client.get('/health/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['status'], 'ok')

    def test_readiness_degraded_without_company(self):
        response = self.client.get('/health/ready/')
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body['checks']['database']['status'], 'healthy')
        self.assertEqual(body['checks']['company']['status'], 'degraded')

    def test_readiness_with_company(self):
        Company.objects.create(business_name='Swift Couriers')
        response = self.client.get('/health/ready/')
        self.assertEqual(response.json()['checks']['company']['name'], 'Swift Couriers')
