"""
Billing App URLs
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import (
    CsvInvoiceViewSet, PartyInvoiceView, InvoiceViewSet, BillViewSet, PartyPaymentViewSet,
)

router = DefaultRouter()
router.register(r'csv-invoices', CsvInvoiceViewSet, basename='csv-invoice')
router.register(r'invoices', InvoiceViewSet, basename='invoice')
router.register(r'bills', BillViewSet, basename='bill')
router.register(r'party-payments', PartyPaymentViewSet, basename='party-payment')

urlpatterns = [
    path('party-invoices/', PartyInvoiceView.as_view(), name='party-invoice-create'),
    path('', include(router.urls)),
]
