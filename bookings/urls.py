"""
Bookings App URLs
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import CashBookingViewSet, AccountBookingViewSet, gross_quote

router = DefaultRouter()
router.register(r'bookings/cash', CashBookingViewSet, basename='cash-booking')
router.register(r'bookings/account', AccountBookingViewSet, basename='account-booking')

urlpatterns = [
    path('bookings/quote/', gross_quote, name='booking-gross-quote'),
    path('', include(router.urls)),
]
