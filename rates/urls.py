"""
Rates App URLs
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from . import views

router = DefaultRouter()
router.register(r'regions', views.RegionViewSet, basename='region')
router.register(r'centers', views.CenterViewSet, basename='center')
router.register(r'carriers', views.CarrierViewSet, basename='carrier')
router.register(r'weight-slabs', views.WeightSlabViewSet, basename='weight-slab')
router.register(r'distance-slabs', views.DistanceSlabViewSet, basename='distance-slab')
router.register(r'service-types', views.ServiceTypeViewSet, basename='service-type')
router.register(r'modes', views.ModeViewSet, basename='mode')
router.register(r'quotation-defaults', views.QuotationDefaultViewSet, basename='quotation-default')
router.register(r'party-rate-slabs', views.PartyRateSlabViewSet, basename='party-rate-slab')
router.register(r'party-quotations', views.PartyQuotationViewSet, basename='party-quotation')

urlpatterns = [
    path('', include(router.urls)),
]
