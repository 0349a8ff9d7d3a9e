"""
REPORTS App - URL Configuration
"""

from django.urls import path

from . import views

urlpatterns = [
    path('reports/daily-collection/', views.daily_collection, name='daily-collection'),
    path('reports/billing-summary/', views.billing_summary, name='billing-summary'),
]
