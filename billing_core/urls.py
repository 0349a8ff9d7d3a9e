"""
Courier Billing Main URL Configuration
"""

from django.contrib import admin
from django.urls import path, include
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView
from rest_framework.decorators import api_view
from rest_framework.response import Response

from core.health import health_check, readiness_check


# ===========================================
# ADMIN SITE CUSTOMIZATION
# ===========================================
admin.site.site_header = "Courier Billing Back-Office"
admin.site.site_title = "Courier Billing Admin"
admin.site.index_title = "Parties, bookings & invoices"


@api_view(['GET'])
def api_root(request):
    """API Root endpoint with available routes."""
    return Response({
        'name': 'Courier Billing API',
        'version': '1.0.0',
        'endpoints': {
            'auth': {
                'token': '/api/auth/token/',
                'refresh': '/api/auth/token/refresh/',
            },
            'users': '/api/users/',
            'companies': '/api/companies/',
            'parties': '/api/parties/',
            'party_payments': '/api/party-payments/',
            'masters': {
                'regions': '/api/regions/',
                'centers': '/api/centers/',
                'carriers': '/api/carriers/',
                'weight_slabs': '/api/weight-slabs/',
                'distance_slabs': '/api/distance-slabs/',
                'service_types': '/api/service-types/',
                'modes': '/api/modes/',
                'quotation_defaults': '/api/quotation-defaults/',
            },
            'party_rate_slabs': '/api/party-rate-slabs/',
            'bookings': {
                'cash': '/api/bookings/cash/',
                'account': '/api/bookings/account/',
                'quote': '/api/bookings/quote/',
            },
            'csv_invoices': '/api/csv-invoices/',
            'party_invoices': '/api/party-invoices/',
            'invoices': '/api/invoices/',
            'bills': '/api/bills/',
            'reports': {
                'daily_collection': '/api/reports/daily-collection/',
            },
            'docs': '/api/docs/',
        }
    })


urlpatterns = [
    # Admin
    path('admin/', admin.site.urls),

    # Monitoring
    path('health/', health_check, name='health'),
    path('health/ready/', readiness_check, name='health-ready'),

    # API Root & docs
    path('api/', api_root, name='api-root'),
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),

    # App URLs
    path('api/', include('core.urls')),
    path('api/', include('parties.urls')),
    path('api/', include('rates.urls')),
    path('api/', include('bookings.urls')),
    path('api/', include('billing.urls')),
    path('api/', include('reports.urls')),
]
