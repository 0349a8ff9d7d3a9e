"""
Monitoring & Health Check Endpoints
===================================

Provides:
1. /health/ - Basic liveness check (for load balancers/Docker)
2. /health/ready/ - Readiness check (database and active company)
"""

import time
import logging
from django.http import JsonResponse
from django.db import connection, DatabaseError
from django.views.decorators.http import require_GET
from django.views.decorators.csrf import csrf_exempt
from django.utils import timezone

logger = logging.getLogger('billing.monitoring')

SERVICE_NAME = 'courier-billing'


@csrf_exempt
@require_GET
def health_check(request):
    """
    Basic liveness check.
    Returns 200 if the Django process is alive.
    """
    return JsonResponse({
        'status': 'ok',
        'service': SERVICE_NAME,
        'timestamp': timezone.now().isoformat(),
    })


@csrf_exempt
@require_GET
def readiness_check(request):
    """
    Readiness check.
    Returns 503 when the database is unreachable. A missing active company
    only degrades the check: PDFs fail but the rest of the API works.
    """
    from core.models import Company

    checks = {}
    all_healthy = True

    try:
        start = time.time()
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
        checks['database'] = {
            'status': 'healthy',
            'response_time_ms': round((time.time() - start) * 1000, 2),
            'vendor': connection.vendor,
        }
    except DatabaseError as e:
        checks['database'] = {'status': 'unhealthy', 'error': str(e)}
        all_healthy = False
        logger.error(f"Health check - Database unhealthy: {e}")

    if all_healthy:
        company = Company.get_active()
        if company:
            checks['company'] = {'status': 'healthy', 'name': company.business_name}
        else:
            checks['company'] = {'status': 'degraded', 'error': 'No active company configured'}
            logger.warning("Health check - No active company configured")

    return JsonResponse({
        'status': 'healthy' if all_healthy else 'unhealthy',
        'service': SERVICE_NAME,
        'timestamp': timezone.now().isoformat(),
        'checks': checks,
    }, status=200 if all_healthy else 503)
