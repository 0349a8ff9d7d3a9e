"""
Billing domain errors. Each carries the HTTP status the API answers with.
"""

from rest_framework import status

from core.exceptions import BillingError


class RatingError(BillingError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Unable to apply rate'


class InvoicingError(BillingError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Unable to create invoice'
