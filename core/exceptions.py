"""
CORE App - API error shape

Every error leaving the API is rendered as {"error": <message>} with the
original DRF payload preserved under "details" when it carries more than
a single message.
"""

import logging

from django.db.models import ProtectedError
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class BillingError(APIException):
    """
    Domain error raised by billing services.

    Subclasses set status_code; `diagnostics` is echoed back to the client
    next to the error message.
    """

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Request could not be processed'

    def __init__(self, message=None, status_code=None, diagnostics=None):
        super().__init__(detail=message or self.default_detail)
        if status_code is not None:
            self.status_code = status_code
        self.message = str(self.detail)
        self.diagnostics = diagnostics or {}


def _first_message(detail):
    if isinstance(detail, dict):
        if 'detail' in detail:
            return _first_message(detail['detail'])
        for field, value in detail.items():
            message = _first_message(value)
            if field == 'non_field_errors':
                return message
            return f"{field}: {message}"
        return ''
    if isinstance(detail, (list, tuple)):
        return _first_message(detail[0]) if detail else ''
    return str(detail)


def api_exception_handler(exc, context):
    """Wrap DRF's default handler into the {"error": ...} shape."""
    if isinstance(exc, ProtectedError):
        # Deleting a row that other records still reference through PROTECT.
        exc = BillingError(
            "Record is referenced by other records and cannot be deleted",
            status_code=status.HTTP_409_CONFLICT,
        )
    response = exception_handler(exc, context)
    if response is None:
        return None

    payload = {'error': _first_message(response.data)}
    if isinstance(exc, BillingError):
        if exc.diagnostics:
            payload['diagnostics'] = exc.diagnostics
    elif isinstance(response.data, dict) and set(response.data) != {'detail'}:
        payload['details'] = response.data
    elif isinstance(response.data, list):
        payload['details'] = response.data

    if response.status_code >= 500:
        logger.error(f"API error on {context.get('view').__class__.__name__}: {payload['error']}")

    response.data = payload
    return response


class CsvImportError(BillingError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'CSV import failed'
