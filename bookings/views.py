"""
Bookings App Views - Cash & Account bookings
"""

import logging

from rest_framework import viewsets, status
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.parsers import MultiPartParser, FormParser
from rest_framework.response import Response

from core.permissions import IsBillingOperator
from .filters import CashBookingFilter, AccountBookingFilter
from .models import CashBooking, AccountBooking
from .imports import upload_account_bookings
from .serializers import (
    CashBookingSerializer, AccountBookingSerializer,
    BulkDeleteSerializer, GrossQuoteQuerySerializer,
)
from .services import quote_gross_amount

logger = logging.getLogger('billing.audit')


class BookingViewSet(viewsets.ModelViewSet):
    """Shared CRUD + bulk delete for both booking kinds."""

    permission_classes = [IsBillingOperator]
    search_fields = ['sender', 'receiver', 'reference_number']
    ordering_fields = ['created_at', 'net_amount']

    def perform_create(self, serializer):
        serializer.save(created_by=self.request.user)

    @action(detail=False, methods=['post'], url_path='bulk-delete')
    def bulk_delete(self, request):
        serializer = BulkDeleteSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {'error': 'Ids array is required and should not be empty'},
                status=status.HTTP_400_BAD_REQUEST
            )
        ids = serializer.validated_data['ids']
        count, _ = self.get_queryset().filter(id__in=ids).delete()
        label = self.queryset.model._meta.verbose_name_plural
        logger.info(f"{request.user} bulk deleted {count} {label}")
        return Response({
            'message': f"{count} {label} deleted successfully",
            'count': count,
        })


class CashBookingViewSet(BookingViewSet):
    queryset = CashBooking.objects.all()
    serializer_class = CashBookingSerializer
    filterset_class = CashBookingFilter
    ordering_fields = BookingViewSet.ordering_fields + ['date']


class AccountBookingViewSet(BookingViewSet):
    queryset = AccountBooking.objects.all()
    serializer_class = AccountBookingSerializer
    filterset_class = AccountBookingFilter
    ordering_fields = BookingViewSet.ordering_fields + ['booking_date']
    search_fields = BookingViewSet.search_fields + ['consignment_number']

    @action(detail=False, methods=['post'], url_path='bulk-upload',
            parser_classes=[MultiPartParser, FormParser])
    def bulk_upload(self, request):
        """Upload account bookings from a CSV (multipart field `file`)."""
        upload = request.FILES.get('file')
        if upload is None:
            return Response({'error': 'No file provided'}, status=status.HTTP_400_BAD_REQUEST)
        if not upload.name.lower().endswith('.csv'):
            return Response({'error': 'Only CSV files are allowed'}, status=status.HTTP_400_BAD_REQUEST)

        result = upload_account_bookings(upload.read(), user=request.user)
        return Response({
            'message': f"Uploaded {result['uploaded_count']} of {result['total_records']} bookings",
            **result,
        }, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsBillingOperator])
def gross_quote(request):
    """Slab gross amount for center + package_type + weight."""
    serializer = GrossQuoteQuerySerializer(data=request.query_params)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    quote = quote_gross_amount(
        data['center'], data['package_type'], data['weight'], data['weight_unit']
    )
    if quote is None:
        return Response({'data': None, 'message': 'No matching quotation'})
    return Response({'data': quote.to_dict()})
