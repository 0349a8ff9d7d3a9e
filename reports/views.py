"""
REPORTS App - Daily collection and billing summary endpoints

?format=json (default), csv or pdf.
"""

import logging

from django.http import HttpResponse
from rest_framework import serializers, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from billing.views import PdfMixin
from core.permissions import IsBillingOperator
from .services import ReportGenerator, CollectionFilters, BillingSummary

logger = logging.getLogger(__name__)


class DailyCollectionQuerySerializer(serializers.Serializer):
    date = serializers.DateField(required=False)
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)
    party_id = serializers.IntegerField(required=False)
    service_type = serializers.CharField(required=False, allow_blank=True)
    format = serializers.ChoiceField(choices=['json', 'csv', 'pdf'], required=False, default='json')

    def validate(self, attrs):
        date_from, date_to = attrs.get('date_from'), attrs.get('date_to')
        if date_from and date_to and date_from > date_to:
            raise serializers.ValidationError("date_from must not be after date_to")
        return attrs

    def filters(self) -> CollectionFilters:
        data = self.validated_data
        extra = {
            'party_id': data.get('party_id'),
            'service_type': data.get('service_type', ''),
        }
        if data.get('date'):
            return CollectionFilters.for_day(data['date'], **extra)
        return CollectionFilters(date_from=data.get('date_from'), date_to=data.get('date_to'), **extra)


@api_view(['GET'])
@permission_classes([IsBillingOperator])
def daily_collection(request):
    """Invoice lines per day, filterable by period, party and courier."""
    query = DailyCollectionQuerySerializer(data=request.query_params)
    query.is_valid(raise_exception=True)
    report = ReportGenerator.daily_collection(query.filters())
    output = query.validated_data['format']

    label = '_'.join(
        d.isoformat() for d in (report.filters.date_from, report.filters.date_to) if d
    ) or 'all'

    if output == 'csv':
        response = HttpResponse(ReportGenerator.daily_collection_csv(report), content_type='text/csv')
        response['Content-Disposition'] = f'attachment; filename="daily_collection_{label}.csv"'
        return response

    if output == 'pdf':
        return PdfMixin.render_pdf(
            lambda company: ReportGenerator.daily_collection_pdf(report, company),
            f"daily-collection-{label}.pdf"
        )

    return Response(report.to_dict(), status=status.HTTP_200_OK)


class BillingSummaryQuerySerializer(serializers.Serializer):
    month = serializers.RegexField(
        r'^\d{4}-(0[1-9]|1[0-2])$',
        error_messages={'invalid': 'month (YYYY-MM) is required', 'required': 'month (YYYY-MM) is required'},
    )


@api_view(['GET'])
@permission_classes([IsBillingOperator])
def billing_summary(request):
    """Bookings, bills and payments per sender for one month."""
    query = BillingSummaryQuerySerializer(data=request.query_params)
    query.is_valid(raise_exception=True)
    return Response(BillingSummary(query.validated_data['month']).to_dict())
