"""
Billing App Views - CSV consignments, invoices, bills & party payments
"""

import logging

from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from rest_framework import viewsets, status, mixins
from rest_framework.decorators import action
from rest_framework.parsers import MultiPartParser, FormParser, JSONParser
from rest_framework.response import Response
from rest_framework.views import APIView

from core.models import Company
from core.permissions import IsAdminRole, IsBillingOperator
from parties.models import Party
from .filters import InvoiceFilter, CsvInvoiceFilter, BillFilter
from .models import CsvInvoice, Invoice, Bill, PartyPayment
from .pdf import InvoicePdfRenderer
from .serializers import (
    CsvInvoiceSerializer, CsvImportSerializer, ApplyRatesSerializer, GenerateInvoicesSerializer,
    PartyInvoiceSerializer, InvoiceSerializer, InvoiceListSerializer,
    BillSerializer, BillGenerateSerializer, PeriodBillSerializer, PartyPaymentSerializer,
    InvoiceAllocationSerializer,
)
from .services.bills import BillService
from .services.csv_import import import_csv, template_csv, export_row_csv
from .services.invoicing import InvoiceService
from .services.rating import RatingService

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger('billing.audit')


# ===========================================
# PDF RESPONSES
# ===========================================

def pdf_response(content: bytes, filename: str) -> HttpResponse:
    """Inline PDF that browsers and proxies must not cache."""
    response = HttpResponse(content, content_type='application/pdf')
    response['Content-Disposition'] = f'inline; filename="{filename}"'
    response['Cache-Control'] = 'no-store, no-cache, must-revalidate, max-age=0'
    response['Pragma'] = 'no-cache'
    response['Expires'] = '0'
    return response


class PdfMixin:
    """Renders a document with the active company letterhead."""

    @staticmethod
    def render_pdf(build, filename):
        company = Company.get_active()
        if company is None:
            return Response(
                {'error': 'No active company configured'},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )
        try:
            content = build(company)
        except Exception as e:
            logger.exception(f"Failed to generate PDF {filename}")
            return Response(
                {'error': 'Failed to generate PDF', 'message': str(e)},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )
        return pdf_response(content, filename)


# ===========================================
# CSV CONSIGNMENTS
# ===========================================

class CsvInvoiceViewSet(PdfMixin,
                        mixins.ListModelMixin,
                        mixins.RetrieveModelMixin,
                        mixins.UpdateModelMixin,
                        mixins.DestroyModelMixin,
                        viewsets.GenericViewSet):
    """
    Imported carrier consignments.

    Rows are created only by the CSV import; rating and invoicing run as
    actions on top of them.
    """

    queryset = CsvInvoice.objects.select_related('invoice')
    serializer_class = CsvInvoiceSerializer
    permission_classes = [IsBillingOperator]
    filterset_class = CsvInvoiceFilter
    search_fields = ['sender_name', 'recipient_name', 'consignment_no', 'booking_reference']
    ordering_fields = ['booking_date', 'created_at', 'calculated_amount']
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    @action(detail=False, methods=['post'], url_path='import',
            parser_classes=[MultiPartParser, FormParser])
    def import_file(self, request):
        """Upload a carrier CSV (multipart field `file`)."""
        if 'file' not in request.FILES:
            return Response({'error': 'No file provided'}, status=status.HTTP_400_BAD_REQUEST)
        serializer = CsvImportSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = import_csv(serializer.validated_data['file'].read())
        audit_logger.info(f"{request.user} imported CSV: {result}")
        return Response({'message': 'CSV imported', **result}, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=['get'])
    def template(self, request):
        response = HttpResponse(template_csv(), content_type='text/csv')
        response['Content-Disposition'] = 'attachment; filename="csv-invoice-template.csv"'
        return response

    @action(detail=True, methods=['post'], url_path='apply-rate')
    def apply_rate(self, request, pk=None):
        row = RatingService.apply_rate(self.get_object())
        return Response({
            'message': 'Rate applied',
            'data': self.get_serializer(row).data,
        })

    @action(detail=False, methods=['post'], url_path='apply-rates', parser_classes=[JSONParser])
    def apply_rates(self, request):
        serializer = ApplyRatesSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = RatingService.apply_rates(serializer.validated_data['ids'] or None)
        return Response(result)

    @action(detail=False, methods=['post'])
    def generate(self, request):
        """Consolidated invoice per party for all unbilled rows."""
        serializer = GenerateInvoicesSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        results = InvoiceService.generate_consolidated_invoices(
            party_name=serializer.validated_data.get('party') or None,
            user=request.user,
        )
        return Response({'results': results})

    @action(detail=True, methods=['get'])
    def pdf(self, request, pk=None):
        row = self.get_object()
        template = request.query_params.get('template')
        return self.render_pdf(
            lambda company: InvoicePdfRenderer.csv_row_pdf(row, company, template),
            f"csv-invoice-{row.pk}.pdf"
        )

    @action(detail=True, methods=['get'], url_path='csv')
    def export_csv(self, request, pk=None):
        row = self.get_object()
        response = HttpResponse(export_row_csv(row), content_type='text/csv')
        response['Content-Disposition'] = f'attachment; filename="csv-invoice-{row.pk}.csv"'
        return response


class PartyInvoiceView(APIView):
    """Invoice a hand-picked set of consignments of one party."""

    permission_classes = [IsBillingOperator]

    def post(self, request):
        serializer = PartyInvoiceSerializer(data=request.data)
        if not serializer.is_valid():
            if 'rowIds' in serializer.errors:
                return Response({'error': 'rowIds is required'}, status=status.HTTP_400_BAD_REQUEST)
            serializer.is_valid(raise_exception=True)

        invoice = InvoiceService.create_party_invoice(
            row_ids=serializer.validated_data['rowIds'],
            party_name=serializer.validated_data.get('partyName') or None,
            overrides=serializer.overrides(),
            metadata=serializer.metadata(),
            user=request.user,
        )
        return Response({
            'id': invoice.pk,
            'invoice_number': invoice.invoice_number,
            'data': InvoiceSerializer(invoice).data,
        }, status=status.HTTP_201_CREATED)


# ===========================================
# INVOICES
# ===========================================

class InvoiceViewSet(PdfMixin, viewsets.ModelViewSet):
    queryset = Invoice.objects.select_related('party').prefetch_related('items')
    permission_classes = [IsBillingOperator]
    filterset_class = InvoiceFilter
    search_fields = ['invoice_number', 'party__party_name']
    ordering_fields = ['created_at', 'invoice_date', 'total_amount']
    ordering = ['-created_at']

    def get_permissions(self):
        if self.action == 'destroy':
            return [IsAdminRole()]
        return super().get_permissions()

    def get_serializer_class(self):
        if self.action == 'list':
            return InvoiceListSerializer
        return InvoiceSerializer

    def perform_create(self, serializer):
        serializer.save(created_by=self.request.user)

    def perform_destroy(self, instance):
        audit_logger.info(f"{self.request.user} deleted invoice {instance.invoice_number}")
        instance.delete()

    @action(detail=True, methods=['get'])
    def pdf(self, request, pk=None):
        invoice = self.get_object()
        template = request.query_params.get('template')
        return self.render_pdf(
            lambda company: InvoicePdfRenderer.invoice_pdf(invoice, company, template),
            f"invoice-{invoice.invoice_number}.pdf"
        )

    @action(detail=True, methods=['get'])
    def totals(self, request, pk=None):
        return Response(InvoiceService.invoice_totals(self.get_object()).to_dict())

    @action(detail=True, methods=['get'])
    def allocations(self, request, pk=None):
        """Payments applied to this invoice, newest first."""
        invoice = self.get_object()
        allocations = invoice.allocations.select_related('party_payment').order_by('-created_at', '-id')
        return Response({
            'allocations': InvoiceAllocationSerializer(allocations, many=True).data,
            'invoice': {
                'id': invoice.pk,
                'invoice_number': invoice.invoice_number,
                'total_amount': invoice.total_amount,
                'received_amount': invoice.received_amount,
                'balance': invoice.balance,
            },
        })


# ===========================================
# BILLS
# ===========================================

class BillViewSet(PdfMixin, viewsets.ReadOnlyModelViewSet):
    queryset = Bill.objects.select_related('party').prefetch_related('bookings')
    serializer_class = BillSerializer
    permission_classes = [IsBillingOperator]
    filterset_class = BillFilter
    search_fields = ['bill_number', 'party__party_name']
    ordering_fields = ['bill_date', 'created_at', 'total_amount']

    @action(detail=False, methods=['post'])
    def generate(self, request):
        serializer = BillGenerateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)

        party = get_object_or_404(Party, pk=data.pop('party_id'))
        bill = BillService.generate_bill(
            party=party,
            bill_number=data.pop('invoice_number'),
            total_amount=data.pop('total_amount'),
            bill_date=data.pop('invoice_date', None),
            **data
        )
        audit_logger.info(f"{request.user} generated bill {bill.bill_number} for {party}")
        return Response({
            'message': 'Bill generated successfully',
            'data': BillSerializer(bill).data,
        }, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=['get', 'post'])
    def period(self, request):
        """List period bills, or bill a party's bookings over a date range."""
        if request.method == 'GET':
            return Response({'data': BillService.period_bills()})

        serializer = PeriodBillSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        party = get_object_or_404(Party, pk=data['party_id'])
        bill = BillService.generate_period_bill(party, data['date_from'], data['date_to'], user=request.user)
        return Response({
            'message': 'Period bill generated successfully',
            'data': BillSerializer(bill).data,
        }, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['get'])
    def pdf(self, request, pk=None):
        bill = self.get_object()
        template = request.query_params.get('template') or bill.template
        return self.render_pdf(
            lambda company: InvoicePdfRenderer.bill_pdf(bill, company, template),
            f"bill-{bill.bill_number}.pdf"
        )


# ===========================================
# PARTY PAYMENTS
# ===========================================

class PartyPaymentViewSet(mixins.ListModelMixin,
                          mixins.CreateModelMixin,
                          mixins.RetrieveModelMixin,
                          viewsets.GenericViewSet):
    queryset = PartyPayment.objects.select_related('party').prefetch_related('allocations__invoice')
    serializer_class = PartyPaymentSerializer
    permission_classes = [IsBillingOperator]
    ordering_fields = ['payment_date', 'amount', 'created_at']

    def list(self, request, *args, **kwargs):
        party_id = request.query_params.get('party_id')
        if not party_id:
            return Response({'error': 'party_id is required'}, status=status.HTTP_400_BAD_REQUEST)
        return super().list(request, *args, **kwargs)

    def get_queryset(self):
        queryset = super().get_queryset()
        party_id = self.request.query_params.get('party_id')
        if self.action == 'list' and party_id:
            queryset = queryset.filter(party_id=party_id)
        return queryset

    def perform_create(self, serializer):
        payment = serializer.save(created_by=self.request.user)
        audit_logger.info(f"{self.request.user} recorded payment {payment.amount} from {payment.party}")
