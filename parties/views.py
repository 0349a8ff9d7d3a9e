"""
Parties App Views - Party master & outstanding balances
"""

from django.db.models import ProtectedError
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from core.exceptions import BillingError
from core.permissions import IsBillingOperator
from .models import Party
from .serializers import PartySerializer, PartyListSerializer


class PartyViewSet(viewsets.ModelViewSet):
    """
    CRUD for parties.

    `search` matches name, contact, phone, city and GSTIN; `simple` returns
    an unpaginated picker list; `outstanding` summarises open invoices.
    """

    queryset = Party.objects.all()
    serializer_class = PartySerializer
    permission_classes = [IsBillingOperator]
    search_fields = ['party_name', 'contact_person', 'phone', 'city', 'gst_number']
    filterset_fields = ['gst_type', 'is_active']
    ordering_fields = ['party_name', 'created_at', 'updated_at']

    def perform_destroy(self, instance):
        try:
            instance.delete()
        except ProtectedError as e:
            raise BillingError(
                "Party has invoices/payments and cannot be deleted",
                status_code=status.HTTP_409_CONFLICT,
            ) from e

    @action(detail=False, methods=['get'])
    def simple(self, request):
        parties = self.filter_queryset(self.get_queryset()).filter(is_active=True)
        return Response(PartyListSerializer(parties, many=True).data)

    @action(detail=True, methods=['get'])
    def outstanding(self, request, pk=None):
        """Open invoices with total, received and balance per invoice."""
        from billing.services.payments import PaymentService

        party = self.get_object()
        return Response(PaymentService.outstanding_summary(party))
