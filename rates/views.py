"""
Rates App Views - Masters, Party Rate Slabs, Party Quotations & rate resolution
"""

import logging

from rest_framework import viewsets, status, mixins
from rest_framework.decorators import action
from rest_framework.response import Response
from django.shortcuts import get_object_or_404

from core.permissions import IsBillingOperator
from parties.models import Party
from .models import (
    Region, Center, Carrier, WeightSlab, DistanceSlab, ServiceType, Mode,
    QuotationDefault, PartyRateSlab, PartyQuotation,
)
from .serializers import (
    RegionSerializer, CenterSerializer, CarrierSerializer, WeightSlabSerializer,
    DistanceSlabSerializer, ServiceTypeSerializer, ModeSerializer,
    QuotationDefaultSerializer, PartyRateSlabSerializer, RateResolveSerializer,
    QuotationResolveSerializer, PartyQuotationSerializer, QuotationCopySerializer,
)
from .services.pricing import pricing_engine, RateNotFound
from .services.quotations import QuotationService, resolve_quotation_default

logger = logging.getLogger(__name__)


class MasterViewSet(viewsets.ModelViewSet):
    """Base CRUD for small master tables."""

    permission_classes = [IsBillingOperator]
    pagination_class = None


class RegionViewSet(MasterViewSet):
    queryset = Region.objects.all()
    serializer_class = RegionSerializer
    search_fields = ['name', 'code']


class CenterViewSet(MasterViewSet):
    queryset = Center.objects.select_related('region')
    serializer_class = CenterSerializer
    search_fields = ['city']
    filterset_fields = ['region', 'is_active']


class CarrierViewSet(MasterViewSet):
    queryset = Carrier.objects.all()
    serializer_class = CarrierSerializer
    search_fields = ['name', 'code']


class WeightSlabViewSet(MasterViewSet):
    queryset = WeightSlab.objects.all()
    serializer_class = WeightSlabSerializer
    filterset_fields = ['is_active']


class DistanceSlabViewSet(MasterViewSet):
    queryset = DistanceSlab.objects.all()
    serializer_class = DistanceSlabSerializer


class ServiceTypeViewSet(MasterViewSet):
    queryset = ServiceType.objects.all()
    serializer_class = ServiceTypeSerializer
    search_fields = ['code', 'title']


class ModeViewSet(MasterViewSet):
    queryset = Mode.objects.all()
    serializer_class = ModeSerializer


class QuotationDefaultViewSet(MasterViewSet):
    queryset = QuotationDefault.objects.select_related('region')
    serializer_class = QuotationDefaultSerializer
    filterset_fields = ['region', 'package_type']

    @action(detail=False, methods=['get'])
    def resolve(self, request):
        """
        Default slab price.

        Query: packageType, weightGrams and optionally regionId.
        """
        serializer = QuotationResolveSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        region = None
        if data.get('regionId') is not None:
            region = get_object_or_404(Region, pk=data['regionId'])
        quotation = resolve_quotation_default(region, data['packageType'], data['weightGrams'])
        if quotation is None:
            return Response({'data': None, 'message': 'No matching quotation default'})

        return Response({
            'data': {
                'id': quotation.id,
                'regionId': quotation.region_id,
                'regionName': quotation.region.name,
                'packageType': quotation.package_type,
                'minWeightGrams': quotation.min_weight_grams,
                'maxWeightGrams': quotation.max_weight_grams,
                'baseRate': float(quotation.base_rate),
            }
        })


class PartyRateSlabViewSet(viewsets.ModelViewSet):
    """
    ViewSet for party rate slabs.

    `resolve` returns the applicable rate for a scenario together with its
    computed breakup.
    """

    queryset = PartyRateSlab.objects.select_related(
        'party', 'mode', 'service_type', 'distance_slab', 'slab'
    )
    serializer_class = PartyRateSlabSerializer
    permission_classes = [IsBillingOperator]
    filterset_fields = ['party', 'shipment_type', 'mode', 'service_type', 'distance_slab', 'slab', 'is_active']
    search_fields = ['party__party_name']
    ordering_fields = ['updated_at', 'rate']

    @action(detail=False, methods=['get'])
    def resolve(self, request):
        """
        Resolve a rate.

        Query: partyId, shipmentType, modeId, serviceTypeId, distanceSlabId
        and weightGrams or slabId.
        """
        serializer = RateResolveSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        party = get_object_or_404(Party, pk=data['partyId'])
        mode = get_object_or_404(Mode, pk=data['modeId'])
        service_type = get_object_or_404(ServiceType, pk=data['serviceTypeId'])
        distance_slab = get_object_or_404(DistanceSlab, pk=data['distanceSlabId'])
        slab = None
        if data.get('slabId') is not None:
            slab = get_object_or_404(WeightSlab, pk=data['slabId'])

        try:
            rate_slab, effective_party_id = pricing_engine.resolve_party_rate(
                party=party,
                shipment_type=data['shipmentType'],
                mode=mode,
                service_type=service_type,
                distance_slab=distance_slab,
                weight_grams=data.get('weightGrams'),
                slab=slab,
            )
        except RateNotFound as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

        breakup = pricing_engine.breakup_from_slab(rate_slab)
        return Response({
            'data': {
                'id': rate_slab.id,
                'partyId': effective_party_id,
                'baseRate': float(rate_slab.rate),
                'fuelPct': float(rate_slab.fuel_pct),
                'packing': float(rate_slab.packing),
                'handling': float(rate_slab.handling),
                'gstPct': float(rate_slab.gst_pct),
                'slabName': rate_slab.slab.slab_name,
                'breakup': breakup.to_meta(),
            }
        })


class PartyQuotationViewSet(mixins.ListModelMixin,
                            mixins.CreateModelMixin,
                            mixins.RetrieveModelMixin,
                            mixins.DestroyModelMixin,
                            viewsets.GenericViewSet):
    """
    Party quotations.

    POST upserts on (party, package_type); `overview` lists every party
    with its quotations and `copy` clones one party's quotations onto
    others.
    """

    queryset = PartyQuotation.objects.select_related('party')
    serializer_class = PartyQuotationSerializer
    permission_classes = [IsBillingOperator]
    filterset_fields = ['party', 'package_type']
    search_fields = ['party__party_name', 'package_type']

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        quotation = QuotationService.upsert(data['party'], data['package_type'], data['rates'], user=request.user)
        return Response(self.get_serializer(quotation).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=['get'])
    def overview(self, request):
        return Response({'data': QuotationService.overview()})

    @action(detail=False, methods=['post'])
    def copy(self, request):
        serializer = QuotationCopySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        source = get_object_or_404(Party, pk=data['source_party_id'])
        if not source.quotations.exists():
            return Response({'error': 'No quotations found for source party'}, status=status.HTTP_404_NOT_FOUND)

        result = QuotationService.copy(source, data['target_party_ids'], user=request.user)
        return Response({
            'message': f"Copied quotations to {len(data['target_party_ids'])} parties",
            **result,
        })
