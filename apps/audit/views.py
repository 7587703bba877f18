from rest_framework import generics
from rest_framework.permissions import IsAuthenticated
from drf_spectacular.utils import extend_schema, OpenApiParameter

from apps.businesses.permissions import IsBusinessAdmin, IsPlatformAdmin
from apps.businesses.views import TenantPagination
from .models import AuditLog
from .serializers import AuditLogSerializer, AuditLogFilterSerializer


FILTER_PARAMETERS = [
    OpenApiParameter('action', str, description='Action code, e.g. PAYMENT_RECORDED'),
    OpenApiParameter('entity_type', str, description='Entity class name, e.g. Purchase'),
    OpenApiParameter('shop', str, description='Shop slug'),
]


class _FilteredAuditLogView(generics.ListAPIView):
    serializer_class = AuditLogSerializer
    pagination_class = TenantPagination

    def base_queryset(self):
        raise NotImplementedError

    def get_queryset(self):
        filters = AuditLogFilterSerializer(data=self.request.query_params)
        filters.is_valid(raise_exception=True)
        data = filters.validated_data

        queryset = self.base_queryset().select_related('actor', 'shop')
        if data.get('action'):
            queryset = queryset.filter(action=data['action'])
        if data.get('entity_type'):
            queryset = queryset.filter(entity_type=data['entity_type'])
        if data.get('shop'):
            queryset = queryset.filter(shop__slug=data['shop'])
        return queryset


@extend_schema(parameters=FILTER_PARAMETERS, tags=['audit'])
class PlatformAuditLogView(_FilteredAuditLogView):
    """All audit entries across the platform."""
    permission_classes = [IsAuthenticated, IsPlatformAdmin]

    def base_queryset(self):
        return AuditLog.objects.all()


@extend_schema(parameters=FILTER_PARAMETERS, tags=['audit'])
class BusinessAuditLogView(_FilteredAuditLogView):
    """Audit entries of one business."""
    permission_classes = [IsAuthenticated, IsBusinessAdmin]

    def base_queryset(self):
        return AuditLog.objects.filter(business=self.business)
