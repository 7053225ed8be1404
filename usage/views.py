import logging

from drf_spectacular.utils import extend_schema, OpenApiParameter
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.permissions import IsPlatformAdmin
from usage.analytics import clamp_days, system_summary, user_summary

logger = logging.getLogger(__name__)


@extend_schema(
    tags=['Usage'],
    summary='Your API usage',
    description='Requests, cost, latency, error rate, per-endpoint breakdown and a daily series.',
    parameters=[OpenApiParameter('days', int, description='Look-back window, 1-365 (default 30)')],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def usage_summary(request):
    days = clamp_days(request.query_params.get('days'))
    return Response({'success': True, 'data': user_summary(request.user, days)})


@extend_schema(exclude=True)
@api_view(['GET'])
@permission_classes([IsPlatformAdmin])
def admin_usage(request):
    days = clamp_days(request.query_params.get('days'))
    return Response({'success': True, 'data': system_summary(days)})
