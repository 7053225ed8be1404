"""
Sender ID API Views.

Clients submit and list their own sender IDs (JWT). Admins review the queue
and move requests to APPROVED or REJECTED.
"""

import logging

from drf_spectacular.utils import extend_schema, OpenApiResponse
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.permissions import IsPlatformAdmin
from config.pagination import paginate
from senders.filters import SenderIDFilter
from senders.models import SenderID
from senders.serializers import (
    AdminSenderIDSerializer, SenderIDSerializer, SenderIDStatusSerializer, SenderIDSubmitSerializer,
)
from senders.services import submit_sender_id, transition_sender_id

logger = logging.getLogger(__name__)


@extend_schema(
    tags=['Sender IDs'],
    summary='Submit or list sender IDs',
    description=(
        'POST submits a new sender ID for admin approval (starts as PENDING).\n\n'
        'GET lists your sender IDs, optionally filtered by `status`.'
    ),
    request=SenderIDSubmitSerializer,
    responses={
        201: SenderIDSerializer,
        400: OpenApiResponse(description='MISSING_SENDER_ID or INVALID_SENDER_ID_FORMAT'),
        409: OpenApiResponse(description='SENDER_ID_EXISTS'),
    },
)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def sender_ids(request):
    if request.method == 'GET':
        qs = SenderIDFilter(
            request.query_params,
            queryset=SenderID.objects.filter(user=request.user),
        ).qs
        page_qs, pagination = paginate(request, qs)
        return Response({
            'success': True,
            'data': SenderIDSerializer(page_qs, many=True).data,
            'pagination': pagination,
        })

    serializer = SenderIDSubmitSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    sender = submit_sender_id(
        request.user,
        data['senderId'],
        purpose=data['purpose'],
        sample_message=data['sampleMessage'],
        company_name=data['companyName'],
    )
    return Response({
        'success': True,
        'data': SenderIDSerializer(sender).data,
    }, status=status.HTTP_201_CREATED)


@extend_schema(
    tags=['Sender IDs'],
    summary='Approve or reject a sender ID (admin)',
    description='Moves a PENDING sender ID to APPROVED or REJECTED. Terminal records cannot change again.',
    request=SenderIDStatusSerializer,
    responses={
        200: AdminSenderIDSerializer,
        404: OpenApiResponse(description='SENDER_ID_NOT_FOUND'),
        409: OpenApiResponse(description='SENDER_ID_NOT_PENDING'),
    },
)
@api_view(['PUT'])
@permission_classes([IsPlatformAdmin])
def sender_id_status(request, sender_pk):
    serializer = SenderIDStatusSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    sender = transition_sender_id(
        sender_pk,
        serializer.validated_data['status'],
        request.user,
        notes=serializer.validated_data['notes'],
    )
    return Response({'success': True, 'data': AdminSenderIDSerializer(sender).data})


@extend_schema(exclude=True)
@api_view(['GET'])
@permission_classes([IsPlatformAdmin])
def admin_sender_ids(request):
    qs = SenderIDFilter(
        request.query_params,
        queryset=SenderID.objects.select_related('user'),
    ).qs
    page_qs, pagination = paginate(request, qs)
    return Response({
        'success': True,
        'data': AdminSenderIDSerializer(page_qs, many=True).data,
        'pagination': pagination,
    })


@extend_schema(exclude=True)
@api_view(['GET'])
@permission_classes([IsPlatformAdmin])
def admin_pending_sender_ids(request):
    """Approval queue, oldest first."""
    qs = SenderID.objects.select_related('user').filter(
        status=SenderID.STATUS_PENDING,
    ).order_by('submitted_at')
    return Response({
        'success': True,
        'data': AdminSenderIDSerializer(qs, many=True).data,
        'count': qs.count(),
    })
