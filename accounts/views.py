"""
Accounts API Views - Registration, Login, Token Refresh, Profile
"""

import logging

from django.contrib.auth import authenticate
from django.db import transaction
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle

from accounts.authentication import generate_access_token, generate_refresh_token, verify_refresh_token
from accounts.models import User
from accounts.serializers import LoginSerializer, RefreshTokenSerializer, RegisterSerializer, UserSerializer
from config.exceptions import AuthError
from wallet.services import get_or_create_wallet

logger = logging.getLogger(__name__)


class LoginThrottle(AnonRateThrottle):
    scope = 'login'


def _token_response(user, status_code=status.HTTP_200_OK):
    return Response({
        'success': True,
        'data': {
            'access_token': generate_access_token(user),
            'refresh_token': generate_refresh_token(user),
            'user': UserSerializer(user).data,
        },
    }, status=status_code)


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([LoginThrottle])
def register(request):
    """Create a CLIENT account with an empty wallet."""
    serializer = RegisterSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    with transaction.atomic():
        user = User.objects.create_user(
            email=data['email'],
            password=data['password'],
            name=data['name'],
            phone=data['phone'],
            company_name=data['company_name'],
        )
        get_or_create_wallet(user)

    logger.info(f'Registered client {user.email}')
    return _token_response(user, status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([LoginThrottle])
def login(request):
    serializer = LoginSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    user = authenticate(
        request,
        email=serializer.validated_data['email'].lower(),
        password=serializer.validated_data['password'],
    )
    if not user:
        raise AuthError('Invalid email or password', code='INVALID_CREDENTIALS')

    return _token_response(user)


@api_view(['POST'])
@permission_classes([AllowAny])
def refresh_token_view(request):
    serializer = RefreshTokenSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    payload = verify_refresh_token(serializer.validated_data['refresh_token'])
    try:
        user = User.objects.get(id=payload['user_id'], is_active=True)
    except User.DoesNotExist:
        raise AuthError('User not found')

    return Response({
        'success': True,
        'data': {'access_token': generate_access_token(user)},
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def profile(request):
    return Response({'success': True, 'data': UserSerializer(request.user).data})
