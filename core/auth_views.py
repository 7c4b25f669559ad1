"""
Authentication views and helper functions.

This module defines the session endpoints used by the front-end: login
by email (or username), logout, JWT refresh, the current session user
and a diagnostics endpoint.  By isolating these views from the
authentication class (see ``core.authentication``) we prevent circular
imports when Django REST framework initialises authentication classes.
"""
from __future__ import annotations

import logging

from django.contrib.auth.models import update_last_login
from django.db import DatabaseError
from django.db.models import Q
from rest_framework.authtoken.models import Token
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError
from rest_framework_simplejwt.serializers import TokenRefreshSerializer
from rest_framework_simplejwt.tokens import RefreshToken

from core.permissions import ADMIN_ROLES
from core.serializers.auth import LoginSerializer, LogoutSerializer
from core.services.access import drop_tokens
from core.services.reference import cached_specialties

from .models import User

logger = logging.getLogger(__name__)


class LoginRateThrottle(AnonRateThrottle):
    scope = 'login'


def user_payload(user: User) -> dict:
    return {
        'id': user.id,
        'username': user.username,
        'email': user.email,
        'name': user.display_name,
        'role': user.role,
        'specialtyId': user.specialty_id,
        'consultationId': user.consultation_id,
    }


def find_login_user(account: str) -> User | None:
    return User.objects.filter(Q(email__iexact=account) | Q(username=account)).first()


# ---------------------------------------------------------------------
# Email/username + password login
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([LoginRateThrottle])
def login_view(request):
    """
    Accepts fields:
      - email or username
      - password
    Users without access have no usable password and fail like a wrong
    password; inactive users are only told so once the password matched.
    """
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    account = vd['account']

    user = find_login_user(account)
    if user is None or not user.check_password(vd['password']):
        logger.info('failed login for %r from %s', account, request.META.get('REMOTE_ADDR'))
        return Response({'ok': False, 'error': {'code': 'invalid_credentials',
                                                'message': 'Email o contraseña incorrectos'}}, status=400)
    if not user.is_active:
        logger.info('login refused for inactive user %s', user.id)
        return Response({'ok': False, 'error': {'code': 'inactive', 'message': 'Usuario inactivo'}}, status=403)
    update_last_login(None, user)

    token_obj, _ = Token.objects.get_or_create(user=user)
    refresh = RefreshToken.for_user(user)
    logger.info('user %s logged in', user.id)

    return Response({
        'ok': True,
        'token': token_obj.key,
        'jwt_access': str(refresh.access_token),
        'jwt_refresh': str(refresh),
        'role': user.role,
        'user': user_payload(user),
    }, status=200)


# ---------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------
def get_user_for_request(request) -> User | None:
    """Return the authenticated user from the request if available."""
    if not hasattr(request, 'user'):
        return None
    user = request.user
    if user and getattr(user, 'is_authenticated', False):
        return user  # type: ignore
    return None


# ---------------------------------------------------------------------
# Current session
# ---------------------------------------------------------------------
@api_view(['GET'])
@permission_classes([AllowAny])
def me_view(request):
    """Current session user, or ``null`` when there is none."""
    user = get_user_for_request(request)
    return Response({'ok': True, 'user': user_payload(user) if user else None})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def diagnose_view(request):
    """Walk the checks the front-end needs before it can show the planning."""
    user = request.user
    checks = {
        'session': {'ok': True, 'userId': user.id, 'auth': type(request.successful_authenticator).__name__},
    }
    profile = User.objects.filter(pk=user.pk).values('id', 'email', 'role', 'is_active').first()
    checks['profile'] = {'ok': profile is not None, 'data': profile}
    try:
        specialties = cached_specialties()
        checks['specialties'] = {'ok': True, 'count': len(specialties)}
    except DatabaseError as exc:
        logger.warning('diagnose: specialties read failed: %s', exc)
        checks['specialties'] = {'ok': False, 'error': str(exc)}
    checks['role'] = {'ok': True, 'role': user.role, 'isAdmin': user.role in ADMIN_ROLES}
    return Response({'ok': all(c['ok'] for c in checks.values()), 'checks': checks})


# ---------------------------------------------------------------------
# JWT: refresh & logout
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
def jwt_refresh_view(request):
    """Return a new access token from refresh token."""
    s = TokenRefreshSerializer(data=request.data)
    try:
        s.is_valid(raise_exception=True)
    except TokenError as exc:
        raise InvalidToken(exc.args[0]) from exc
    data = dict(s.validated_data)
    payload = {'ok': True, 'jwt_access': data['access']}
    if 'refresh' in data:
        payload['jwt_refresh'] = data['refresh']
    return Response(payload)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def jwt_logout_view(request):
    """Blacklist current user's refresh tokens (all or a given one)."""
    s = LogoutSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    refresh = s.validated_data.get('refresh')
    if refresh:
        try:
            RefreshToken(refresh).blacklist()
        except TokenError as exc:
            raise ValidationError({'refresh': str(exc)})
        Token.objects.filter(user=request.user).delete()
        count = 1
    else:
        count = drop_tokens(request.user)
    logger.info('user %s logged out (%d refresh tokens blacklisted)', request.user.id, count)
    return Response({'ok': True, 'blacklisted': count})
