"""
Authentication classes for the ``Token <key>`` and ``Bearer <jwt>`` headers.

Kept apart from the views in ``core.auth_views`` so that DRF can import
them while loading settings without pulling in view modules.
"""
from __future__ import annotations

from rest_framework import authentication, exceptions
from rest_framework_simplejwt.authentication import JWTAuthentication as BaseJWTAuthentication


def ensure_access(user):
    """A staff row whose login was revoked keeps no usable password."""
    if not user.has_usable_password():
        raise exceptions.AuthenticationFailed('El usuario no tiene acceso.')
    return user


class TokenAuthentication(authentication.TokenAuthentication):
    """DRF token authentication that also honours revoked access."""

    keyword = 'Token'

    def authenticate_credentials(self, key):
        user, token = super().authenticate_credentials(key)
        return ensure_access(user), token


class JWTAuthentication(BaseJWTAuthentication):
    """SimpleJWT access tokens stop working as soon as access is revoked."""

    def get_user(self, validated_token):
        return ensure_access(super().get_user(validated_token))
