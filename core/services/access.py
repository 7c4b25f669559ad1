"""
Login access management.

Every person in the staff list is a :class:`core.models.User` row.  A row
"has access" when it carries a usable password; revoking access sets an
unusable password and drops every token issued to that user.
"""
from __future__ import annotations

import logging

from django.contrib.auth.hashers import UNUSABLE_PASSWORD_PREFIX
from django.db import transaction
from rest_framework.authtoken.models import Token
from rest_framework.exceptions import ValidationError
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken

from core.models import User

logger = logging.getLogger(__name__)


def users_with_access():
    return (User.objects
            .exclude(password__startswith=UNUSABLE_PASSWORD_PREFIX)
            .exclude(password='')
            .order_by('full_name', 'id'))


def username_for_email(email: str) -> str:
    base = email.split('@', 1)[0][:140] or 'user'
    candidate = base
    n = 1
    while User.objects.filter(username=candidate).exists():
        n += 1
        candidate = f'{base}{n}'
    return candidate


@transaction.atomic
def create_access(*, full_name: str, email: str, role: str, password: str) -> User:
    """Create a new person that can log in straight away."""
    if User.objects.filter(email__iexact=email).exists():
        raise ValidationError({'email': 'Ya existe un usuario con ese email.'})
    user = User(
        username=username_for_email(email),
        email=email,
        full_name=full_name,
        role=role,
        is_active=True,
    )
    user.set_password(password)
    user.save()
    logger.info('access created for user %s (%s)', user.id, role)
    return user


def grant_access(user: User, *, password: str, role: str | None = None) -> User:
    """Give an existing staff row a password, or reset it."""
    user.set_password(password)
    fields = ['password', 'updated_at']
    if role:
        user.role = role
        fields.append('role')
    if not user.is_active:
        user.is_active = True
        fields.append('is_active')
    user.save(update_fields=fields)
    logger.info('access granted for user %s', user.id)
    return user


def drop_tokens(user: User) -> int:
    Token.objects.filter(user=user).delete()
    count = 0
    for token in OutstandingToken.objects.filter(user=user):
        _, created = BlacklistedToken.objects.get_or_create(token=token)
        count += int(created)
    return count


@transaction.atomic
def revoke_access(user: User) -> User:
    user.set_unusable_password()
    user.save(update_fields=['password', 'updated_at'])
    blacklisted = drop_tokens(user)
    logger.info('access revoked for user %s (%d refresh tokens blacklisted)', user.id, blacklisted)
    return user
