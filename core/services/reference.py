"""
Reference data shared by the planning screen and the admin screens.

Centers, specialties, activities and consultation rooms change rarely and
are read on every render pass, so the specialty list is kept in the
Django cache.  Every write path calls :func:`invalidate_reference_cache`.
"""
from __future__ import annotations

import html
import logging

import bleach
from django.conf import settings
from django.core.cache import cache

from core.models import Activity, Center, Consultation, Specialty, User

logger = logging.getLogger(__name__)

SPECIALTIES_CACHE_KEY = 'reference:specialties'


def clean_text(value) -> str:
    """Free text with every tag stripped, stored unescaped."""
    return html.unescape(bleach.clean((value or '').strip(), tags=set(), strip=True))


def _ts(value):
    return value.isoformat() if value else None


def serialize_center(center: Center) -> dict:
    return {
        'id': center.id,
        'name': center.name,
        'address': center.address,
        'createdAt': _ts(center.created_at),
        'updatedAt': _ts(center.updated_at),
    }


def serialize_specialty(specialty: Specialty) -> dict:
    return {
        'id': specialty.id,
        'name': specialty.name,
        'code': specialty.code,
        'createdAt': _ts(specialty.created_at),
        'updatedAt': _ts(specialty.updated_at),
    }


def serialize_activity(activity: Activity) -> dict:
    return {
        'id': activity.id,
        'name': activity.name,
        'description': activity.description,
        'createdAt': _ts(activity.created_at),
        'updatedAt': _ts(activity.updated_at),
    }


def serialize_consultation(consultation: Consultation) -> dict:
    return {
        'id': consultation.id,
        'consultationNumber': consultation.consultation_number,
        'extension': consultation.extension,
        'specialtyId': consultation.specialty_id,
        'centerId': consultation.center_id,
        'isActive': consultation.is_active,
        'createdAt': _ts(consultation.created_at),
        'updatedAt': _ts(consultation.updated_at),
    }


def serialize_user(user: User) -> dict:
    return {
        'id': user.id,
        'username': user.username,
        'email': user.email,
        'fullName': user.display_name,
        'role': user.role,
        'specialtyId': user.specialty_id,
        'consultationId': user.consultation_id,
        'isActive': user.is_active,
        'hasAccess': user.has_usable_password(),
        'updatedAt': _ts(user.updated_at),
    }


def cached_specialties() -> list[dict]:
    """Specialties as plain dicts, ordered by name."""
    data = cache.get(SPECIALTIES_CACHE_KEY)
    if data is None:
        data = [
            {'id': s.id, 'code': s.code, 'name': s.name}
            for s in Specialty.objects.order_by('name', 'id')
        ]
        cache.set(SPECIALTIES_CACHE_KEY, data, settings.PLANNING_CACHE_SECONDS)
    return data


def invalidate_reference_cache() -> None:
    cache.delete(SPECIALTIES_CACHE_KEY)
    logger.debug('reference cache invalidated')


def warm_reference_cache() -> list[str]:
    invalidate_reference_cache()
    cached_specialties()
    return [SPECIALTIES_CACHE_KEY]
