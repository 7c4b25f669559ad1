from __future__ import annotations

import logging

from core.models import Consultation, Specialty
from core.services.notify import broadcast

logger = logging.getLogger(__name__)


def grouped_counters() -> list[dict]:
    """Consultation rooms grouped by specialty, rooms without one last."""
    qs = (Consultation.objects
          .select_related('specialty', 'center')
          .order_by('specialty__name', 'center__name', 'consultation_number'))
    groups: dict = {}
    for c in qs:
        key = c.specialty_id
        if key not in groups:
            groups[key] = {
                'specialtyId': c.specialty_id,
                'specialtyCode': c.specialty.code if c.specialty else None,
                'specialtyName': c.specialty.name if c.specialty else None,
                'consultations': [],
            }
        groups[key]['consultations'].append({
            'id': c.id,
            'consultationNumber': c.consultation_number,
            'extension': c.extension,
            'centerId': c.center_id,
            'centerName': c.center.name,
            'isActive': c.is_active,
        })
    data = [g for k, g in groups.items() if k is not None]
    if None in groups:
        data.append(groups[None])
    for g in data:
        g['activeCount'] = sum(1 for c in g['consultations'] if c['isActive'])
    return data


def toggle_counter(consultation: Consultation) -> Consultation:
    consultation.is_active = not consultation.is_active
    consultation.save(update_fields=['is_active', 'updated_at'])
    logger.info('consultation %s visit counter %s', consultation.id,
                'on' if consultation.is_active else 'off')
    broadcast('counters.refresh', consultationId=consultation.id)
    return consultation


def set_specialty_counters(specialty: Specialty, is_active: bool) -> int:
    updated = Consultation.objects.filter(specialty=specialty).update(is_active=is_active)
    logger.info('specialty %s: %d visit counters set to %s', specialty.code, updated, is_active)
    broadcast('counters.refresh', specialtyId=specialty.id)
    return updated
