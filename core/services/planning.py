"""
Planning render pass and planning record writes.

A render pass takes an explicit :class:`PlanningFilters` value, resolves
the date range, runs the four independent store reads and hands the
materialized rows to :func:`core.services.grid.build_grid`.  A failing
read aborts the whole pass with :class:`core.exceptions.StoreUnavailable`;
the caller never sees a partially built grid.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from django.db import DatabaseError, transaction
from django_redis.exceptions import ConnectionInterrupted
from rest_framework.exceptions import ValidationError

from core.exceptions import StoreUnavailable
from core.models import Activity, Center, Consultation, PlanningRecord, Specialty, SpecialtyActivity, User, UserAbsence
from core.services.date_range import DateRange, days_between, resolve_range
from core.services.grid import AbsenceInterval, AssignmentRecord, SpecialtyRef, build_grid
from core.services.notify import broadcast_planning_refresh
from core.services.reference import cached_specialties, clean_text

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlanningFilters:
    view_mode: str
    anchor: date
    specialty_id: Optional[int] = None
    user_id: Optional[int] = None
    show_absences: bool = True


# ---------------------------------------------------------------------
# Store reads
# ---------------------------------------------------------------------
def list_specialties() -> List[SpecialtyRef]:
    return [SpecialtyRef(id=s['id'], code=s['code'], name=s['name']) for s in cached_specialties()]


def list_active_users(specialty_id: Optional[int] = None) -> list[dict]:
    qs = User.objects.filter(is_active=True)
    if specialty_id:
        qs = qs.filter(specialty_id=specialty_id)
    return [
        {'id': u.id, 'fullName': u.display_name, 'specialtyId': u.specialty_id}
        for u in qs.order_by('full_name', 'id')
    ]


def list_assignment_records(date_range: DateRange, *, specialty_id: Optional[int] = None,
                            user_id: Optional[int] = None) -> List[AssignmentRecord]:
    qs = (PlanningRecord.objects
          .select_related('user', 'specialty', 'activity', 'consultation')
          .filter(record_date__gte=date_range.start, record_date__lte=date_range.end))
    if specialty_id:
        qs = qs.filter(specialty_id=specialty_id)
    if user_id:
        qs = qs.filter(user_id=user_id)
    return [AssignmentRecord.from_model(r) for r in qs.order_by('record_date', 'id')]


def list_absences(date_range: DateRange) -> List[AbsenceInterval]:
    qs = UserAbsence.objects.filter(start_date__lte=date_range.end, end_date__gte=date_range.start)
    return [AbsenceInterval.from_model(a) for a in qs]


# ---------------------------------------------------------------------
# Render pass
# ---------------------------------------------------------------------
def render_planning(filters: PlanningFilters) -> dict:
    date_range = resolve_range(filters.view_mode, filters.anchor)
    try:
        specialties = list_specialties()
        users = list_active_users(filters.specialty_id)
        records = list_assignment_records(
            date_range, specialty_id=filters.specialty_id, user_id=filters.user_id,
        )
        absences = list_absences(date_range)
    except (DatabaseError, ConnectionInterrupted) as exc:
        logger.error('planning render failed for %s: %s', filters, exc)
        raise StoreUnavailable() from exc

    rows = specialties
    if filters.specialty_id:
        rows = [s for s in specialties if s.id == filters.specialty_id]

    grid = build_grid(records, absences, date_range.days, rows, show_absences=filters.show_absences)
    logger.debug('planning %s %s..%s: %d records, %d absences',
                 filters.view_mode, date_range.start, date_range.end, len(records), len(absences))
    return {
        'ok': True,
        'view': filters.view_mode,
        'start': date_range.start.isoformat(),
        'end': date_range.end.isoformat(),
        'filters': {
            'specialtyId': filters.specialty_id,
            'userId': filters.user_id,
            'showAbsences': filters.show_absences,
        },
        'specialties': [s.to_dict() for s in specialties],
        'users': users,
        'grid': grid.to_dict(),
        'absentCount': grid.absent_count(),
    }


# ---------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------
def serialize_record(record: PlanningRecord) -> dict:
    return {
        'id': record.id,
        'userId': record.user_id,
        'specialtyId': record.specialty_id,
        'activityId': record.activity_id,
        'centerId': record.center_id,
        'consultationId': record.consultation_id,
        'recordDate': record.record_date.isoformat(),
        'shift': record.shift,
        'notes': record.notes,
        'createdAt': record.created_at.isoformat() if record.created_at else None,
        'updatedAt': record.updated_at.isoformat() if record.updated_at else None,
    }


def serialize_absence(absence: UserAbsence) -> dict:
    return {
        'id': absence.id,
        'userId': absence.user_id,
        'startDate': absence.start_date.isoformat(),
        'endDate': absence.end_date.isoformat(),
        'reason': absence.reason,
    }


def _get_or_invalid(model, pk, field_name):
    if pk is None:
        return None
    obj = model.objects.filter(pk=pk).first()
    if obj is None:
        raise ValidationError({field_name: 'No existe.'})
    return obj


def check_activity_allowed(specialty: Specialty, activity: Activity) -> None:
    """Reject activities not linked to a specialty that has links."""
    links = SpecialtyActivity.objects.filter(specialty=specialty)
    if links.exists() and not links.filter(activity=activity).exists():
        raise ValidationError({'activityId': 'La actividad no pertenece a la especialidad.'})


@transaction.atomic
def register_records(*, start_date: date, end_date: date, user_id: int, specialty_id: int,
                     activity_id: int, center_id: int, shift: str,
                     consultation_id: Optional[int] = None, notes: str = '') -> List[PlanningRecord]:
    """Create one planning record per day of ``[start_date, end_date]``."""
    if start_date > end_date:
        raise ValidationError({'endDate': 'La fecha de fin debe ser posterior a la de inicio.'})
    user = _get_or_invalid(User, user_id, 'userId')
    specialty = _get_or_invalid(Specialty, specialty_id, 'specialtyId')
    activity = _get_or_invalid(Activity, activity_id, 'activityId')
    center = _get_or_invalid(Center, center_id, 'centerId')
    consultation = _get_or_invalid(Consultation, consultation_id, 'consultationId')
    check_activity_allowed(specialty, activity)

    notes = clean_text(notes)
    records = PlanningRecord.objects.bulk_create([
        PlanningRecord(
            user=user, specialty=specialty, activity=activity, center=center,
            consultation=consultation, record_date=day, shift=shift, notes=notes,
        )
        for day in days_between(start_date, end_date)
    ])
    logger.info('registered %d planning records for user %s (%s..%s, %s)',
                len(records), user.id, start_date, end_date, shift)
    transaction.on_commit(lambda: broadcast_planning_refresh(start_date, end_date))
    return records


def update_record(record: PlanningRecord, data: dict) -> PlanningRecord:
    """Apply a validated partial update to one planning record."""
    old_date = record.record_date
    if 'userId' in data:
        record.user = _get_or_invalid(User, data['userId'], 'userId')
    if 'specialtyId' in data:
        record.specialty = _get_or_invalid(Specialty, data['specialtyId'], 'specialtyId')
    if 'activityId' in data:
        record.activity = _get_or_invalid(Activity, data['activityId'], 'activityId')
    if 'centerId' in data:
        record.center = _get_or_invalid(Center, data['centerId'], 'centerId')
    if 'consultationId' in data:
        record.consultation = _get_or_invalid(Consultation, data['consultationId'], 'consultationId')
    if 'recordDate' in data:
        record.record_date = data['recordDate']
    if 'shift' in data:
        record.shift = data['shift']
    if 'notes' in data:
        record.notes = clean_text(data['notes'])
    if 'specialtyId' in data or 'activityId' in data:
        check_activity_allowed(record.specialty, record.activity)
    record.save()
    broadcast_planning_refresh(min(old_date, record.record_date), max(old_date, record.record_date))
    return record


def delete_record(record: PlanningRecord) -> None:
    day = record.record_date
    record.delete()
    broadcast_planning_refresh(day, day)


def save_absence(absence: UserAbsence, data: dict) -> UserAbsence:
    if 'userId' in data:
        absence.user = _get_or_invalid(User, data['userId'], 'userId')
    if 'startDate' in data:
        absence.start_date = data['startDate']
    if 'endDate' in data:
        absence.end_date = data['endDate']
    if 'reason' in data:
        absence.reason = data['reason']
    if absence.start_date > absence.end_date:
        raise ValidationError({'endDate': 'La fecha de fin debe ser posterior a la de inicio.'})
    absence.save()
    broadcast_planning_refresh(absence.start_date, absence.end_date)
    return absence
