"""
Planning grid aggregation.

Turns the flat planning records and absence intervals fetched for one
date range into the matrix rendered by the planning screen::

    grid[shift][specialty_code][day_index] -> [AnnotatedRecord, ...]

Everything here works on immutable snapshots of the ORM rows and never
touches the database, so a render pass can fetch once and aggregate
synchronously.  Records keep the order they arrived in; codes keep the
order they were first seen in.
"""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .date_range import as_date

SHIFT_MORNING = 'morning'
SHIFT_AFTERNOON = 'afternoon'
SHIFTS = (SHIFT_MORNING, SHIFT_AFTERNOON)

# Row for records whose specialty has no code.
OTHER_CODE = 'OTHER'


@dataclass(frozen=True)
class SpecialtyRef:
    id: Optional[int]
    code: str
    name: str = ''

    def to_dict(self) -> dict:
        return {'id': self.id, 'code': self.code, 'name': self.name}


@dataclass(frozen=True)
class AssignmentRecord:
    id: Optional[int]
    user_id: int
    record_date: date
    shift: str
    specialty_code: Optional[str] = None
    specialty_id: Optional[int] = None
    activity_id: Optional[int] = None
    center_id: Optional[int] = None
    consultation_id: Optional[int] = None
    user_name: str = ''
    activity_name: str = ''
    consultation_number: str = ''
    consultation_extension: str = ''
    notes: str = ''

    @classmethod
    def from_model(cls, record) -> 'AssignmentRecord':
        """Snapshot a :class:`core.models.PlanningRecord`.

        Expects ``user``, ``specialty``, ``activity`` and ``consultation``
        to be preloaded with ``select_related``.
        """
        specialty = record.specialty
        consultation = record.consultation
        return cls(
            id=record.id,
            user_id=record.user_id,
            record_date=as_date(record.record_date),
            shift=record.shift,
            specialty_code=specialty.code if specialty is not None else None,
            specialty_id=record.specialty_id,
            activity_id=record.activity_id,
            center_id=record.center_id,
            consultation_id=record.consultation_id,
            user_name=record.user.display_name if record.user_id else '',
            activity_name=record.activity.name if record.activity_id else '',
            consultation_number=consultation.consultation_number if consultation is not None else '',
            consultation_extension=consultation.extension if consultation is not None else '',
            notes=record.notes or '',
        )


@dataclass(frozen=True)
class AbsenceInterval:
    user_id: int
    start_date: date
    end_date: date
    reason: str = ''

    @classmethod
    def from_model(cls, absence) -> 'AbsenceInterval':
        return cls(
            user_id=absence.user_id,
            start_date=as_date(absence.start_date),
            end_date=as_date(absence.end_date),
            reason=absence.reason or '',
        )

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


@dataclass(frozen=True)
class AnnotatedRecord:
    record: AssignmentRecord
    is_absent: bool

    def to_dict(self) -> dict:
        r = self.record
        return {
            'id': r.id,
            'userId': r.user_id,
            'userName': r.user_name,
            'recordDate': r.record_date.isoformat(),
            'shift': r.shift,
            'specialtyId': r.specialty_id,
            'specialtyCode': specialty_code_of(r),
            'activityId': r.activity_id,
            'activityName': r.activity_name,
            'centerId': r.center_id,
            'consultationId': r.consultation_id,
            'consultationNumber': r.consultation_number,
            'extension': r.consultation_extension,
            'notes': r.notes,
            'isAbsent': self.is_absent,
        }


Cells = List[List[AnnotatedRecord]]


@dataclass
class Grid:
    days: List[date]
    shifts: Tuple[str, ...]
    sections: Dict[str, Dict[str, Cells]] = field(default_factory=dict)
    specialties: Dict[str, SpecialtyRef] = field(default_factory=dict)

    def __getitem__(self, shift: str) -> Dict[str, Cells]:
        return self.sections[shift]

    def codes(self, shift: str) -> List[str]:
        return list(self.sections[shift])

    def annotated(self) -> Iterable[AnnotatedRecord]:
        for rows in self.sections.values():
            for cells in rows.values():
                for cell in cells:
                    yield from cell

    def absent_count(self) -> int:
        return sum(1 for item in self.annotated() if item.is_absent)

    def to_dict(self) -> dict:
        return {
            'days': [d.isoformat() for d in self.days],
            'sections': [
                {
                    'shift': shift,
                    'rows': [
                        {
                            'code': code,
                            'specialty': self.specialties[code].to_dict() if code in self.specialties else None,
                            'cells': [[item.to_dict() for item in cell] for cell in cells],
                        }
                        for code, cells in self.sections[shift].items()
                    ],
                }
                for shift in self.shifts
            ],
        }


def specialty_code_of(record: AssignmentRecord) -> str:
    code = record.specialty_code
    if code is None or not code.strip():
        return OTHER_CODE
    return code


def index_absences(absences: Iterable[AbsenceInterval]) -> Dict[int, List[AbsenceInterval]]:
    by_user: Dict[int, List[AbsenceInterval]] = defaultdict(list)
    for absence in absences:
        by_user[absence.user_id].append(absence)
    return by_user


def is_absent(user_id: int, day, absences_by_user: Dict[int, List[AbsenceInterval]]) -> bool:
    """Closed-interval test on plain calendar dates."""
    day = as_date(day)
    return any(a.covers(day) for a in absences_by_user.get(user_id, ()))


def group_records(records: Iterable[AssignmentRecord]) -> List[Tuple[str, List[AssignmentRecord]]]:
    """Partition one cell's records by specialty code, first-seen order."""
    groups: Dict[str, List[AssignmentRecord]] = {}
    for record in records:
        groups.setdefault(specialty_code_of(record), []).append(record)
    return list(groups.items())


def build_grid(
    records: Sequence[AssignmentRecord],
    absences: Sequence[AbsenceInterval],
    days: Sequence,
    specialties: Sequence[SpecialtyRef],
    shifts: Sequence[str] = SHIFTS,
    show_absences: bool = True,
) -> Grid:
    """Aggregate one render pass.

    Row order inside every shift section is the order of ``specialties``
    followed by any other code first seen in ``records`` (for instance
    :data:`OTHER_CODE`).  Every row has one cell per day, possibly empty.

    ``is_absent`` is computed for every record.  With ``show_absences``
    off, absent records are dropped from their cell instead of being
    returned tagged.
    """
    days = [as_date(d) for d in days]
    shifts = tuple(shifts)
    day_index = {d: i for i, d in enumerate(days)}
    absences_by_user = index_absences(absences)

    buckets: Dict[Tuple[date, str], List[AssignmentRecord]] = defaultdict(list)
    for record in records:
        buckets[(as_date(record.record_date), record.shift)].append(record)

    grid = Grid(days=days, shifts=shifts)
    for ref in specialties:
        grid.specialties.setdefault(ref.code, ref)

    for shift in shifts:
        rows: Dict[str, Cells] = {}
        for ref in specialties:
            if ref.code not in rows:
                rows[ref.code] = [[] for _ in days]
        grid.sections[shift] = rows

    # walk cells in (day, shift) order so extra codes are appended in the
    # order they first show up on screen
    for day in days:
        for shift in shifts:
            cell_records = buckets.get((day, shift))
            if not cell_records:
                continue
            rows = grid.sections[shift]
            for code, grouped in group_records(cell_records):
                if code not in rows:
                    rows[code] = [[] for _ in days]
                cell = rows[code][day_index[day]]
                for record in grouped:
                    absent = is_absent(record.user_id, day, absences_by_user)
                    if absent and not show_absences:
                        continue
                    cell.append(AnnotatedRecord(record=record, is_absent=absent))
    return grid
