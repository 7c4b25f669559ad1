"""
Grid aggregation tests.

These work on plain snapshot values and never touch the database.
"""
from copy import deepcopy
from datetime import date

from core.services.date_range import VIEW_WEEKLY, resolve_range
from core.services.grid import (
    OTHER_CODE,
    SHIFT_AFTERNOON,
    SHIFT_MORNING,
    AbsenceInterval,
    AssignmentRecord,
    SpecialtyRef,
    build_grid,
    group_records,
    is_absent,
    index_absences,
)

ENF = SpecialtyRef(id=1, code='ENF', name='Enfermería')
MED = SpecialtyRef(id=2, code='MED', name='Medicina')


def rec(pk, user_id, day, shift=SHIFT_MORNING, code='ENF'):
    return AssignmentRecord(id=pk, user_id=user_id, record_date=day, shift=shift, specialty_code=code)


def week_of(day):
    return resolve_range(VIEW_WEEKLY, day).days


def test_end_to_end_week_with_one_absence():
    days = week_of(date(2024, 3, 6))  # 2024-03-04 .. 2024-03-10
    records = [
        rec(1, 10, date(2024, 3, 4), SHIFT_MORNING, 'ENF'),
        rec(2, 10, date(2024, 3, 5), SHIFT_AFTERNOON, 'ENF'),
        rec(3, 20, date(2024, 3, 7), SHIFT_MORNING, 'MED'),
    ]
    absences = [AbsenceInterval(user_id=10, start_date=date(2024, 3, 4), end_date=date(2024, 3, 5))]

    grid = build_grid(records, absences, days, [ENF, MED])

    assert list(grid.sections) == [SHIFT_MORNING, SHIFT_AFTERNOON]
    assert grid.codes(SHIFT_MORNING) == ['ENF', 'MED']
    assert grid.codes(SHIFT_AFTERNOON) == ['ENF', 'MED']
    for shift in grid.shifts:
        for cells in grid[shift].values():
            assert len(cells) == 7

    non_empty = {
        (shift, code, grid.days[i])
        for shift in grid.shifts
        for code, cells in grid[shift].items()
        for i, cell in enumerate(cells) if cell
    }
    assert non_empty == {
        (SHIFT_MORNING, 'ENF', date(2024, 3, 4)),
        (SHIFT_AFTERNOON, 'ENF', date(2024, 3, 5)),
        (SHIFT_MORNING, 'MED', date(2024, 3, 7)),
    }
    assert grid.absent_count() == 2
    assert [a.record.id for a in grid.annotated() if a.is_absent] == [1, 2]


def test_absence_interval_is_closed_on_both_ends():
    absences = index_absences([AbsenceInterval(user_id=1, start_date=date(2024, 3, 1), end_date=date(2024, 3, 5))])
    assert is_absent(1, date(2024, 3, 1), absences)
    assert is_absent(1, date(2024, 3, 5), absences)
    assert not is_absent(1, date(2024, 3, 6), absences)
    assert not is_absent(1, date(2024, 2, 29), absences)
    assert not is_absent(2, date(2024, 3, 3), absences)


def test_absence_boundary_in_grid():
    days = [date(2024, 3, 5), date(2024, 3, 6)]
    records = [rec(1, 1, date(2024, 3, 5)), rec(2, 1, date(2024, 3, 6))]
    absences = [AbsenceInterval(user_id=1, start_date=date(2024, 3, 1), end_date=date(2024, 3, 5))]
    grid = build_grid(records, absences, days, [ENF])
    first, second = grid[SHIFT_MORNING]['ENF']
    assert [a.is_absent for a in first] == [True]
    assert [a.is_absent for a in second] == [False]


def test_hiding_absences_drops_absent_records():
    days = [date(2024, 3, 5)]
    records = [rec(1, 1, date(2024, 3, 5)), rec(2, 2, date(2024, 3, 5))]
    absences = [AbsenceInterval(user_id=1, start_date=date(2024, 3, 5), end_date=date(2024, 3, 5))]

    shown = build_grid(records, absences, days, [ENF], show_absences=True)
    assert [(a.record.id, a.is_absent) for a in shown[SHIFT_MORNING]['ENF'][0]] == [(1, True), (2, False)]

    hidden = build_grid(records, absences, days, [ENF], show_absences=False)
    assert [(a.record.id, a.is_absent) for a in hidden[SHIFT_MORNING]['ENF'][0]] == [(2, False)]
    assert hidden.absent_count() == 0


def test_missing_specialty_code_goes_to_other_row():
    days = [date(2024, 3, 5), date(2024, 3, 6)]
    records = [
        rec(1, 1, date(2024, 3, 6), code=None),
        rec(2, 2, date(2024, 3, 5), code='  '),
        rec(3, 3, date(2024, 3, 5), code='ENF'),
    ]
    grid = build_grid(records, [], days, [ENF, MED])
    assert grid.codes(SHIFT_MORNING) == ['ENF', 'MED', OTHER_CODE]
    # OTHER exists in every shift section only where records showed up
    assert grid.codes(SHIFT_AFTERNOON) == ['ENF', 'MED']
    other = grid[SHIFT_MORNING][OTHER_CODE]
    assert [a.record.id for a in other[0]] == [2]
    assert [a.record.id for a in other[1]] == [1]


def test_group_records_keeps_first_seen_order():
    records = [rec(1, 1, date(2024, 1, 1), code='MED'), rec(2, 1, date(2024, 1, 1), code='ENF'),
               rec(3, 1, date(2024, 1, 1), code='MED')]
    groups = group_records(records)
    assert [code for code, _ in groups] == ['MED', 'ENF']
    assert [r.id for r in groups[0][1]] == [1, 3]


def test_records_keep_arrival_order_inside_a_cell():
    day = date(2024, 3, 5)
    records = [rec(9, 1, day), rec(3, 2, day), rec(5, 3, day)]
    grid = build_grid(records, [], [day], [ENF])
    assert [a.record.id for a in grid[SHIFT_MORNING]['ENF'][0]] == [9, 3, 5]


def test_empty_rows_are_kept():
    grid = build_grid([], [], week_of(date(2024, 3, 6)), [ENF, MED])
    assert grid.codes(SHIFT_MORNING) == ['ENF', 'MED']
    assert all(cell == [] for cells in grid[SHIFT_MORNING].values() for cell in cells)


def test_build_grid_is_idempotent_and_does_not_mutate_inputs():
    days = week_of(date(2024, 3, 6))
    records = [rec(1, 1, date(2024, 3, 4)), rec(2, 2, date(2024, 3, 8), SHIFT_AFTERNOON, 'MED')]
    absences = [AbsenceInterval(user_id=2, start_date=date(2024, 3, 8), end_date=date(2024, 3, 9))]
    before = deepcopy((records, absences, days))

    first = build_grid(records, absences, days, [ENF, MED]).to_dict()
    second = build_grid(records, absences, days, [ENF, MED]).to_dict()

    assert first == second
    assert (records, absences, days) == before


def test_to_dict_shape():
    day = date(2024, 3, 5)
    grid = build_grid([rec(1, 7, day)], [], [day], [ENF])
    data = grid.to_dict()
    assert data['days'] == ['2024-03-05']
    morning = data['sections'][0]
    assert morning['shift'] == SHIFT_MORNING
    row = morning['rows'][0]
    assert row['code'] == 'ENF'
    assert row['specialty'] == {'id': 1, 'code': 'ENF', 'name': 'Enfermería'}
    item = row['cells'][0][0]
    assert item['id'] == 1 and item['userId'] == 7 and item['isAbsent'] is False
    assert item['recordDate'] == '2024-03-05'
