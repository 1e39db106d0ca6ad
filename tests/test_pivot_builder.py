"""
Tests for per-student attendance aggregation
"""

from datetime import date

import pytest

from attendance_recap.constants import AttendanceCategory
from attendance_recap.errors import ValidationError
from attendance_recap.services.pivot_builder import (
    StatusCounts, attendance_category, attendance_percentage, build_pivot,
    distinct_dates, status_code, summarize_pivot
)
from factories import record, roster_entry


def test_one_row_per_roster_entry_in_roster_order():
    """Rows follow the roster, including students without marks"""
    roster = [roster_entry('S2', 'Budi'), roster_entry('S1', 'Ani'), roster_entry('S3', 'Citra')]
    records = [record('S1', '2025-03-01', 'Present')]

    rows = build_pivot(roster, records)

    assert [r.student_id for r in rows] == ['S2', 'S1', 'S3']
    assert [r.student_name for r in rows] == ['Budi', 'Ani', 'Citra']


def test_duplicate_roster_entries_collapse_to_first():
    """A student listed twice gets one row, named from the first entry"""
    roster = [roster_entry('A', 'Ani'), roster_entry('B', 'Budi'), roster_entry('A', 'Ani Duplicate')]
    records = [record('A', '2025-03-01', 'Present'), record('A', '2025-03-02', 'Absent')]

    rows = build_pivot(roster, records)

    assert [r.student_id for r in rows] == ['A', 'B']
    assert rows[0].student_name == 'Ani'
    assert rows[0].total == 2


def test_two_students_scenario():
    """A: present + sick, B: absent"""
    roster = [roster_entry('A', 'Ani'), roster_entry('B', 'Budi')]
    records = [
        record('A', '2025-03-01', 'Present'),
        record('A', '2025-03-02', 'Sick'),
        record('B', '2025-03-01', 'Absent'),
    ]

    a, b = build_pivot(roster, records)

    assert a.counts == StatusCounts(present=1, sick=1)
    assert a.total == 2
    assert a.percentage == 50
    assert a.daily_status == {date(2025, 3, 1): 'H', date(2025, 3, 2): 'S'}

    assert b.counts == StatusCounts(absent=1)
    assert b.total == 1
    assert b.percentage == 0
    assert b.daily_status == {date(2025, 3, 1): 'A'}


def test_counts_sum_to_total():
    roster = [roster_entry('A', 'Ani')]
    statuses = ['Present', 'Present', 'Sick', 'Excused', 'Absent', 'Present']
    records = [record('A', f'2025-03-{day:02d}', status)
               for day, status in enumerate(statuses, start=1)]

    row = build_pivot(roster, records)[0]

    assert row.counts.present + row.counts.sick + row.counts.excused + row.counts.absent == row.total
    assert row.total == len(records)
    assert row.percentage == 50


def test_student_without_records_is_full_attendance():
    rows = build_pivot([roster_entry('A', 'Ani')], [], with_category=True)

    assert rows[0].total == 0
    assert rows[0].percentage == 100
    assert rows[0].category == AttendanceCategory.VERY_GOOD


def test_records_without_roster_entry_are_ignored():
    roster = [roster_entry('A', 'Ani')]
    records = [
        record('A', '2025-03-01', 'Present'),
        record('GHOST', '2025-03-01', 'Absent'),
    ]

    rows = build_pivot(roster, records)

    assert len(rows) == 1
    assert rows[0].total == 1


def test_category_only_when_requested():
    roster = [roster_entry('A', 'Ani')]
    records = [record('A', '2025-03-01', 'Present')]

    assert build_pivot(roster, records)[0].category is None
    assert build_pivot(roster, records, with_category=True)[0].category == 'Very Good'


def test_unknown_status_is_rejected():
    roster = [roster_entry('A', 'Ani')]
    records = [record('A', '2025-03-01', 'Late')]

    with pytest.raises(ValidationError) as exc:
        build_pivot(roster, records)

    assert 'Late' in exc.value.message
    assert exc.value.status_code == 422


def test_malformed_date_is_rejected():
    roster = [roster_entry('A', 'Ani')]
    records = [record('A', '2025-13-45', 'Present')]

    with pytest.raises(ValidationError):
        build_pivot(roster, records)


def test_invalid_orphan_record_is_still_rejected():
    """Validation covers every record, not only matched ones"""
    roster = [roster_entry('A', 'Ani')]
    records = [record('GHOST', 'yesterday', 'Present')]

    with pytest.raises(ValidationError):
        build_pivot(roster, records)


def test_status_codes():
    assert status_code('Present') == 'H'
    assert status_code('Sick') == 'S'
    assert status_code('Excused') == 'I'
    assert status_code('Absent') == 'A'

    with pytest.raises(ValidationError):
        status_code(None)


@pytest.mark.parametrize('present,total,expected', [
    (0, 0, 100),
    (1, 2, 50),
    (2, 3, 67),
    (1, 3, 33),
    (1, 8, 13),
    (5, 8, 63),
    (0, 4, 0),
])
def test_attendance_percentage_rounds_half_up(present, total, expected):
    assert attendance_percentage(present, total) == expected


@pytest.mark.parametrize('percentage,expected', [
    (100, 'Very Good'),
    (90, 'Very Good'),
    (89, 'Good'),
    (80, 'Good'),
    (79, 'Fair'),
    (70, 'Fair'),
    (69, 'Poor'),
    (0, 'Poor'),
])
def test_attendance_category_thresholds(percentage, expected):
    assert attendance_category(percentage) == expected


def test_distinct_dates_sorted():
    records = [
        record('A', '2025-03-05', 'Present'),
        record('B', '2025-03-01', 'Present'),
        record('A', '2025-03-01', 'Sick'),
    ]

    assert distinct_dates(records) == [date(2025, 3, 1), date(2025, 3, 5)]


def test_summarize_pivot():
    roster = [roster_entry('A', 'Ani'), roster_entry('B', 'Budi')]
    records = [
        record('A', '2025-03-01', 'Present'),
        record('A', '2025-03-02', 'Sick'),
        record('B', '2025-03-01', 'Absent'),
    ]
    rows = build_pivot(roster, records)

    summary = summarize_pivot(rows, distinct_dates(records))

    assert summary['total_students'] == 2
    assert summary['effective_days'] == 2
    assert summary['present'] == 1
    assert summary['sick'] == 1
    assert summary['absent'] == 1
    assert summary['total_records'] == 3
    assert summary['average_percentage'] == 25


def test_row_to_dict_uses_iso_dates():
    rows = build_pivot([roster_entry('A', 'Ani')], [record('A', '2025-03-01', 'Excused')])

    data = rows[0].to_dict()

    assert data['daily_status'] == {'2025-03-01': 'I'}
    assert data['excused'] == 1
    assert data['percentage'] == 0
    assert 'category' not in data
