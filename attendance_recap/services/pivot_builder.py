"""
Pivot Builder - Per-student aggregation of daily attendance records
Turns flat (student, date, status) rows into daily-status maps, counts
and attendance percentages. Pure functions, no I/O.
"""

import logging
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional

from attendance_recap.constants import (
    AttendanceCategory, AttendanceStatus, DATE_FORMAT
)
from attendance_recap.errors import ValidationError

logger = logging.getLogger(__name__)


class StatusCounts:
    """Number of records per status category"""

    def __init__(self, present=0, sick=0, excused=0, absent=0):
        self.present = present
        self.sick = sick
        self.excused = excused
        self.absent = absent

    _FIELDS = {
        AttendanceStatus.PRESENT: 'present',
        AttendanceStatus.SICK: 'sick',
        AttendanceStatus.EXCUSED: 'excused',
        AttendanceStatus.ABSENT: 'absent'
    }

    def increment(self, status):
        field = self._FIELDS[status]
        setattr(self, field, getattr(self, field) + 1)

    @property
    def total(self) -> int:
        return self.present + self.sick + self.excused + self.absent

    def __eq__(self, other):
        if not isinstance(other, StatusCounts):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return (f'<StatusCounts H={self.present} S={self.sick} '
                f'I={self.excused} A={self.absent}>')

    def to_dict(self):
        return {
            'present': self.present,
            'sick': self.sick,
            'excused': self.excused,
            'absent': self.absent
        }


class PivotRow:
    """Aggregated attendance of one roster student"""

    def __init__(self, student_id, student_name):
        self.student_id = student_id
        self.student_name = student_name
        self.daily_status = {}
        self.counts = StatusCounts()
        self.percentage = 100
        self.category = None

    def __repr__(self):
        return f'<PivotRow {self.student_id} total={self.total} pct={self.percentage}>'

    @property
    def total(self) -> int:
        return self.counts.total

    def to_dict(self):
        data = {
            'student_id': self.student_id,
            'student_name': self.student_name,
            'daily_status': {
                d.strftime(DATE_FORMAT): code
                for d, code in sorted(self.daily_status.items())
            },
            **self.counts.to_dict(),
            'total': self.total,
            'percentage': self.percentage
        }
        if self.category is not None:
            data['category'] = self.category
        return data


def status_code(status) -> str:
    """
    Map a status to its grid code (Present H, Sick S, Excused I, Absent A)

    Raises:
        ValidationError: For any value outside the closed status set
    """
    try:
        return AttendanceStatus.CODES[status]
    except (KeyError, TypeError):
        raise ValidationError(
            f'Unknown attendance status: {status!r}',
            details={'allowed': AttendanceStatus.ALL}
        )


def parse_record_date(value) -> date:
    """Parse an ISO YYYY-MM-DD date, raising ValidationError when malformed"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value), DATE_FORMAT).date()
    except (TypeError, ValueError):
        raise ValidationError(f'Malformed attendance date: {value!r}')


def attendance_percentage(present, total) -> int:
    """Rounded share of Present marks; 100 when nothing was recorded"""
    if total <= 0:
        return 100
    # Half-up, not banker's rounding
    return int(present * 100 / total + 0.5)


def attendance_category(percentage) -> str:
    """Qualitative tier of a percentage, lower bounds inclusive"""
    for lower_bound, label in AttendanceCategory.THRESHOLDS:
        if percentage >= lower_bound:
            return label
    return AttendanceCategory.POOR


def build_pivot(roster: Iterable[Dict], records: Iterable[Dict],
                with_category: bool = False) -> List[PivotRow]:
    """
    Build one PivotRow per roster entry, in roster order

    Args:
        roster: Roster entries with student_id and full_name
        records: Attendance records with student_id, date and status
        with_category: Also derive the qualitative category (semester recaps)

    Returns:
        list: PivotRow objects

    Raises:
        ValidationError: On a malformed date or unknown status; nothing
        partial is returned
    """
    rows = {}
    for entry in roster:
        student_id = entry['student_id']
        if student_id not in rows:
            rows[student_id] = PivotRow(student_id, entry.get('full_name') or entry.get('student_name'))

    orphaned = 0
    for record in records:
        record_date = parse_record_date(record.get('date'))
        code = status_code(record.get('status'))

        row = rows.get(record.get('student_id'))
        if row is None:
            orphaned += 1
            continue

        row.daily_status[record_date] = code
        row.counts.increment(record['status'])

    if orphaned:
        logger.debug(f"Ignored {orphaned} records without a roster entry")

    for row in rows.values():
        row.percentage = attendance_percentage(row.counts.present, row.total)
        if with_category:
            row.category = attendance_category(row.percentage)

    return list(rows.values())


def distinct_dates(records: Iterable[Dict]) -> List[date]:
    """Sorted distinct dates present in a record set"""
    return sorted({parse_record_date(record.get('date')) for record in records})


def summarize_pivot(rows: List[PivotRow], dates: Optional[List[date]] = None) -> Dict:
    """
    Class-level totals for a pivot

    Returns:
        dict: student count, effective days, status totals, average percentage
    """
    totals = StatusCounts()
    for row in rows:
        totals.present += row.counts.present
        totals.sick += row.counts.sick
        totals.excused += row.counts.excused
        totals.absent += row.counts.absent

    average = round(sum(r.percentage for r in rows) / len(rows), 2) if rows else 0

    return {
        'total_students': len(rows),
        'effective_days': len(dates) if dates is not None else None,
        **totals.to_dict(),
        'total_records': totals.total,
        'average_percentage': average
    }
