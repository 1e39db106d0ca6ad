"""
Record Fetcher - Paginated attendance and roster reads
Resolves month/semester selectors to date ranges and collects every page
of a class's attendance records.
"""

import calendar
import logging
from datetime import date
from typing import Callable, Dict, Iterator, List, Optional

from attendance_recap.constants import (
    DATE_FORMAT, MONTH_NAMES, Semester, Table
)
from attendance_recap.errors import FetchError

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 1000


class MonthPeriod:
    """A calendar month, e.g. March 2025"""

    kind = 'month'

    def __init__(self, year, month):
        self.year = int(year)
        self.month = int(month)
        if not 1 <= self.year <= 9999:
            raise ValueError(f'Invalid year: {year}')
        if not 1 <= self.month <= 12:
            raise ValueError(f'Invalid month: {month}')

    def __repr__(self):
        return f'<MonthPeriod {self.year}-{self.month:02d}>'

    @property
    def start_date(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def end_date(self) -> date:
        last_day = calendar.monthrange(self.year, self.month)[1]
        return date(self.year, self.month, last_day)

    @property
    def months(self) -> List[int]:
        return [self.month]

    @property
    def month_name(self) -> str:
        return MONTH_NAMES[self.month]

    def to_dict(self):
        return {
            'type': self.kind,
            'year': self.year,
            'month': self.month,
            'month_name': self.month_name,
            'start_date': self.start_date.strftime(DATE_FORMAT),
            'end_date': self.end_date.strftime(DATE_FORMAT)
        }


class SemesterPeriod:
    """
    One half of an academic year

    Semester 1 (Odd) covers July-December of the starting year,
    semester 2 (Even) covers January-June of the following year.
    """

    kind = 'semester'

    def __init__(self, academic_year, semester):
        self.semester = int(semester)
        if self.semester not in Semester.ALL:
            raise ValueError(f'Invalid semester: {semester}')
        self.academic_year = str(academic_year).strip()
        self.first_year, self.second_year = self._parse_label(self.academic_year)

    @classmethod
    def from_year(cls, year, semester):
        """Derive the academic year label from a calendar year"""
        year = int(year)
        semester = int(semester)
        if semester == Semester.ODD:
            label = f'{year}/{year + 1}'
        else:
            label = f'{year - 1}/{year}'
        return cls(label, semester)

    @staticmethod
    def _parse_label(label):
        parts = label.split('/')
        if len(parts) != 2 or not all(p.isdigit() and len(p) == 4 for p in parts):
            raise ValueError(f'Invalid academic year: {label!r} (expected YYYY/YYYY)')
        first, second = int(parts[0]), int(parts[1])
        if second != first + 1:
            raise ValueError(f'Invalid academic year: {label!r} (years must be consecutive)')
        return first, second

    def __repr__(self):
        return f'<SemesterPeriod {self.academic_year} S{self.semester}>'

    @property
    def year(self) -> int:
        """Calendar year the semester falls in"""
        return self.first_year if self.semester == Semester.ODD else self.second_year

    @property
    def months(self) -> List[int]:
        return Semester.MONTHS[self.semester]

    @property
    def start_date(self) -> date:
        return date(self.year, self.months[0], 1)

    @property
    def end_date(self) -> date:
        last_month = self.months[-1]
        return date(self.year, last_month, calendar.monthrange(self.year, last_month)[1])

    @property
    def label(self) -> str:
        return Semester.LABELS[self.semester]

    @property
    def month_range(self) -> str:
        return Semester.MONTH_RANGES[self.semester]

    def to_dict(self):
        return {
            'type': self.kind,
            'academic_year': self.academic_year,
            'semester': self.semester,
            'label': self.label,
            'month_range': self.month_range,
            'year': self.year,
            'start_date': self.start_date.strftime(DATE_FORMAT),
            'end_date': self.end_date.strftime(DATE_FORMAT)
        }


class FetchResult:
    """All records of a class for one period; `empty` when nothing matched"""

    def __init__(self, records: List[Dict], period, pages: int = 0,
                 first_recorder: Optional[str] = None):
        self.records = records
        self.period = period
        self.pages = pages
        self.first_recorder = first_recorder

    def __len__(self):
        return len(self.records)

    @property
    def empty(self) -> bool:
        return not self.records


def iter_pages(query_factory: Callable, page_size: int = DEFAULT_PAGE_SIZE) -> Iterator[List[Dict]]:
    """
    Yield successive pages of a range-bounded query

    Args:
        query_factory: Callable returning a fresh, unbounded TableQuery
        page_size: Rows requested per page

    Yields:
        list: Rows of each non-empty page

    Raises:
        FetchError: If the store reports an error for any page

    Stops after a page shorter than page_size. Calling again restarts
    from the first page.
    """
    if page_size <= 0:
        raise ValueError('page_size must be positive')

    page = 0
    while True:
        start = page * page_size
        result = query_factory().range(start, start + page_size - 1).execute()

        if result.error:
            logger.error(f"Query error on page {page + 1}: {result.error}")
            raise FetchError(str(result.error))

        rows = result.data or []
        if rows:
            yield rows

        if len(rows) < page_size:
            return
        page += 1


def fetch_records(store, class_id, period, page_size: int = DEFAULT_PAGE_SIZE,
                  recorded_by: Optional[str] = None) -> FetchResult:
    """
    Fetch every attendance record of a class for a month or semester

    Args:
        store: AttendanceStore
        class_id: Class identifier
        period: MonthPeriod or SemesterPeriod
        page_size: Rows per page request
        recorded_by: Only records entered by this staff member (optional)

    Returns:
        FetchResult: Records ordered by date ascending
    """
    start = period.start_date.strftime(DATE_FORMAT)
    end = period.end_date.strftime(DATE_FORMAT)

    def build_query():
        query = store.table(Table.ATTENDANCE).select('*').eq('class_id', class_id)
        if isinstance(period, SemesterPeriod):
            query = query.eq('academic_year', period.academic_year)
        query = query.gte('date', start).lte('date', end)
        if recorded_by:
            query = query.eq('recorded_by', recorded_by)
        return query.order('date', ascending=True)

    records = []
    pages = 0
    for rows in iter_pages(build_query, page_size):
        pages += 1
        records.extend(rows)
        logger.debug(f"Page {pages}: {len(rows)} records (total so far: {len(records)})")

    # Taken before the month filter, from the first row the store returned
    first_recorder = records[0].get('recorded_by') if records else None

    if isinstance(period, SemesterPeriod):
        # Unreadable dates are kept so the pivot rejects them
        records = [
            r for r in records
            if _record_month(r) is None or _record_month(r) in period.months
        ]

    logger.info(f"Fetched {len(records)} attendance records for class {class_id} {period!r} in {pages} page(s)")
    return FetchResult(records, period, pages=pages, first_recorder=first_recorder)


def fetch_roster(store, class_id) -> List[Dict]:
    """
    Fetch the active roster of a class ordered by name

    Raises:
        FetchError: If the store reports an error
    """
    result = store.table(Table.STUDENTS).select('*') \
        .eq('class_id', class_id) \
        .eq('is_active', True) \
        .order('full_name', ascending=True) \
        .execute()

    if result.error:
        logger.error(f"Roster query error for class {class_id}: {result.error}")
        raise FetchError(str(result.error))

    return result.data or []


def _record_month(record):
    """Month number of a record's ISO date, or None when unreadable"""
    value = record.get('date')
    if isinstance(value, date):
        return value.month
    try:
        return int(str(value).split('-')[1])
    except (IndexError, ValueError):
        return None
