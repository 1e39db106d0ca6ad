"""
Recap Service - Business logic for attendance recaps and their export
Runs fetch -> pivot -> layout -> spreadsheet and turns every failure into
one user-facing message.
"""

import logging
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Dict, List, Optional

import pandas as pd

from attendance_recap.constants import DATE_FORMAT
from attendance_recap.errors import (
    EmptyResultError, ExportInProgressError, RecapError, ValidationError
)
from attendance_recap.services.pivot_builder import (
    build_pivot, distinct_dates, summarize_pivot
)
from attendance_recap.services.record_fetcher import (
    DEFAULT_PAGE_SIZE, MonthPeriod, SemesterPeriod, fetch_records, fetch_roster
)
from attendance_recap.utils.excel_generator import ExcelGenerator
from attendance_recap.utils.recap_formatter import (
    RecapMeta, layout_monthly, layout_semester
)

logger = logging.getLogger(__name__)


class ExportGuard:
    """Busy flag per owner: one export at a time for each session"""

    def __init__(self):
        self._lock = threading.Lock()
        self._active = set()

    def is_busy(self, owner) -> bool:
        with self._lock:
            return owner in self._active

    @contextmanager
    def busy(self, owner):
        """
        Hold the busy flag for the duration of an export

        Raises:
            ExportInProgressError: If the owner already holds the flag
        """
        with self._lock:
            if owner in self._active:
                raise ExportInProgressError()
            self._active.add(owner)
        try:
            yield
        finally:
            with self._lock:
                self._active.discard(owner)


class Recap:
    """Fetched inputs and pivot of one class/period"""

    def __init__(self, class_id, period, roster, records, rows, dates, first_recorder=None):
        self.class_id = class_id
        self.period = period
        self.roster = roster
        self.records = records
        self.rows = rows
        self.dates = dates
        self.first_recorder = first_recorder

    def summary(self) -> Dict:
        return summarize_pivot(self.rows, self.dates)

    def to_dict(self):
        return {
            'class_id': self.class_id,
            'period': self.period.to_dict(),
            'dates': [d.strftime(DATE_FORMAT) for d in self.dates],
            'summary': self.summary(),
            'students': [row.to_dict() for row in self.rows],
            'generated_at': datetime.now().strftime('%Y-%m-%d %H:%M:%S')
        }


class ExportResult:
    """Outcome of an export: a document on success, a message otherwise"""

    def __init__(self, success, message, document=None, filename=None, status_code=200):
        self.success = success
        self.message = message
        self.document = document
        self.filename = filename
        self.status_code = status_code

    @classmethod
    def failure(cls, message, status_code=500):
        return cls(False, message, status_code=status_code)

    def __repr__(self):
        return f'<ExportResult success={self.success} message={self.message!r}>'

    def to_dict(self):
        return {
            'success': self.success,
            'message': self.message,
            'filename': self.filename
        }


class RecapService:
    """Service for building attendance recaps and exporting them to Excel"""

    def __init__(self, store, school_name, default_teacher_name='',
                 page_size=DEFAULT_PAGE_SIZE, guard=None, excel_generator=None):
        self.store = store
        self.school_name = school_name
        self.default_teacher_name = default_teacher_name or ''
        self.page_size = page_size
        max_rows = getattr(store, 'max_rows', None)
        if max_rows and page_size > max_rows:
            # Pages above the ceiling always come back short
            logger.warning(f"Page size {page_size} exceeds the store row ceiling {max_rows}, using {max_rows}")
            self.page_size = max_rows
        self.guard = guard or ExportGuard()
        self.excel_generator = excel_generator or ExcelGenerator()

    # ========== Recaps ==========

    def build_recap(self, class_id, period, recorded_by=None, with_category=False,
                    require_data=True) -> Recap:
        """
        Fetch roster and records for a period and pivot them

        Args:
            class_id: Class ID
            period: MonthPeriod or SemesterPeriod
            recorded_by: Only records entered by this staff member (optional)
            with_category: Derive qualitative categories
            require_data: Raise EmptyResultError for an empty roster or period

        Returns:
            Recap: Pivot rows with their inputs
        """
        roster = fetch_roster(self.store, class_id)
        if not roster and require_data:
            raise EmptyResultError('No students found for this class')

        fetched = fetch_records(self.store, class_id, period,
                                page_size=self.page_size, recorded_by=recorded_by)
        if fetched.empty and require_data:
            raise EmptyResultError('No attendance data for the selected period')

        rows = build_pivot(roster, fetched.records, with_category=with_category)
        dates = distinct_dates(fetched.records)
        return Recap(class_id, period, roster, fetched.records, rows, dates,
                     first_recorder=fetched.first_recorder)

    def monthly_recap(self, class_id, year, month, recorded_by=None) -> Recap:
        """Recap of one month; students without marks are zero-filled"""
        return self.build_recap(class_id, MonthPeriod(year, month),
                                recorded_by=recorded_by, require_data=False)

    def semester_recap(self, class_id, academic_year, semester) -> Recap:
        """Recap of one semester with qualitative categories"""
        return self.build_recap(class_id, SemesterPeriod(academic_year, semester),
                                with_category=True, require_data=False)

    # ========== Excel Export ==========

    def export_monthly(self, class_id, year, month, teacher_name=None,
                       owner=None, recorded_by=None) -> ExportResult:
        """Monthly Excel recap of a class"""
        return self._export(class_id, lambda: MonthPeriod(year, month), layout_monthly,
                            teacher_name, owner, recorded_by=recorded_by)

    def export_semester(self, class_id, academic_year, semester, teacher_name=None,
                        owner=None) -> ExportResult:
        """Semester Excel recap of a class"""
        return self._export(class_id, lambda: SemesterPeriod(academic_year, semester),
                            layout_semester, teacher_name, owner, with_category=True)

    def _export(self, class_id, make_period, formatter, teacher_name, owner,
                recorded_by=None, with_category=False) -> ExportResult:
        """
        Run fetch, pivot, layout and emit under the owner's busy flag

        Every failure is logged and returned as an unsuccessful ExportResult.
        """
        owner = owner or f'class:{class_id}'
        started = datetime.now()

        try:
            with self.guard.busy(owner):
                try:
                    period = make_period()
                except ValueError as e:
                    raise ValidationError(str(e))

                recap = self.build_recap(class_id, period, recorded_by=recorded_by,
                                         with_category=with_category)
                meta = RecapMeta(
                    school_name=self.school_name,
                    class_id=class_id,
                    period=period,
                    teacher_name=self._resolve_teacher(teacher_name, recap.first_recorder),
                    dates=recap.dates
                )
                layout = formatter(recap.rows, meta)
                document = self.excel_generator.emit(layout)

        except EmptyResultError as e:
            logger.info(f"Nothing to export for class {class_id}: {e.message}")
            return ExportResult.failure(e.message, e.status_code)
        except ExportInProgressError as e:
            logger.warning(f"Export refused for {owner}: already in progress")
            return ExportResult.failure(e.message, e.status_code)
        except RecapError as e:
            logger.error(f"Export failed for class {class_id}: {e.message}", exc_info=True)
            return ExportResult.failure(f'Error: {e.message}', e.status_code)
        except Exception as e:
            logger.error(f"Unexpected export failure for class {class_id}: {str(e)}", exc_info=True)
            return ExportResult.failure(f'Error: {str(e)}', 500)

        elapsed = (datetime.now() - started).total_seconds()
        logger.info(f"Exported {layout.filename} ({len(recap.rows)} students, "
                    f"{len(recap.records)} records) in {elapsed:.3f}s")

        return ExportResult(
            True,
            'Excel file generated successfully',
            document=document,
            filename=layout.filename
        )

    def _resolve_teacher(self, teacher_name, first_recorder):
        """Explicit name, else whoever entered the first fetched record, else the default"""
        if teacher_name:
            return teacher_name
        if first_recorder:
            return first_recorder
        return self.default_teacher_name

    # ========== Tabular Export ==========

    @staticmethod
    def recap_dataframe(recap: Recap) -> pd.DataFrame:
        """
        Convert a recap to a pandas DataFrame, one row per student

        Date columns are named by ISO date and hold status codes.
        """
        columns = ['student_id', 'student_name']
        columns += [d.strftime(DATE_FORMAT) for d in recap.dates]
        columns += ['present', 'sick', 'excused', 'absent', 'total', 'percentage']
        with_category = any(row.category is not None for row in recap.rows)
        if with_category:
            columns.append('category')

        records: List[Dict] = []
        for row in recap.rows:
            record = {
                'student_id': row.student_id,
                'student_name': row.student_name,
                **{d.strftime(DATE_FORMAT): row.daily_status.get(d, '') for d in recap.dates},
                **row.counts.to_dict(),
                'total': row.total,
                'percentage': row.percentage
            }
            if with_category:
                record['category'] = row.category
            records.append(record)

        return pd.DataFrame(records, columns=columns)
