"""
Tests for the recap service: recaps, Excel export and the busy flag
"""

import io

import openpyxl
import pytest

from attendance_recap.errors import ExportInProgressError, SerializationError
from attendance_recap.services.recap_service import ExportGuard, RecapService
from factories import InMemoryStore, record, roster_entry


def _store(records=None, students=None, **kwargs):
    students = students if students is not None else [
        roster_entry('A', 'Ani'),
        roster_entry('B', 'Budi'),
    ]
    records = records if records is not None else [
        record('A', '2025-03-01', 'Present'),
        record('A', '2025-03-02', 'Sick'),
        record('B', '2025-03-01', 'Absent'),
    ]
    return InMemoryStore({'students': students, 'attendance': records}, **kwargs)


def _service(store, **kwargs):
    return RecapService(store, school_name='SD NEGERI TEST', **kwargs)


class CrashingGenerator:
    def emit(self, layout, output_path=None):
        raise RuntimeError('worksheet exploded')


class UndatedStore(InMemoryStore):
    """Backend that ignores date bounds and returns every row of the class"""

    def execute(self, query):
        query.filters = [f for f in query.filters if f[1] != 'date']
        return super().execute(query)


class BrokenGenerator:
    def emit(self, layout, output_path=None):
        raise SerializationError('disk full')


# ========== Recaps ==========

def test_monthly_recap():
    recap = _service(_store()).monthly_recap('3', 2025, 3)

    data = recap.to_dict()
    assert [s['student_id'] for s in data['students']] == ['A', 'B']
    assert data['dates'] == ['2025-03-01', '2025-03-02']
    assert data['summary']['total_records'] == 3
    assert data['period']['month_name'] == 'March'


def test_monthly_recap_without_records_is_zero_filled():
    recap = _service(_store(records=[])).monthly_recap('3', 2025, 3)

    assert [row.percentage for row in recap.rows] == [100, 100]
    assert recap.dates == []


def test_semester_recap_has_categories():
    records = [record('A', '2024-08-01', 'Present'), record('B', '2024-08-01', 'Absent')]

    recap = _service(_store(records=records)).semester_recap('3', '2024/2025', 1)

    assert [row.category for row in recap.rows] == ['Very Good', 'Poor']


def test_recap_dataframe():
    recap = _service(_store()).monthly_recap('3', 2025, 3)

    frame = RecapService.recap_dataframe(recap)

    assert list(frame.columns) == ['student_id', 'student_name', '2025-03-01', '2025-03-02',
                                   'present', 'sick', 'excused', 'absent', 'total', 'percentage']
    assert frame.loc[0, '2025-03-02'] == 'S'
    assert frame.loc[1, '2025-03-02'] == ''
    assert frame.loc[1, 'absent'] == 1


def test_semester_dataframe_has_category_column():
    records = [record('A', '2024-08-01', 'Present')]
    recap = _service(_store(records=records)).semester_recap('3', '2024/2025', 1)

    frame = RecapService.recap_dataframe(recap)

    assert list(frame.columns)[-1] == 'category'
    assert frame.loc[0, 'category'] == 'Very Good'


# ========== Export ==========

def test_export_monthly_success():
    result = _service(_store()).export_monthly('3', 2025, 3, teacher_name='Pak Budi')

    assert result.success
    assert result.message == 'Excel file generated successfully'
    assert result.filename == 'Recap_Attendance_Class_3_March_2025.xlsx'
    ws = openpyxl.load_workbook(io.BytesIO(result.document)).active
    assert ws['H14'].value == 'Pak Budi'


def test_export_teacher_falls_back_to_first_recorder():
    result = _service(_store()).export_monthly('3', 2025, 3)

    ws = openpyxl.load_workbook(io.BytesIO(result.document)).active
    assert ws['H14'].value == 'Ibu Sari'


def test_export_teacher_falls_back_to_default():
    records = [record('A', '2025-03-01', 'Present', recorded_by=None)]

    result = _service(_store(records=records), default_teacher_name='Wali Kelas').export_monthly('3', 2025, 3)

    ws = openpyxl.load_workbook(io.BytesIO(result.document)).active
    # One date column: the footer sits in column G
    assert ws['G14'].value == 'Wali Kelas'


def test_export_semester_success():
    records = [record('A', '2024-08-01', 'Present'), record('B', '2024-09-02', 'Sick')]

    result = _service(_store(records=records)).export_semester('3', '2024/2025', 1)

    assert result.success
    assert result.filename == 'Recap_Attendance_Semester_1_Class_3_2024.xlsx'
    ws = openpyxl.load_workbook(io.BytesIO(result.document)).active
    assert ws['J6'].value == 'Very Good'
    assert ws['J6'].fill.fgColor.rgb == 'FFC6EFCE'


def test_export_empty_roster():
    result = _service(_store(students=[])).export_monthly('3', 2025, 3)

    assert not result.success
    assert result.message == 'No students found for this class'
    assert result.status_code == 404
    assert result.document is None


def test_export_no_records():
    result = _service(_store(records=[])).export_monthly('3', 2025, 3)

    assert not result.success
    assert result.message == 'No attendance data for the selected period'
    assert result.status_code == 404


def test_export_fetch_error():
    result = _service(_store(error='timeout')).export_monthly('3', 2025, 3)

    assert not result.success
    assert result.message == 'Error: timeout'
    assert result.status_code == 502


def test_export_invalid_year():
    result = _service(_store()).export_monthly('3', 0, 3, owner='s')

    assert not result.success
    assert result.message == 'Error: Invalid year: 0'
    assert result.status_code == 422


def test_export_invalid_academic_year():
    result = _service(_store()).export_semester('3', '2024/2026', 1)

    assert not result.success
    assert result.message.startswith('Error: Invalid academic year')
    assert result.status_code == 422


def test_export_unexpected_error():
    guard = ExportGuard()
    service = _service(_store(), guard=guard, excel_generator=CrashingGenerator())

    result = service.export_monthly('3', 2025, 3, owner='s')

    assert not result.success
    assert result.message == 'Error: worksheet exploded'
    assert result.status_code == 500
    assert not guard.is_busy('s')


def test_page_size_capped_by_store_ceiling():
    records = [record('A', f'2025-03-{day:02d}', 'Present') for day in range(1, 26)]
    store = _store(records=records, max_rows=10)

    service = _service(store, page_size=1000)
    recap = service.monthly_recap('3', 2025, 3)

    assert service.page_size == 10
    assert len(recap.records) == 25
    assert recap.rows[0].total == 25


def test_semester_teacher_from_first_unfiltered_record():
    records = [
        record('A', '2024-06-28', 'Present', recorded_by='Pak Joko'),
        record('A', '2024-08-01', 'Present', recorded_by='Ibu Sari'),
    ]
    store = UndatedStore({'students': [roster_entry('A', 'Ani')], 'attendance': records})

    result = _service(store).export_semester('3', '2024/2025', 1)

    ws = openpyxl.load_workbook(io.BytesIO(result.document)).active
    assert ws['A6'].value == 1
    assert ws['D6'].value == 1
    # One student: data row 6, footer from row 9, name at row 12
    assert ws['H12'].value == 'Pak Joko'


def test_export_invalid_status():
    records = [record('A', '2025-03-01', 'Late')]

    result = _service(_store(records=records)).export_monthly('3', 2025, 3)

    assert not result.success
    assert result.message.startswith('Error: Unknown attendance status')
    assert result.status_code == 422


def test_export_serialization_error():
    result = _service(_store(), excel_generator=BrokenGenerator()).export_monthly('3', 2025, 3)

    assert not result.success
    assert result.message == 'Error: disk full'
    assert result.status_code == 500


def test_export_refused_while_busy():
    guard = ExportGuard()
    service = _service(_store(), guard=guard)

    with guard.busy('session-1'):
        refused = service.export_monthly('3', 2025, 3, owner='session-1')
        other = service.export_monthly('3', 2025, 3, owner='session-2')

    assert not refused.success
    assert refused.status_code == 409
    assert other.success
    assert not guard.is_busy('session-1')


def test_busy_flag_cleared_after_failure():
    guard = ExportGuard()
    service = _service(_store(error='timeout'), guard=guard)

    assert not service.export_monthly('3', 2025, 3, owner='session-1').success
    assert not guard.is_busy('session-1')

    service.store.error = None
    assert service.export_monthly('3', 2025, 3, owner='session-1').success


def test_guard_rejects_nested_use():
    guard = ExportGuard()

    with guard.busy('x'):
        assert guard.is_busy('x')
        with pytest.raises(ExportInProgressError):
            with guard.busy('x'):
                pass
        assert guard.is_busy('x')

    assert not guard.is_busy('x')
