"""
Tests for the SQLAlchemy-backed attendance store
"""

from attendance_recap import db
from attendance_recap.services.attendance_store import SQLAlchemyStore


def test_filters_order_and_projection(add_attendance):
    add_attendance('B', '2025-03-02', 'Sick')
    add_attendance('A', '2025-03-01', 'Present')
    add_attendance('A', '2025-04-01', 'Present')
    add_attendance('C', '2025-03-05', 'Absent', class_id='4')

    store = SQLAlchemyStore(db.session)
    result = store.table('attendance').select('student_id, date, status') \
        .eq('class_id', '3') \
        .gte('date', '2025-03-01') \
        .lte('date', '2025-03-31') \
        .order('date') \
        .execute()

    assert result.error is None
    assert result.data == [
        {'student_id': 'A', 'date': '2025-03-01', 'status': 'Present'},
        {'student_id': 'B', 'date': '2025-03-02', 'status': 'Sick'},
    ]


def test_range_is_inclusive(add_attendance):
    for day in range(1, 6):
        add_attendance('A', f'2025-03-{day:02d}', 'Present')

    store = SQLAlchemyStore(db.session)
    result = store.table('attendance').select('date').order('date').range(1, 3).execute()

    assert [r['date'] for r in result.data] == ['2025-03-02', '2025-03-03', '2025-03-04']


def test_max_rows_caps_every_response(add_attendance):
    for day in range(1, 6):
        add_attendance('A', f'2025-03-{day:02d}', 'Present')

    store = SQLAlchemyStore(db.session, max_rows=2)

    assert len(store.table('attendance').select('*').execute().data) == 2
    assert len(store.table('attendance').select('*').range(0, 9).execute().data) == 2


def test_descending_order(add_attendance):
    add_attendance('A', '2025-03-01', 'Present')
    add_attendance('A', '2025-03-02', 'Present')

    store = SQLAlchemyStore(db.session)
    result = store.table('attendance').select('date').order('date', ascending=False).execute()

    assert [r['date'] for r in result.data] == ['2025-03-02', '2025-03-01']


def test_roster_rows(add_student):
    add_student('S1', 'Citra')
    add_student('S2', 'Ani', is_active=False)

    store = SQLAlchemyStore(db.session)
    result = store.table('students').select('*').eq('is_active', True).execute()

    assert [r['full_name'] for r in result.data] == ['Citra']


def test_unknown_column_is_an_error_result(app):
    store = SQLAlchemyStore(db.session)

    result = store.table('attendance').select('*').eq('teacher', 'x').execute()

    assert result.data == []
    assert 'teacher' in result.error


def test_unknown_table_is_an_error_result(app):
    store = SQLAlchemyStore(db.session)

    result = store.table('grades').select('*').execute()

    assert 'grades' in result.error


def test_malformed_date_filter_is_an_error_result(app):
    store = SQLAlchemyStore(db.session)

    result = store.table('attendance').select('*').gte('date', '2025-02-30').execute()

    assert 'invalid input syntax for type date' in result.error
