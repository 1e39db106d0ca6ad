"""
Shared fixtures: a testing app on in-memory SQLite
"""

from datetime import datetime

import pytest

from attendance_recap import create_app, db
from attendance_recap.models import Attendance, Student


@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def add_student(app):
    def _add(student_id, full_name, class_id='3', is_active=True):
        student = Student(student_id=student_id, full_name=full_name,
                          class_id=class_id, is_active=is_active)
        db.session.add(student)
        db.session.commit()
        return student
    return _add


@pytest.fixture
def add_attendance(app):
    def _add(student_id, day, status, class_id='3', student_name=None,
             academic_year='2024/2025', recorded_by='Ibu Sari'):
        mark = Attendance(
            student_id=student_id,
            student_name=student_name or student_id,
            class_id=class_id,
            date=datetime.strptime(day, '%Y-%m-%d').date(),
            status=status,
            academic_year=academic_year,
            recorded_by=recorded_by
        )
        db.session.add(mark)
        db.session.commit()
        return mark
    return _add
