"""
Demo Data
Generates a small roster and school-day attendance marks for trying out
the recap exports. Used by the `flask seed-demo` command.
"""

import random
from datetime import date, timedelta

from attendance_recap import db
from attendance_recap.constants import AttendanceStatus
from attendance_recap.models import Attendance, Student

FIRST_NAMES = [
    'Adi', 'Budi', 'Citra', 'Dewi', 'Eka', 'Fajar', 'Gita', 'Hadi',
    'Indah', 'Joko', 'Kartika', 'Lestari', 'Made', 'Nur', 'Putri', 'Rizki'
]
LAST_NAMES = [
    'Pratama', 'Saputra', 'Wijaya', 'Lestari', 'Hidayat', 'Kusuma',
    'Nugroho', 'Permana', 'Rahayu', 'Santoso'
]


def academic_year_for(day):
    """Academic year label a date belongs to (July starts a new year)"""
    if day.month >= 7:
        return f'{day.year}/{day.year + 1}'
    return f'{day.year - 1}/{day.year}'


def school_days(start, end):
    """Monday-Saturday dates between start and end inclusive"""
    day = start
    while day <= end:
        if day.weekday() < 6:
            yield day
        day += timedelta(days=1)


def seed_demo_data(class_id, start, end, students=20, recorded_by='Demo Teacher', seed=None):
    """
    Create a class roster and one mark per student per school day

    Args:
        class_id: Class to populate
        start: First date to mark
        end: Last date to mark
        students: Roster size
        recorded_by: Staff name stored on every mark
        seed: Random seed for repeatable data (optional)

    Returns:
        tuple: (students created, records created)
    """
    rng = random.Random(seed)

    roster = []
    for index in range(students):
        student = Student(
            student_id=f'{class_id}{index + 1:08d}',
            full_name=f'{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}',
            class_id=class_id,
            is_active=True
        )
        roster.append(student)
        db.session.add(student)

    # Present 85-97% of the time; the rest spread over sick/excused/absent
    weights = [rng.uniform(0.85, 0.97), 0.04, 0.03, 0.03]

    records = 0
    for day in school_days(start, end):
        for student in roster:
            status = rng.choices(AttendanceStatus.ALL, weights=weights)[0]
            db.session.add(Attendance(
                student_id=student.student_id,
                student_name=student.full_name,
                class_id=class_id,
                date=day,
                status=status,
                academic_year=academic_year_for(day),
                recorded_by=recorded_by
            ))
            records += 1

    db.session.commit()
    return len(roster), records


def default_demo_range(today=None):
    """The current month up to today"""
    today = today or date.today()
    return today.replace(day=1), today
