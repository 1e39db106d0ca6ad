"""
Attendance Model
Daily attendance marks, one row per student per date.
"""
from datetime import datetime
from attendance_recap import db
from attendance_recap.constants import AttendanceStatus, DATE_FORMAT
from sqlalchemy import Index


class Attendance(db.Model):
    """
    Attendance records for students.

    Attributes:
        id: Primary key
        student_id: Stable student identifier (NISN)
        student_name: Name as entered with the mark
        class_id: Class the mark belongs to
        date: Calendar date of the mark
        status: Present, Sick, Excused, Absent
        academic_year: Label spanning two years, e.g. "2024/2025"
        recorded_by: Staff member who entered the mark
    """
    __tablename__ = 'attendance'

    # Primary Key
    id = db.Column(db.Integer, primary_key=True)

    student_id = db.Column(db.String(20), nullable=False, index=True)
    student_name = db.Column(db.String(150), nullable=False)
    class_id = db.Column(db.String(20), nullable=False, index=True)

    # Attendance Details
    date = db.Column(db.Date, nullable=False, index=True)
    status = db.Column(
        db.String(20),
        nullable=False,
        default=AttendanceStatus.PRESENT
    )
    academic_year = db.Column(db.String(9), nullable=False, index=True)
    recorded_by = db.Column(db.String(150), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.UniqueConstraint('student_id', 'class_id', 'date', name='uq_student_class_date'),
        Index('idx_attendance_class_date', 'class_id', 'date'),
        Index('idx_attendance_class_year', 'class_id', 'academic_year'),
    )

    def __repr__(self):
        return f'<Attendance {self.student_id} - {self.date} - {self.status}>'

    def to_dict(self):
        """Convert record to the plain dictionary the recap pipeline reads"""
        return {
            'student_id': self.student_id,
            'student_name': self.student_name,
            'class_id': self.class_id,
            'date': self.date.strftime(DATE_FORMAT) if self.date else None,
            'status': self.status,
            'academic_year': self.academic_year,
            'recorded_by': self.recorded_by
        }
