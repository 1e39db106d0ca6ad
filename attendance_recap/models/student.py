"""
Student Model
Class roster entries used as the row set of every recap
"""

from datetime import datetime
from attendance_recap import db


class Student(db.Model):
    """
    Student Model
    One row per enrolled student per class. Inactive students are kept for
    history but never appear in a recap.
    """
    __tablename__ = 'students'

    # Primary Fields
    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.String(20), nullable=False, index=True)  # NISN
    full_name = db.Column(db.String(150), nullable=False)
    class_id = db.Column(db.String(20), nullable=False, index=True)

    # Status
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    # Timestamps
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.UniqueConstraint('student_id', 'class_id', name='uq_student_class'),
    )

    def __repr__(self):
        return f'<Student {self.student_id}: {self.full_name}>'

    def to_dict(self):
        """Convert student to roster dictionary"""
        return {
            'student_id': self.student_id,
            'full_name': self.full_name,
            'class_id': self.class_id,
            'active': self.is_active
        }
