"""
Models package initialization
Exports all models for easy importing
"""

from attendance_recap.models.student import Student
from attendance_recap.models.attendance import Attendance

__all__ = [
    'Student',
    'Attendance'
]
