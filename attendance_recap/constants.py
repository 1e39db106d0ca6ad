"""
System Constants
Centralized constants for the attendance recap pipeline
"""


# Attendance Status
class AttendanceStatus:
    PRESENT = 'Present'
    SICK = 'Sick'
    EXCUSED = 'Excused'
    ABSENT = 'Absent'

    ALL = [PRESENT, SICK, EXCUSED, ABSENT]

    # Single-letter codes printed in the monthly grid
    CODES = {
        PRESENT: 'H',
        SICK: 'S',
        EXCUSED: 'I',
        ABSENT: 'A'
    }

    # Light fills for the monthly grid, keyed by code
    CODE_FILLS = {
        'H': 'FFD4F1D4',   # Green
        'S': 'FFFFF4CD',   # Yellow
        'I': 'FFCDE4FF',   # Blue
        'A': 'FFFFD4D4'    # Red
    }


# Qualitative attendance tiers for semester recaps
class AttendanceCategory:
    VERY_GOOD = 'Very Good'
    GOOD = 'Good'
    FAIR = 'Fair'
    POOR = 'Poor'

    # (lower bound inclusive, label), highest first
    THRESHOLDS = [
        (90, VERY_GOOD),
        (80, GOOD),
        (70, FAIR),
    ]

    FILLS = {
        VERY_GOOD: 'FFC6EFCE',
        GOOD: 'FFFFF2CC',
        FAIR: 'FFFCE4D6',
        POOR: 'FFFFC7CE'
    }


# Semesters of an academic year
class Semester:
    ODD = 1
    EVEN = 2

    ALL = [ODD, EVEN]

    MONTHS = {
        ODD: [7, 8, 9, 10, 11, 12],
        EVEN: [1, 2, 3, 4, 5, 6]
    }

    LABELS = {
        ODD: 'Odd',
        EVEN: 'Even'
    }

    MONTH_RANGES = {
        ODD: 'July-December',
        EVEN: 'January-June'
    }


MONTH_NAMES = [
    '', 'January', 'February', 'March', 'April', 'May', 'June',
    'July', 'August', 'September', 'October', 'November', 'December'
]


# Store tables
class Table:
    ATTENDANCE = 'attendance'
    STUDENTS = 'students'


# Export formats accepted by the recap endpoints
class ExportFormat:
    JSON = 'json'
    XLSX = 'xlsx'
    CSV = 'csv'

    ALL = [JSON, XLSX, CSV]


XLSX_MIMETYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


# Date formats
DATE_FORMAT = '%Y-%m-%d'
DATE_COLUMN_FORMAT = '%d-%m'
