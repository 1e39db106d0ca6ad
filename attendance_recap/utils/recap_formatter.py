"""
Recap Formatter - Lay out attendance pivots as monthly or semester sheets
Produces SheetLayout objects only; no spreadsheet library is touched here.
"""

from typing import List

from attendance_recap.constants import (
    AttendanceCategory, AttendanceStatus, DATE_COLUMN_FORMAT
)
from attendance_recap.services.pivot_builder import attendance_category
from attendance_recap.utils.sheet_layout import CellStyle, SheetLayout, SheetRow


class RecapMeta:
    """
    Everything a formatter needs besides the pivot rows

    Args:
        school_name: Printed on the first title row
        class_id: Class the recap belongs to
        period: MonthPeriod or SemesterPeriod
        teacher_name: Signs the footer; blank leaves the signature empty
        dates: Distinct record dates, one monthly column each
    """

    def __init__(self, school_name, class_id, period, teacher_name='', dates=None):
        self.school_name = school_name
        self.class_id = class_id
        self.period = period
        self.teacher_name = teacher_name or ''
        self.dates = dates

    def __repr__(self):
        return f'<RecapMeta class={self.class_id} period={self.period!r}>'


# Shared styles
TITLE_STYLE = CellStyle(font_size=14, bold=True, horizontal='center')
SUBTITLE_STYLE = CellStyle(font_size=12, bold=True, horizontal='center')
FOOTER_STYLE = CellStyle(font_size=11, horizontal='left', vertical=None)

MONTHLY_HEADER_STYLE = CellStyle(font_size=10, bold=True, fill='FFE6E6E6',
                                 horizontal='center', border=True)
MONTHLY_CELL_STYLE = CellStyle(font_size=9, horizontal='center', border=True)

SEMESTER_HEADER_STYLE = CellStyle(font_size=11, bold=True, font_color='FFFFFFFF',
                                  fill='FF4472C4', horizontal='center', border=True)
SEMESTER_CELL_STYLE = CellStyle(font_size=10, horizontal='center', border=True)

SIGNATURE_LINE = '___________________'

MONTHLY_HEADER_ROW = 6
SEMESTER_HEADER_ROW = 5


def monthly_filename(class_id, period):
    return f'Recap_Attendance_Class_{class_id}_{period.month_name}_{period.year}.xlsx'


def semester_filename(class_id, period):
    return f'Recap_Attendance_Semester_{period.semester}_Class_{class_id}_{period.year}.xlsx'


def layout_monthly(pivot: List, meta: RecapMeta) -> SheetLayout:
    """
    Monthly grid: one column per recorded date plus summary columns

    Columns: No., Student Name, DD-MM..., Present, Excused, Sick, Absent,
    Total, Percentage.
    """
    period = meta.period
    dates = meta.dates
    if dates is None:
        dates = sorted({d for row in pivot for d in row.daily_status})

    date_count = len(dates)
    date_start = 3
    summary_start = date_start + date_count
    total_cols = 2 + date_count + 6

    layout = SheetLayout(
        title=f'Recap Class {meta.class_id}',
        filename=monthly_filename(meta.class_id, period),
        column_count=total_cols
    )

    _add_title_block(layout, total_cols, [
        (meta.school_name, TITLE_STYLE, 25),
        (f'MONTHLY ATTENDANCE RECAP CLASS {meta.class_id}', SUBTITLE_STYLE, 20),
        (f'BULAN: {period.month_name} {period.year}',
         CellStyle(font_size=11, bold=True, horizontal='center'), 20),
    ])
    layout.add_row(SheetRow(4, height=15))
    layout.add_row(SheetRow(5, height=15))

    headers = ['No.', 'Student Name']
    headers += [d.strftime(DATE_COLUMN_FORMAT) for d in dates]
    headers += ['Present', 'Excused', 'Sick', 'Absent', 'Total', 'Percentage']
    layout.add_row(SheetRow(MONTHLY_HEADER_ROW, headers, MONTHLY_HEADER_STYLE, height=25))

    row_index = MONTHLY_HEADER_ROW
    for number, row in enumerate(pivot, start=1):
        row_index += 1
        values = [number, row.student_name]
        values += [row.daily_status.get(d, '') for d in dates]
        values += [
            row.counts.present,
            row.counts.excused,
            row.counts.sick,
            row.counts.absent,
            row.total,
            f'{row.percentage}%'
        ]
        layout.add_row(SheetRow(
            row_index, values, MONTHLY_CELL_STYLE, height=20,
            column_styles={2: MONTHLY_CELL_STYLE.replace(horizontal='left')},
            value_fills=AttendanceStatus.CODE_FILLS,
            fill_columns=range(date_start, summary_start)
        ))

    _add_signature_block(
        layout,
        first_row=row_index + 3,
        column=total_cols - 2,
        class_id=meta.class_id,
        teacher_name=meta.teacher_name,
        spacer_height=25,
        name_style=FOOTER_STYLE.replace(bold=True),
        signature_line=True
    )

    layout.set_width(1, 5)
    layout.set_width(2, 35)
    for column in range(date_start, summary_start):
        layout.set_width(column, 6)
    for column in range(summary_start, summary_start + 5):
        layout.set_width(column, 8)
    layout.set_width(summary_start + 5, 12)

    return layout


def layout_semester(pivot: List, meta: RecapMeta) -> SheetLayout:
    """
    Semester summary: fixed ten columns, no per-date columns

    Columns: No, Student ID, Student Name, Present, Sick, Excused, Absent,
    Total, %, Category.
    """
    period = meta.period
    total_cols = 10

    layout = SheetLayout(
        title=f'Semester {period.semester} Class {meta.class_id}',
        filename=semester_filename(meta.class_id, period),
        column_count=total_cols
    )

    _add_title_block(layout, total_cols, [
        (meta.school_name, TITLE_STYLE, 25),
        (f'Attendance Recap - Class {meta.class_id}', SUBTITLE_STYLE, 20),
        (f'Semester {period.label} ({period.month_range}) {period.year}',
         CellStyle(font_size=11, horizontal='center'), 20),
    ])
    layout.add_row(SheetRow(4, height=15))

    headers = ['No', 'Student ID', 'Student Name', 'Present', 'Sick', 'Excused',
               'Absent', 'Total', '%', 'Category']
    layout.add_row(SheetRow(SEMESTER_HEADER_ROW, headers, SEMESTER_HEADER_STYLE, height=25))

    left = SEMESTER_CELL_STYLE.replace(horizontal='left')
    row_index = SEMESTER_HEADER_ROW
    for number, row in enumerate(pivot, start=1):
        row_index += 1
        category = row.category or attendance_category(row.percentage)
        values = [
            number,
            row.student_id,
            row.student_name,
            row.counts.present,
            row.counts.sick,
            row.counts.excused,
            row.counts.absent,
            row.total,
            row.percentage,
            category
        ]
        layout.add_row(SheetRow(
            row_index, values, SEMESTER_CELL_STYLE, height=20,
            column_styles={2: left, 3: left},
            value_fills=AttendanceCategory.FILLS,
            fill_columns=range(10, 11)
        ))

    _add_signature_block(
        layout,
        first_row=row_index + 3,
        column=8,
        class_id=meta.class_id,
        teacher_name=meta.teacher_name,
        spacer_height=30,
        name_style=FOOTER_STYLE.replace(bold=True, underline=True),
        signature_line=False
    )

    for column, width in enumerate([5, 15, 35, 10, 10, 10, 10, 10, 8, 15], start=1):
        layout.set_width(column, width)

    return layout


def _add_title_block(layout, total_cols, titles):
    """Merged title rows starting at row 1"""
    for index, (text, style, height) in enumerate(titles, start=1):
        layout.add_row(SheetRow(index, [text], style, height=height, merge_across=total_cols))


def _add_signature_block(layout, first_row, column, class_id, teacher_name,
                         spacer_height, name_style, signature_line):
    """'Mengetahui' / class teacher / space / name / line"""
    layout.add_row(SheetRow(first_row, ['Mengetahui'], FOOTER_STYLE, start_column=column))
    layout.add_row(SheetRow(first_row + 1, [f'Class teacher {class_id}'], FOOTER_STYLE,
                            start_column=column))
    layout.add_row(SheetRow(first_row + 2, height=spacer_height))

    if not teacher_name:
        return

    layout.add_row(SheetRow(first_row + 3, [teacher_name], name_style, start_column=column))
    if signature_line:
        layout.add_row(SheetRow(first_row + 4, [SIGNATURE_LINE],
                                FOOTER_STYLE.replace(font_size=9), start_column=column))
