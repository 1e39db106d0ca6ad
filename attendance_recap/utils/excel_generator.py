"""
Excel Generator - Render sheet layouts into .xlsx documents
Applies fonts, fills, borders, alignment, merges and sizing cell by cell
"""

import io
import logging
import re
from pathlib import Path

import openpyxl
from flask import send_file
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side
from openpyxl.utils import get_column_letter

from attendance_recap.constants import XLSX_MIMETYPE
from attendance_recap.errors import SerializationError

logger = logging.getLogger(__name__)

INVALID_TITLE_CHARS = re.compile(r'[\\/*?:\[\]]')


class ExcelGenerator:
    """Generate Excel documents from SheetLayout objects"""

    def __init__(self, font_name='Arial'):
        self.font_name = font_name

        self.thin_border = Border(
            left=Side(style='thin'),
            right=Side(style='thin'),
            top=Side(style='thin'),
            bottom=Side(style='thin')
        )

    def emit(self, layout, output_path=None):
        """
        Generate the workbook for a layout

        Args:
            layout: SheetLayout from the recap formatter
            output_path: Path to save Excel file (optional)

        Returns:
            bytes: Excel content if output_path is None, else None

        Raises:
            SerializationError: If the workbook cannot be built or saved
        """
        try:
            wb = openpyxl.Workbook()
            ws = wb.active
            ws.title = self._sheet_title(layout.title)

            for row in layout.rows:
                self._write_row(ws, row)

            for column, width in sorted(layout.column_widths.items()):
                ws.column_dimensions[get_column_letter(column)].width = width

            return self._save_workbook(wb, output_path)
        except SerializationError:
            raise
        except Exception as e:
            logger.error(f"Error creating Excel file {layout.filename}: {str(e)}", exc_info=True)
            raise SerializationError(f'Failed to generate spreadsheet: {str(e)}') from e

    def _write_row(self, ws, row):
        if row.merge_across and row.merge_across > 1:
            ws.merge_cells(
                start_row=row.index,
                start_column=row.start_column,
                end_row=row.index,
                end_column=row.start_column + row.merge_across - 1
            )

        for column, value, style in row.cells():
            cell = ws.cell(row=row.index, column=column)
            cell.value = value
            self._apply_style(cell, style)

        if row.height is not None:
            ws.row_dimensions[row.index].height = row.height

    def _apply_style(self, cell, style):
        font = {'name': self.font_name, 'size': style.font_size, 'bold': style.bold}
        if style.underline:
            font['underline'] = 'single'
        if style.font_color:
            font['color'] = style.font_color
        cell.font = Font(**font)

        if style.fill:
            cell.fill = PatternFill(start_color=style.fill,
                                    end_color=style.fill,
                                    fill_type='solid')

        if style.horizontal or style.vertical:
            cell.alignment = Alignment(horizontal=style.horizontal, vertical=style.vertical)

        if style.border:
            cell.border = self.thin_border

    @staticmethod
    def _sheet_title(title):
        """Excel sheet names: max 31 chars, no \\ / * ? : [ ]"""
        cleaned = INVALID_TITLE_CHARS.sub('-', title or 'Sheet')
        return cleaned[:31] or 'Sheet'

    def _save_workbook(self, wb, output_path=None):
        """Save workbook to file or return as bytes"""
        if output_path:
            wb.save(output_path)
            return None
        else:
            output = io.BytesIO()
            wb.save(output)
            output.seek(0)
            return output.read()


def download_as(document, filename):
    """
    Offer a generated document as a file download

    The in-memory buffer is released when the response is closed.
    """
    return send_file(
        io.BytesIO(document),
        mimetype=XLSX_MIMETYPE,
        as_attachment=True,
        download_name=filename
    )


def save_as(document, path):
    """Write a generated document to disk, returning the final path"""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        path.write_bytes(document)
    except OSError as e:
        raise SerializationError(f'Failed to write {path}: {str(e)}') from e
    logger.info(f"Saved {len(document)} bytes to {path}")
    return path
