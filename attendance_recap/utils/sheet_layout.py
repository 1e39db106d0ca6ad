"""
Sheet Layout - Library-agnostic description of a formatted worksheet
Formatters describe rows, styles and widths here; the Excel generator
is the only place that turns them into workbook cells.
"""

from typing import Any, Dict, List, Optional


class CellStyle:
    """Visual style of a cell; colours are ARGB hex strings"""

    _FIELDS = ('font_size', 'bold', 'underline', 'font_color', 'fill',
               'horizontal', 'vertical', 'border')

    def __init__(self, font_size=10, bold=False, underline=False, font_color=None,
                 fill=None, horizontal=None, vertical='center', border=False):
        self.font_size = font_size
        self.bold = bold
        self.underline = underline
        self.font_color = font_color
        self.fill = fill
        self.horizontal = horizontal
        self.vertical = vertical
        self.border = border

    def replace(self, **changes) -> 'CellStyle':
        """Copy of this style with some attributes changed"""
        values = {name: getattr(self, name) for name in self._FIELDS}
        values.update(changes)
        return CellStyle(**values)

    def __eq__(self, other):
        if not isinstance(other, CellStyle):
            return NotImplemented
        return all(getattr(self, n) == getattr(other, n) for n in self._FIELDS)

    def __hash__(self):
        return hash(tuple(getattr(self, n) for n in self._FIELDS))

    def __repr__(self):
        return f'<CellStyle size={self.font_size} bold={self.bold} fill={self.fill}>'


class SheetRow:
    """
    One worksheet row

    Args:
        index: 1-based row number
        values: Cell values, written from start_column onwards
        style: Default style of every written cell
        start_column: Column of the first value
        height: Row height in points (optional)
        merge_across: Merge start_column..start_column+merge_across-1 (optional)
        column_styles: Per-column style overrides, keyed by column number
        value_fills: Fill colour keyed by cell value
        fill_columns: Columns value_fills applies to
    """

    def __init__(self, index: int, values: Optional[List[Any]] = None,
                 style: Optional[CellStyle] = None, start_column: int = 1,
                 height: Optional[float] = None, merge_across: Optional[int] = None,
                 column_styles: Optional[Dict[int, CellStyle]] = None,
                 value_fills: Optional[Dict[Any, str]] = None,
                 fill_columns: Optional[range] = None):
        self.index = index
        self.values = list(values or [])
        self.style = style or CellStyle()
        self.start_column = start_column
        self.height = height
        self.merge_across = merge_across
        self.column_styles = column_styles or {}
        self.value_fills = value_fills or {}
        self.fill_columns = fill_columns if fill_columns is not None else range(0)

    def __repr__(self):
        return f'<SheetRow {self.index}: {len(self.values)} values>'

    def cells(self):
        """Yield (column, value, style) for every written cell"""
        for offset, value in enumerate(self.values):
            column = self.start_column + offset
            yield column, value, self.style_for(column, value)

    def style_for(self, column: int, value: Any) -> CellStyle:
        style = self.column_styles.get(column, self.style)
        if column in self.fill_columns and value in self.value_fills:
            style = style.replace(fill=self.value_fills[value])
        return style


class SheetLayout:
    """A complete single-sheet report ready for emission"""

    def __init__(self, title: str, filename: str, column_count: int):
        self.title = title
        self.filename = filename
        self.column_count = column_count
        self.column_widths = {}
        self.rows = []

    def __repr__(self):
        return f'<SheetLayout {self.title!r}: {len(self.rows)} rows x {self.column_count} cols>'

    def add_row(self, row: SheetRow) -> SheetRow:
        self.rows.append(row)
        return row

    def row(self, index: int) -> Optional[SheetRow]:
        """Find the row with a given 1-based index"""
        for row in self.rows:
            if row.index == index:
                return row
        return None

    def set_width(self, column: int, width: float):
        self.column_widths[column] = width

    @property
    def last_row(self) -> int:
        return max((row.index for row in self.rows), default=0)
