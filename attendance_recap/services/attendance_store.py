"""
Attendance Store - Narrow query interface over the attendance tables
Mirrors the hosted backend's select/filter/order/range builder so the
record fetcher never depends on a specific database.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import Date
from sqlalchemy.exc import SQLAlchemyError

from attendance_recap.constants import DATE_FORMAT, Table

logger = logging.getLogger(__name__)


class QueryResult:
    """Outcome of a store query: rows in `data` or a message in `error`"""

    def __init__(self, data: Optional[List[Dict]] = None, error: Optional[str] = None):
        self.data = data if data is not None else []
        self.error = error

    def __repr__(self):
        if self.error:
            return f'<QueryResult error={self.error!r}>'
        return f'<QueryResult rows={len(self.data)}>'


class TableQuery:
    """
    Chainable query against one table

    Usage:
        store.table('attendance').select('*').eq('class_id', '3') \\
            .gte('date', '2025-03-01').order('date').range(0, 999).execute()
    """

    def __init__(self, store, table: str):
        self.store = store
        self.table = table
        self.columns = '*'
        self.filters = []
        self.ordering = []
        self.bounds = None

    def select(self, columns: str = '*') -> 'TableQuery':
        self.columns = columns
        return self

    def eq(self, column: str, value: Any) -> 'TableQuery':
        self.filters.append(('eq', column, value))
        return self

    def gte(self, column: str, value: Any) -> 'TableQuery':
        self.filters.append(('gte', column, value))
        return self

    def lte(self, column: str, value: Any) -> 'TableQuery':
        self.filters.append(('lte', column, value))
        return self

    def order(self, column: str, ascending: bool = True) -> 'TableQuery':
        self.ordering.append((column, ascending))
        return self

    def range(self, start: int, end: int) -> 'TableQuery':
        """Restrict to rows start..end, both inclusive"""
        self.bounds = (start, end)
        return self

    def execute(self) -> QueryResult:
        return self.store.execute(self)

    def selected_columns(self) -> Optional[List[str]]:
        if self.columns in (None, '', '*'):
            return None
        return [c.strip() for c in self.columns.split(',') if c.strip()]


class AttendanceStore:
    """Base store; subclasses implement execute()"""

    def __init__(self, max_rows: int = 1000):
        # Ceiling applied to every response, like the hosted backend's
        self.max_rows = max_rows

    def table(self, name: str) -> TableQuery:
        return TableQuery(self, name)

    def execute(self, query: TableQuery) -> QueryResult:
        raise NotImplementedError

    def _window(self, query: TableQuery):
        """Resolve (offset, limit) for a query, honouring the row ceiling"""
        if query.bounds is None:
            return 0, self.max_rows
        start, end = query.bounds
        if start < 0 or end < start:
            return start, 0
        return start, min(end - start + 1, self.max_rows)

    @staticmethod
    def _project(row: Dict, columns: Optional[List[str]]) -> Dict:
        if columns is None:
            return row
        return {key: row.get(key) for key in columns}


class SQLAlchemyStore(AttendanceStore):
    """Store backed by the Flask-SQLAlchemy session"""

    def __init__(self, session, max_rows: int = 1000, models: Optional[Dict] = None):
        super().__init__(max_rows=max_rows)
        self.session = session
        if models is None:
            from attendance_recap.models import Attendance, Student
            models = {
                Table.ATTENDANCE: Attendance,
                Table.STUDENTS: Student
            }
        self.models = models

    def execute(self, query: TableQuery) -> QueryResult:
        model = self.models.get(query.table)
        if model is None:
            return QueryResult(error=f'relation "{query.table}" does not exist')

        try:
            q = self.session.query(model)

            for op, column, value in query.filters:
                attr = self._column(model, column)
                if attr is None:
                    return QueryResult(error=f'column {query.table}.{column} does not exist')
                value = self._coerce(model, column, value)
                if op == 'eq':
                    q = q.filter(attr == value)
                elif op == 'gte':
                    q = q.filter(attr >= value)
                elif op == 'lte':
                    q = q.filter(attr <= value)

            for column, ascending in query.ordering:
                attr = self._column(model, column)
                if attr is None:
                    return QueryResult(error=f'column {query.table}.{column} does not exist')
                q = q.order_by(attr.asc() if ascending else attr.desc())

            # Primary key tie-break keeps range windows stable
            q = q.order_by(model.id.asc())

            offset, limit = self._window(query)
            rows = q.offset(offset).limit(limit).all() if limit > 0 else []

        except ValueError as e:
            return QueryResult(error=str(e))
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Store query on {query.table} failed: {str(e)}")
            return QueryResult(error=str(e))

        columns = query.selected_columns()
        return QueryResult(data=[self._project(row.to_dict(), columns) for row in rows])

    @staticmethod
    def _column(model, column):
        if column not in model.__table__.columns:
            return None
        return getattr(model, column)

    @staticmethod
    def _coerce(model, column, value):
        """Convert ISO date strings for Date columns"""
        column_type = model.__table__.columns[column].type
        if isinstance(column_type, Date) and isinstance(value, str):
            try:
                return datetime.strptime(value, DATE_FORMAT).date()
            except ValueError:
                raise ValueError(f'invalid input syntax for type date: "{value}"')
        return value
