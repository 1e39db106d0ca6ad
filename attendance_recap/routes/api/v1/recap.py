"""
API Recap Endpoints
Monthly and semester attendance recaps as JSON, CSV or Excel downloads
"""
import io
import logging

from flask import Blueprint, current_app, request, send_file

from attendance_recap import db
from attendance_recap.constants import ExportFormat, Semester
from attendance_recap.errors import RecapError
from attendance_recap.services.attendance_store import SQLAlchemyStore
from attendance_recap.services.record_fetcher import SemesterPeriod, fetch_roster
from attendance_recap.services.recap_service import RecapService
from attendance_recap.utils.api_response import APIResponse
from attendance_recap.utils.excel_generator import download_as

logger = logging.getLogger(__name__)

bp = Blueprint('api_recap', __name__, url_prefix='/api/v1/recap')


def get_recap_service():
    """Build a RecapService from the application configuration"""
    config = current_app.config
    store = SQLAlchemyStore(db.session, max_rows=config['STORE_MAX_ROWS'])
    return RecapService(
        store,
        school_name=config['SCHOOL_NAME'],
        default_teacher_name=config.get('DEFAULT_TEACHER_NAME', ''),
        page_size=config['EXPORT_PAGE_SIZE'],
        guard=current_app.extensions['export_guard']
    )


def _export_owner():
    """Busy-flag key: the client session header, else the remote address"""
    return request.headers.get('X-Session-Id') or request.remote_addr or 'anonymous'


def _int_arg(name, errors, minimum=None, maximum=None, required=True):
    raw = request.args.get(name)
    if raw in (None, ''):
        if required:
            errors[name] = 'This parameter is required'
        return None
    try:
        value = int(raw)
    except ValueError:
        errors[name] = 'Must be an integer'
        return None
    if (minimum is not None and value < minimum) or (maximum is not None and value > maximum):
        errors[name] = f'Must be between {minimum} and {maximum}'
        return None
    return value


def _format_arg(errors):
    export_format = request.args.get('format', ExportFormat.JSON).lower()
    if export_format not in ExportFormat.ALL:
        errors['format'] = f"Must be one of: {', '.join(ExportFormat.ALL)}"
    return export_format


def _csv_response(recap, filename):
    frame = RecapService.recap_dataframe(recap)
    csv_content = frame.to_csv(index=False)
    return send_file(
        io.BytesIO(csv_content.encode('utf-8')),
        mimetype='text/csv',
        as_attachment=True,
        download_name=filename
    )


def _export_response(result):
    if result.success:
        return download_as(result.document, result.filename)
    return APIResponse.error(
        message=result.message,
        error_code='EXPORT_FAILED',
        status_code=result.status_code
    )


@bp.route('/classes/<string:class_id>/monthly', methods=['GET'])
def monthly_recap(class_id):
    """
    Monthly attendance recap of a class

    Query Parameters:
        - year: Calendar year (required)
        - month: 1-12 (required)
        - format: json (default) | xlsx | csv
        - teacher: Name printed in the signature block (xlsx)
        - recorded_by: Only marks entered by this staff member

    Returns:
        Recap rows and summary, or a file download
    """
    errors = {}
    year = _int_arg('year', errors, 1900, 9999)
    month = _int_arg('month', errors, 1, 12)
    export_format = _format_arg(errors)
    if errors:
        return APIResponse.validation_error(errors)

    recorded_by = request.args.get('recorded_by') or None
    service = get_recap_service()

    if export_format == ExportFormat.XLSX:
        result = service.export_monthly(
            class_id, year, month,
            teacher_name=request.args.get('teacher'),
            owner=_export_owner(),
            recorded_by=recorded_by
        )
        return _export_response(result)

    try:
        recap = service.monthly_recap(class_id, year, month, recorded_by=recorded_by)
    except RecapError as e:
        logger.error(f"Monthly recap failed for class {class_id}: {e.message}")
        return APIResponse.recap_error(e)

    if export_format == ExportFormat.CSV:
        return _csv_response(recap, f'Recap_Attendance_Class_{class_id}_{recap.period.month_name}_{year}.csv')

    return APIResponse.success(data=recap.to_dict(), message="Monthly recap generated successfully")


@bp.route('/classes/<string:class_id>/semester', methods=['GET'])
def semester_recap(class_id):
    """
    Semester attendance recap of a class

    Query Parameters:
        - semester: 1 (July-December) or 2 (January-June) (required)
        - academic_year: e.g. 2024/2025, or
        - year: Calendar year the semester falls in
        - format: json (default) | xlsx | csv
        - teacher: Name printed in the signature block (xlsx)

    Returns:
        Recap rows with categories, or a file download
    """
    errors = {}
    semester = _int_arg('semester', errors, Semester.ODD, Semester.EVEN)
    export_format = _format_arg(errors)

    academic_year = request.args.get('academic_year')
    year = _int_arg('year', errors, 1900, 9999, required=False)
    if not academic_year and year is None and 'year' not in errors:
        errors['academic_year'] = 'Provide academic_year or year'

    period = None
    if not errors:
        try:
            if academic_year:
                period = SemesterPeriod(academic_year, semester)
            else:
                period = SemesterPeriod.from_year(year, semester)
        except ValueError as e:
            errors['academic_year'] = str(e)

    if errors:
        return APIResponse.validation_error(errors)

    service = get_recap_service()

    if export_format == ExportFormat.XLSX:
        result = service.export_semester(
            class_id, period.academic_year, period.semester,
            teacher_name=request.args.get('teacher'),
            owner=_export_owner()
        )
        return _export_response(result)

    try:
        recap = service.semester_recap(class_id, period.academic_year, period.semester)
    except RecapError as e:
        logger.error(f"Semester recap failed for class {class_id}: {e.message}")
        return APIResponse.recap_error(e)

    if export_format == ExportFormat.CSV:
        return _csv_response(
            recap,
            f'Recap_Attendance_Semester_{period.semester}_Class_{class_id}_{period.year}.csv'
        )

    return APIResponse.success(data=recap.to_dict(), message="Semester recap generated successfully")


@bp.route('/classes/<string:class_id>/roster', methods=['GET'])
def class_roster(class_id):
    """
    Active students of a class, ordered by name

    Returns:
        Roster list
    """
    store = SQLAlchemyStore(db.session, max_rows=current_app.config['STORE_MAX_ROWS'])
    try:
        roster = fetch_roster(store, class_id)
    except RecapError as e:
        logger.error(f"Roster fetch failed for class {class_id}: {e.message}")
        return APIResponse.recap_error(e)

    if not roster:
        return APIResponse.not_found(f"Roster for class {class_id}")

    return APIResponse.success(
        data=roster,
        message="Roster retrieved successfully",
        meta={'total': len(roster)}
    )
