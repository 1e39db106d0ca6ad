"""
Recap Errors
Failures raised by the attendance recap pipeline
"""


class RecapError(Exception):
    """Base class for recap pipeline failures"""

    user_message = 'Failed to build attendance recap'
    status_code = 500

    def __init__(self, message=None, details=None):
        super().__init__(message or self.user_message)
        self.message = message or self.user_message
        self.details = details


class FetchError(RecapError):
    """The attendance or roster query reported an error"""

    user_message = 'Failed to fetch attendance data'
    status_code = 502


class ValidationError(RecapError):
    """Source data holds a malformed date or an unknown status"""

    user_message = 'Attendance data contains invalid values'
    status_code = 422


class EmptyResultError(RecapError):
    """The query succeeded but there is nothing to report"""

    user_message = 'No attendance data for the selected period'
    status_code = 404


class SerializationError(RecapError):
    """The spreadsheet document could not be generated"""

    user_message = 'Failed to generate spreadsheet'
    status_code = 500


class ExportInProgressError(RecapError):
    """Another export for the same owner is still running"""

    user_message = 'An export is already in progress, please wait'
    status_code = 409
