"""
API Response Utilities
Standardized response formatting for Flask API endpoints
"""
from flask import jsonify
from typing import Any, Optional, Dict
from datetime import datetime


class APIResponse:
    """Standardized API response formatter"""

    @staticmethod
    def success(data: Any = None, message: str = "Success",
                status_code: int = 200, meta: Optional[Dict] = None) -> tuple:
        """
        Format successful API response

        Args:
            data: Response payload
            message: Success message
            status_code: HTTP status code
            meta: Additional metadata

        Returns:
            Tuple of (jsonify response, status_code)
        """
        response = {
            'success': True,
            'message': message,
            'data': data,
            'timestamp': datetime.utcnow().isoformat()
        }

        if meta:
            response['meta'] = meta

        return jsonify(response), status_code

    @staticmethod
    def error(message: str, error_code: str = None,
              status_code: int = 400, details: Any = None) -> tuple:
        """
        Format error API response

        Args:
            message: Error message
            error_code: Custom error code
            status_code: HTTP status code
            details: Additional error details

        Returns:
            Tuple of (jsonify response, status_code)
        """
        response = {
            'success': False,
            'message': message,
            'timestamp': datetime.utcnow().isoformat()
        }

        if error_code:
            response['error_code'] = error_code

        if details:
            response['details'] = details

        return jsonify(response), status_code

    @staticmethod
    def not_found(resource: str = "Resource") -> tuple:
        """Format not found response"""
        return APIResponse.error(
            message=f"{resource} not found",
            error_code='NOT_FOUND',
            status_code=404
        )

    @staticmethod
    def validation_error(errors: Dict) -> tuple:
        """Format validation error response"""
        return APIResponse.error(
            message="Validation failed",
            error_code='VALIDATION_ERROR',
            status_code=422,
            details=errors
        )

    @staticmethod
    def recap_error(error) -> tuple:
        """Format a recap pipeline failure"""
        return APIResponse.error(
            message=error.message,
            error_code=type(error).__name__.replace('Error', '').upper() + '_ERROR',
            status_code=error.status_code,
            details=error.details
        )
