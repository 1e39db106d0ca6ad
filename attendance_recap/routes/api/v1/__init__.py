"""
API v1 Package
Registers all API v1 endpoint blueprints
"""
from flask import Blueprint, jsonify
from datetime import datetime

# Create main API v1 blueprint
api_bp = Blueprint('api_v1', __name__, url_prefix='/api/v1')


def register_api_blueprints(app):
    """
    Register all API v1 blueprints with the Flask app

    Usage in attendance_recap/__init__.py:
        from attendance_recap.routes.api.v1 import register_api_blueprints
        register_api_blueprints(app)
    """
    # Import blueprints here to avoid circular imports
    from attendance_recap.routes.api.v1.recap import bp as recap_bp

    app.register_blueprint(recap_bp)

    # Register the main API info blueprint
    app.register_blueprint(api_bp)

    app.logger.debug('API v1 blueprints registered: /api/v1/recap/*')


# API information endpoint
@api_bp.route('/', methods=['GET'])
def api_info():
    """
    Get API information and available endpoints

    Returns:
        API version, description, and endpoint list
    """
    return jsonify({
        'api_version': 'v1',
        'name': 'School Attendance Recap API',
        'description': 'Monthly and semester attendance recaps with Excel export',
        'endpoints': {
            'recap': {
                'monthly': 'GET /api/v1/recap/classes/<class_id>/monthly?year=&month=&format=json|xlsx|csv',
                'semester': 'GET /api/v1/recap/classes/<class_id>/semester?academic_year=|year=&semester=&format=json|xlsx|csv',
                'roster': 'GET /api/v1/recap/classes/<class_id>/roster'
            }
        },
        'response_format': {
            'success': {
                'success': True,
                'message': 'string',
                'data': 'object|array',
                'timestamp': 'ISO 8601 datetime'
            },
            'error': {
                'success': False,
                'message': 'string',
                'error_code': 'string',
                'timestamp': 'ISO 8601 datetime',
                'details': 'object (optional)'
            }
        }
    }), 200


# Health check endpoint
@api_bp.route('/health', methods=['GET'])
def health_check():
    """
    API health check

    Returns:
        API health status
    """
    return jsonify({
        'status': 'healthy',
        'api_version': 'v1',
        'timestamp': datetime.utcnow().isoformat()
    }), 200
