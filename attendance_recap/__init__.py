"""
Flask Application Factory
Initialize and configure the attendance recap application
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from datetime import datetime
import time

from dotenv import load_dotenv

from flask import Flask, jsonify, request, g
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_cors import CORS
from sqlalchemy import text
import click

from attendance_recap.config import get_config

load_dotenv()

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()


def create_app(config_name=None):
    """
    Application factory pattern
    Creates and configures the Flask application

    Args:
        config_name: Configuration to use (development, testing, production)

    Returns:
        Configured Flask application instance
    """
    app = Flask(__name__)

    # Load configuration
    config = get_config(config_name)
    app.config.from_object(config)
    config.init_app(app)

    # Initialize extensions
    initialize_extensions(app)

    # Register blueprints
    register_blueprints(app)

    # Register error handlers
    register_error_handlers(app)

    # Configure logging
    configure_logging(app)

    # Register CLI commands
    register_cli_commands(app)

    # Request handlers for performance monitoring
    register_request_handlers(app)

    return app


def initialize_extensions(app):
    """Initialize Flask extensions"""

    # Database
    from attendance_recap import models  # noqa: F401  (registers tables)
    db.init_app(app)
    migrate.init_app(app, db)

    # CORS (for API endpoints)
    CORS(app, resources={
        r"/api/*": {
            "origins": app.config.get('CORS_ORIGINS', '*'),
            "methods": ["GET", "OPTIONS"],
            "allow_headers": ["Content-Type", "X-Session-Id"],
            "expose_headers": ["Content-Disposition"]
        }
    })

    # One busy flag set shared by all requests of this process
    from attendance_recap.services.recap_service import ExportGuard
    app.extensions['export_guard'] = ExportGuard()


def register_request_handlers(app):
    """Register request handlers for performance monitoring"""

    @app.before_request
    def before_request():
        """Track request start time"""
        g.start_time = time.time()

    @app.after_request
    def after_request(response):
        """Log slow requests"""
        if hasattr(g, 'start_time'):
            elapsed = time.time() - g.start_time

            if elapsed > app.config.get('SLOW_REQUEST_THRESHOLD', 1.0):
                app.logger.warning(
                    f'Slow request: {request.method} {request.path} '
                    f'took {elapsed:.3f}s'
                )

            if app.debug:
                response.headers['X-Request-Duration'] = f'{elapsed:.3f}s'

        return response


def register_blueprints(app):
    """Register Flask blueprints (routes)"""

    if app.config.get('ENABLE_API', True):
        from attendance_recap.routes.api.v1 import register_api_blueprints
        register_api_blueprints(app)

    # Health check endpoint
    @app.route('/health')
    def health_check():
        """Health check endpoint for monitoring"""
        health_data = {
            'status': 'healthy',
            'timestamp': datetime.utcnow().isoformat(),
            'version': app.config.get('APP_VERSION', '1.0.0')
        }

        try:
            db.session.execute(text('SELECT 1'))
            health_data['database'] = 'ok'
        except Exception as e:
            app.logger.error(f'Health check database error: {e}')
            health_data['database'] = f'error: {str(e)}'
            health_data['status'] = 'unhealthy'

        status_code = 200 if health_data['status'] == 'healthy' else 503
        return jsonify(health_data), status_code


def register_error_handlers(app):
    """Register JSON error handlers for common HTTP errors"""

    @app.errorhandler(400)
    def bad_request(error):
        return jsonify({
            'error': 'Bad Request',
            'message': str(error),
            'status_code': 400
        }), 400

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({
            'error': 'Not Found',
            'message': 'Resource not found',
            'status_code': 404
        }), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({
            'error': 'Method Not Allowed',
            'message': str(error),
            'status_code': 405
        }), 405

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        app.logger.error(f'Internal Server Error: {error}')
        return jsonify({
            'error': 'Internal Server Error',
            'message': 'An unexpected error occurred',
            'status_code': 500
        }), 500


def configure_logging(app):
    """Configure application logging"""

    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    logging.getLogger('attendance_recap').setLevel(level)

    if not app.debug and not app.testing:
        log_dir = Path(app.config.get('LOG_FILE', 'logs/app.log')).parent
        log_dir.mkdir(parents=True, exist_ok=True)

        # File handler
        file_handler = RotatingFileHandler(
            app.config.get('LOG_FILE', 'logs/app.log'),
            maxBytes=10240000,  # 10MB
            backupCount=10
        )
        file_handler.setFormatter(logging.Formatter(
            app.config.get('LOG_FORMAT',
                '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]')
        ))
        file_handler.setLevel(logging.INFO)

        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.INFO)
        console_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))

        # Service modules log under the package logger
        package_logger = logging.getLogger('attendance_recap')
        for handler in (file_handler, console_handler):
            app.logger.addHandler(handler)
            package_logger.addHandler(handler)

        app.logger.setLevel(logging.INFO)
        app.logger.info('Attendance Recap startup')


def register_cli_commands(app):
    """Register custom CLI commands"""

    @app.cli.command('init-db')
    def init_db():
        """Create all database tables"""
        click.echo('Initializing database...')
        db.create_all()
        click.echo('✓ Database initialized successfully!')

    @app.cli.command('seed-demo')
    @click.option('--class-id', default='1', help='Class to populate')
    @click.option('--students', default=20, help='Number of students')
    @click.option('--start', default=None, help='First date (YYYY-MM-DD), default: start of this month')
    @click.option('--end', default=None, help='Last date (YYYY-MM-DD), default: today')
    @click.option('--seed', default=None, type=int, help='Random seed')
    def seed_demo(class_id, students, start, end, seed):
        """Create a demo roster and attendance marks"""
        from attendance_recap.seed import default_demo_range, seed_demo_data

        default_start, default_end = default_demo_range()
        try:
            start_date = datetime.strptime(start, '%Y-%m-%d').date() if start else default_start
            end_date = datetime.strptime(end, '%Y-%m-%d').date() if end else default_end
        except ValueError as e:
            raise click.BadParameter(str(e))

        db.create_all()
        created_students, created_records = seed_demo_data(
            class_id, start_date, end_date, students=students, seed=seed
        )
        click.echo(f'✓ Created {created_students} students and {created_records} '
                   f'attendance records for class {class_id}')

    @app.cli.command('export-monthly')
    @click.argument('class_id')
    @click.argument('year', type=int)
    @click.argument('month', type=click.IntRange(1, 12))
    @click.option('--teacher', default=None, help='Name for the signature block')
    @click.option('--output', default=None, help='Output directory (default: REPORTS_FOLDER)')
    def export_monthly(class_id, year, month, teacher, output):
        """Export a monthly attendance recap to Excel"""
        from attendance_recap.routes.api.v1.recap import get_recap_service
        result = get_recap_service().export_monthly(class_id, year, month,
                                                    teacher_name=teacher, owner='cli')
        _write_export(result, output)

    @app.cli.command('export-semester')
    @click.argument('class_id')
    @click.argument('academic_year')
    @click.argument('semester', type=click.IntRange(1, 2))
    @click.option('--teacher', default=None, help='Name for the signature block')
    @click.option('--output', default=None, help='Output directory (default: REPORTS_FOLDER)')
    def export_semester(class_id, academic_year, semester, teacher, output):
        """Export a semester attendance recap to Excel"""
        from attendance_recap.routes.api.v1.recap import get_recap_service
        result = get_recap_service().export_semester(class_id, academic_year, semester,
                                                     teacher_name=teacher, owner='cli')
        _write_export(result, output)

    def _write_export(result, output):
        from attendance_recap.errors import RecapError
        from attendance_recap.utils.excel_generator import save_as

        if not result.success:
            raise click.ClickException(result.message)

        directory = Path(output) if output else Path(app.config['REPORTS_FOLDER'])
        try:
            path = save_as(result.document, directory / result.filename)
        except RecapError as e:
            raise click.ClickException(e.message)
        click.echo(f'✓ {result.message}: {path}')
