"""
Attendance Recap - Application Entry Point
Run with: python run.py
"""

import os
import sys
from attendance_recap import create_app

# Get configuration from environment
config_name = os.environ.get('FLASK_CONFIG') or 'development'

# Create app instance
app = create_app(config_name)


def get_port():
    """Get port from environment or use safe default"""
    try:
        port = int(os.environ.get('PORT', 8080))
        if not (1024 <= port <= 65535):
            app.logger.warning(f"Invalid port {port}, using 8080")
            return 8080
        return port
    except ValueError:
        app.logger.warning("Invalid PORT value, using 8080")
        return 8080


def get_host():
    """Get host from environment or use safe default"""
    return os.environ.get('HOST', '127.0.0.1')


if __name__ == '__main__':
    port = get_port()
    host = get_host()

    app.logger.info(f"Environment: {config_name}, debug: {app.config['DEBUG']}, server: http://{host}:{port}")

    try:
        app.run(host=host, port=port, debug=app.config['DEBUG'])
    except KeyboardInterrupt:
        app.logger.info("Shutting down")
        sys.exit(0)
