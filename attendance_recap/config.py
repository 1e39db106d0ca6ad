"""
Attendance Recap Configuration
Environment-based configuration classes for different deployment scenarios
"""

import os
from pathlib import Path


class Config:
    """Base configuration with common settings"""

    # Application
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'
    APP_NAME = 'School Attendance Recap'
    APP_VERSION = '1.0.0'

    BASE_DIR = Path(__file__).resolve().parent.parent
    REPORTS_FOLDER = BASE_DIR / 'reports'

    # Database
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = False

    # School identity (printed in report headers)
    SCHOOL_NAME = os.environ.get('SCHOOL_NAME', 'SD NEGERI 1 PASIRPOGOR')
    DEFAULT_TEACHER_NAME = os.environ.get('DEFAULT_TEACHER_NAME', '')

    # Export
    EXPORT_PAGE_SIZE = int(os.environ.get('EXPORT_PAGE_SIZE', 1000))
    STORE_MAX_ROWS = int(os.environ.get('STORE_MAX_ROWS', 1000))

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    LOG_FILE = BASE_DIR / 'logs' / 'app.log'

    # Performance Monitoring
    SLOW_REQUEST_THRESHOLD = 1.0  # seconds

    # API
    ENABLE_API = os.environ.get('ENABLE_API', 'true').lower() in ['true', 'on', '1']
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*')

    @staticmethod
    def init_app(app):
        """Initialize application with config-specific settings"""
        for folder in [Config.REPORTS_FOLDER, Config.BASE_DIR / 'logs']:
            folder.mkdir(parents=True, exist_ok=True)


class DevelopmentConfig(Config):
    """Development environment configuration"""

    DEBUG = True
    TESTING = False

    SQLALCHEMY_DATABASE_URI = os.environ.get('DEV_DATABASE_URL') or \
        f'sqlite:///{Config.BASE_DIR}/attendance.db'
    SQLALCHEMY_ECHO = os.environ.get('SQLALCHEMY_ECHO', 'false').lower() in ['true', 'on', '1']

    LOG_LEVEL = 'DEBUG'

    @staticmethod
    def init_app(app):
        Config.init_app(app)
        app.logger.info(f'Running in DEVELOPMENT mode, database: {app.config.get("SQLALCHEMY_DATABASE_URI")}')


class TestingConfig(Config):
    """Testing environment configuration"""

    DEBUG = True
    TESTING = True

    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'

    SCHOOL_NAME = 'SD NEGERI TEST'
    DEFAULT_TEACHER_NAME = ''

    @staticmethod
    def init_app(app):
        # No directories are created while testing
        pass


class ProductionConfig(Config):
    """Production environment configuration"""

    DEBUG = False
    TESTING = False

    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        f'sqlite:///{Config.BASE_DIR}/attendance.db'

    SLOW_REQUEST_THRESHOLD = 2.0
    PROPAGATE_EXCEPTIONS = False

    @staticmethod
    def init_app(app):
        Config.init_app(app)
        app.logger.info('Attendance Recap startup (Production)')


# Configuration dictionary
config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}


def get_config(config_name=None):
    """Get configuration object by name"""
    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')
    return config.get(config_name, DevelopmentConfig)
