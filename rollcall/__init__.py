import os
from datetime import timedelta
from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate, upgrade
from dotenv import load_dotenv

# Load environment variables (override=True ensures .env values take precedence)
load_dotenv(override=True)

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()


def _int_env(name, default):
    value = os.environ.get(name)
    if value is None or value == '':
        return default
    return int(value)


def engine_options(database_uri, timeout_seconds):
    """SQLAlchemy engine options bounding how long any database call may wait."""
    if database_uri.startswith('sqlite'):
        # sqlite3 busy timeout; the in-memory StaticPool rejects pool_timeout
        return {'connect_args': {'timeout': timeout_seconds}}

    options = {'pool_timeout': timeout_seconds, 'pool_pre_ping': True}
    if database_uri.startswith('postgresql'):
        options['connect_args'] = {
            'connect_timeout': timeout_seconds,
            'options': f'-c statement_timeout={timeout_seconds * 1000}',
        }
    return options


def create_app(config_name=None):
    """Application factory pattern."""
    app = Flask(__name__)

    # Configuration
    app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY', 'dev-secret-key-change-me')
    app.config['SQLALCHEMY_DATABASE_URI'] = os.environ.get('DATABASE_URL', 'sqlite:///dev.db')
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False

    # Session configuration - 30 day persistent sessions
    app.config['PERMANENT_SESSION_LIFETIME'] = timedelta(days=30)
    app.config['SESSION_COOKIE_SECURE'] = os.environ.get('RAILWAY_ENVIRONMENT') is not None  # HTTPS only in production
    app.config['SESSION_COOKIE_HTTPONLY'] = True
    app.config['SESSION_COOKIE_SAMESITE'] = 'Lax'

    # App URL for notification links (defaults to localhost for dev, must be set in production)
    app.config['APP_URL'] = os.environ.get('APP_URL', 'http://localhost:5000')

    # Shared secret for the periodic trigger
    app.config['CRON_SECRET'] = os.environ.get('CRON_SECRET')

    # Outbound email (Brevo)
    app.config['BREVO_API_KEY'] = os.environ.get('BREVO_API_KEY')
    app.config['EMAIL_SENDER_ADDRESS'] = os.environ.get('EMAIL_SENDER_ADDRESS', 'noreply@rollcall.app')
    app.config['EMAIL_SENDER_NAME'] = os.environ.get('EMAIL_SENDER_NAME', 'Rollcall Check-in')
    app.config['EMAIL_TIMEOUT_SECONDS'] = _int_env('EMAIL_TIMEOUT_SECONDS', 10)
    app.config['EMAIL_DRY_RUN'] = os.environ.get('EMAIL_DRY_RUN', 'false').lower() == 'true'

    # Check-in window tuning
    app.config['ATTENDANCE_OPEN_WINDOW_MINUTES'] = _int_env('ATTENDANCE_OPEN_WINDOW_MINUTES', 70)
    app.config['ATTENDANCE_FALLBACK_HOURS'] = _int_env('ATTENDANCE_FALLBACK_HOURS', 48)

    if config_name == 'testing':
        app.config['TESTING'] = True
        app.config['SQLALCHEMY_DATABASE_URI'] = 'sqlite://'
        app.config['CRON_SECRET'] = 'test-cron-secret'
        app.config['EMAIL_DRY_RUN'] = True
        app.config['SESSION_COOKIE_SECURE'] = False

    # Fix for postgres:// vs postgresql:// (some providers use older postgres:// format)
    if app.config['SQLALCHEMY_DATABASE_URI'].startswith('postgres://'):
        app.config['SQLALCHEMY_DATABASE_URI'] = app.config['SQLALCHEMY_DATABASE_URI'].replace(
            'postgres://', 'postgresql://', 1
        )

    # Bounded waits for the database (pool checkout, connect, statements)
    app.config['DATABASE_TIMEOUT_SECONDS'] = _int_env('DATABASE_TIMEOUT_SECONDS', 5)
    app.config['SQLALCHEMY_ENGINE_OPTIONS'] = engine_options(
        app.config['SQLALCHEMY_DATABASE_URI'], app.config['DATABASE_TIMEOUT_SECONDS']
    )

    # Initialize extensions with app
    db.init_app(app)
    migrate.init_app(app, db)

    from rollcall.services.email_service import email_service
    email_service.init_app(app)

    # Register blueprints
    from rollcall.routes.main import main_bp
    from rollcall.routes.attendance import attendance_bp
    from rollcall.routes.admin import admin_bp
    from rollcall.routes.notifications import notifications_bp
    from rollcall.routes.cron import cron_bp
    app.register_blueprint(main_bp)
    app.register_blueprint(attendance_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(notifications_bp)
    app.register_blueprint(cron_bp)

    from rollcall.routes.errors import register_error_handlers
    register_error_handlers(app)

    from rollcall.cli import register_commands
    register_commands(app)

    # Import models so they're known to Flask-Migrate
    from rollcall import models

    # Auto-run migrations in production (Railway)
    if os.environ.get('RAILWAY_ENVIRONMENT'):
        with app.app_context():
            upgrade()

    return app
