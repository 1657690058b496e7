"""
FlightData Flask Application.

Main entry point for the web application. Initializes:
- Database schema
- Flight service (database + CrazySupplier)
- API routes
- Error handlers
- CLI commands (init-db, seed-db)

Usage:
    python -m flightdata.app

Or with gunicorn:
    gunicorn "flightdata.app:create_app()"
"""

import logging
import os
from datetime import datetime, timezone
from http import HTTPStatus
from typing import Optional

import click
from flask import Flask, jsonify, request
from flask_cors import CORS
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from flightdata.api import flights_bp, status_bp
from flightdata.config import config
from flightdata.errors import FlightNotFoundError, ValidationError
from flightdata.models import init_db
from flightdata.seed import seed_sample_flights
from flightdata.services.flight_service import FlightService

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S',
)
logger = logging.getLogger(__name__)


def _error_response(status: int, message: str):
    """JSON error body shared by all error handlers."""
    return jsonify({
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'status': status,
        'error': HTTPStatus(status).phrase,
        'message': message,
        'path': request.path,
    }), status


def register_error_handlers(app: Flask) -> None:
    """Map domain and storage errors to HTTP responses."""

    @app.errorhandler(ValidationError)
    def validation_error(e: ValidationError):
        logger.error(f'Validation error: {e.message}')
        return _error_response(400, e.message)

    @app.errorhandler(FlightNotFoundError)
    def flight_not_found(e: FlightNotFoundError):
        logger.error(f'Flight not found: {e.message}')
        return _error_response(404, e.message)

    @app.errorhandler(HTTPException)
    def http_error(e: HTTPException):
        return _error_response(e.code or 500, e.description or HTTPStatus(e.code or 500).phrase)

    @app.errorhandler(SQLAlchemyError)
    def storage_error(e: SQLAlchemyError):
        logger.exception(f'Database error: {e}')
        return _error_response(500, 'An unexpected error occurred. Please try again later.')

    @app.errorhandler(Exception)
    def server_error(e: Exception):
        logger.exception(f'Server error: {e}')
        return _error_response(500, 'An unexpected error occurred. Please try again later.')


def register_commands(app: Flask) -> None:
    """Flask CLI commands for database setup."""

    @app.cli.command('init-db')
    def init_db_command():
        """Create database tables."""
        init_db()
        click.echo('Database initialized.')

    @app.cli.command('seed-db')
    def seed_db_command():
        """Insert sample flights into an empty database."""
        init_db()
        count = seed_sample_flights(app.config['FLIGHT_SERVICE'].records)
        click.echo(f'Inserted {count} sample flights.')


def create_app(
    flight_service: Optional[FlightService] = None,
    init_database: bool = True,
) -> Flask:
    """
    Application factory for Flask.

    Args:
        flight_service: Service to serve requests with (built from config if None).
                        Tests pass one bound to an isolated database.
        init_database: Whether to create the schema on the configured engine.

    Returns:
        Configured Flask application instance.
    """
    app = Flask(__name__)

    # Configuration
    app.config['SECRET_KEY'] = config.secret_key

    # Enable CORS for API endpoints
    CORS(app, resources={r'/api/*': {'origins': '*'}})

    if init_database:
        logger.info('Initializing database...')
        init_db()

    app.config['FLIGHT_SERVICE'] = flight_service or FlightService()

    # Register API blueprints
    app.register_blueprint(flights_bp)
    app.register_blueprint(status_bp)

    @app.route('/health')
    def health():
        """Simple health check endpoint."""
        return {'status': 'ok'}

    register_error_handlers(app)
    register_commands(app)

    return app


def run_development_server():
    """Run the development server."""
    app = create_app()

    # Get port from environment or default
    port = int(os.environ.get('PORT', 5000))

    logger.info(f'Starting FlightData on http://localhost:{port}')
    logger.info(f'Flights API: http://localhost:{port}/api/v1/flights')

    app.run(
        host='0.0.0.0',
        port=port,
        debug=config.debug,
    )


if __name__ == '__main__':
    run_development_server()
