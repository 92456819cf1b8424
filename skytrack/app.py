"""
SkyTrack Flask Application.

Main entry point for the web service. Initializes:
- Database schema
- Aircraft resolver loop
- OpenSky live-state client
- API routes

Usage:
    python -m skytrack.app

Or with gunicorn:
    gunicorn 'skytrack.app:create_app()'
"""

import atexit
import logging
import os
from typing import Callable, Optional

from flask import Flask
from flask_cors import CORS

from skytrack.config import config
from skytrack.models import init_db
from skytrack.api import aircraft_bp, flights_bp
from skytrack.ingestion import OpenSkyClient
from skytrack.resolver import AircraftResolver, ResolverRunner

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S',
)
logger = logging.getLogger(__name__)


def create_app(
    start_resolver: bool = True,
    resolver_factory: Optional[Callable[[], AircraftResolver]] = None,
    opensky_client: Optional[OpenSkyClient] = None,
    init_database: bool = True,
) -> Flask:
    """
    Application factory for Flask.

    Args:
        start_resolver: Whether to start the background resolver loop.
                        Set to False for testing endpoints without it.
        resolver_factory: Builds the resolver on its loop
                          (defaults to AircraftResolver.from_config).
        opensky_client: Live-state client (created from config if None).
        init_database: Create missing tables on startup.

    Returns:
        Configured Flask application instance.
    """
    app = Flask(__name__)

    app.config['SECRET_KEY'] = config.secret_key

    # Enable CORS for API endpoints
    CORS(app, resources={r'/api/*': {'origins': '*'}})

    if init_database:
        logger.info('Initializing database...')
        init_db()

    app.register_blueprint(aircraft_bp)
    app.register_blueprint(flights_bp)

    app.config['OPENSKY_CLIENT'] = opensky_client or OpenSkyClient.from_config(config.opensky)

    if start_resolver:
        runner = ResolverRunner(
            resolver_factory or AircraftResolver.from_config,
            call_timeout=config.resolver.call_timeout_seconds,
        )
        runner.start()
        atexit.register(runner.stop)
        app.config['RESOLVER_RUNNER'] = runner
    else:
        app.config['RESOLVER_RUNNER'] = None

    @app.route('/health')
    def health():
        """Simple health check endpoint."""
        runner = app.config['RESOLVER_RUNNER']
        return {
            'status': 'ok',
            'resolver': bool(runner and runner.is_running),
        }

    # -------------------------------------------------------------------------
    # Error handlers
    # -------------------------------------------------------------------------

    @app.errorhandler(404)
    def not_found(e):
        return {'error': 'Not found'}, 404

    @app.errorhandler(500)
    def server_error(e):
        logger.error(f'Server error: {e}')
        return {'error': 'Internal server error'}, 500

    return app


def run_development_server():
    """Run the development server."""
    app = create_app()

    port = int(os.environ.get('PORT', 5000))

    logger.info(f'Starting SkyTrack on http://localhost:{port}')
    logger.info(f'Aircraft info: http://localhost:{port}/api/aircraft-info?icao24=<hex>')

    app.run(
        host='0.0.0.0',
        port=port,
        debug=config.debug,
        use_reloader=False,  # Reloader would start a second resolver loop
    )


if __name__ == '__main__':
    run_development_server()
