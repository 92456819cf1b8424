"""
Aircraft metadata API endpoints.

Provides endpoints for:
- GET /api/aircraft-info - Merged metadata for one aircraft
- GET /api/aircraft-info/stats - Cache, governor and provider statistics

The map always gets a record back: fields nobody could resolve are null,
never an error. Only a request with no usable identifier is rejected.
"""

import concurrent.futures
import logging
import time

from flask import Blueprint, current_app, jsonify, request

from skytrack.errors import IdentifierError
from skytrack.resolver.records import AircraftRecord

logger = logging.getLogger(__name__)

aircraft_bp = Blueprint('aircraft', __name__, url_prefix='/api/aircraft-info')


def _runner():
    runner = current_app.config.get('RESOLVER_RUNNER')
    if runner is None or not runner.is_running:
        return None
    return runner


@aircraft_bp.route('', methods=['GET'])
def get_aircraft_info():
    """
    Resolve aircraft metadata.

    Query parameters (at least icao24 or registration, or a callsign that
    encodes a registration):
    - icao24: transponder code
    - registration: tail number
    - callsign: broadcast callsign
    """
    start_time = time.perf_counter()

    icao24 = request.args.get('icao24') or None
    registration = request.args.get('registration') or None
    callsign = request.args.get('callsign') or None

    runner = _runner()
    if runner is None:
        return jsonify({'error': 'Aircraft resolver is not running'}), 503

    try:
        result = runner.resolve(icao24, callsign, registration)
    except IdentifierError as e:
        return jsonify({'error': str(e)}), 400
    except concurrent.futures.TimeoutError:
        logger.warning(f'Resolution timed out for icao24={icao24} registration={registration}')
        return jsonify({
            'success': True,
            'data': AircraftRecord.fallback().to_dict(),
            'cached': False,
            'sources': {},
            'timed_out': True,
        })

    query_time_ms = (time.perf_counter() - start_time) * 1000

    return jsonify({
        'success': True,
        'data': result.record.to_dict(),
        'cached': result.cached,
        'sources': result.source_flags(),
        'query_time_ms': round(query_time_ms, 2),
    })


@aircraft_bp.route('/stats', methods=['GET'])
def get_resolver_stats():
    """Resolver statistics for monitoring."""
    runner = _runner()
    if runner is None:
        return jsonify({'error': 'Aircraft resolver is not running'}), 503
    return jsonify(runner.stats())
