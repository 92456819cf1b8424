"""
Live flight API endpoints.

Provides endpoints for:
- GET /api/flights - State vectors inside a bounding box
"""

import logging
import time
from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify, request

from skytrack.ingestion import BoundingBox

logger = logging.getLogger(__name__)

flights_bp = Blueprint('flights', __name__, url_prefix='/api/flights')


@flights_bp.route('', methods=['GET'])
def get_flights():
    """
    List aircraft currently inside a bounding box.

    Query parameters:
    - lamin, lomin, lamax, lomax: bounding box (required)
    - airborne_only: skip aircraft on the ground (default false)
    """
    start_time = time.perf_counter()

    try:
        bbox = BoundingBox.from_params(request.args)
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    airborne_only = request.args.get('airborne_only', 'false').lower() == 'true'

    client = current_app.config['OPENSKY_CLIENT']
    states = client.get_states(bbox)
    if airborne_only:
        states = [s for s in states if not s.on_ground]

    query_time_ms = (time.perf_counter() - start_time) * 1000

    return jsonify({
        'flights': [s.to_dict() for s in states],
        'count': len(states),
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'query_time_ms': round(query_time_ms, 2),
    })
