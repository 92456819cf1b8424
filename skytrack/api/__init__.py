"""
API module for SkyTrack.

Provides REST endpoints for:
- Aircraft metadata resolution
- Live flight state vectors
"""

from skytrack.api.aircraft import aircraft_bp
from skytrack.api.flights import flights_bp

__all__ = ['aircraft_bp', 'flights_bp']
