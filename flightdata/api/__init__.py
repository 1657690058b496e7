"""
API module for FlightData.

Provides REST endpoints for:
- Flight records (CRUD) and combined flight search
- System status
"""

from flightdata.api.flights import flights_bp
from flightdata.api.status import status_bp

__all__ = ['flights_bp', 'status_bp']
