"""
Database models for FlightData.

Schema designed for flight record CRUD and search with these priorities:
1. Invariants enforced in the model on every write
2. Efficient route and departure-time range queries
3. Stable ordering for pagination
"""

from flightdata.models.base import (
    Base,
    engine,
    SessionLocal,
    build_engine,
    build_session_factory,
    init_db,
    get_session,
)
from flightdata.models.flight import (
    Flight,
    FlightFields,
    FlightChanges,
    UNSET,
    as_utc,
    to_utc_naive,
    normalize_airport_code,
)

__all__ = [
    'Base',
    'engine',
    'SessionLocal',
    'build_engine',
    'build_session_factory',
    'init_db',
    'get_session',
    'Flight',
    'FlightFields',
    'FlightChanges',
    'UNSET',
    'as_utc',
    'to_utc_naive',
    'normalize_airport_code',
]
