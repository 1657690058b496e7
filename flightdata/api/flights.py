"""
Flight API endpoints.

Provides endpoints for:
- GET    /api/v1/flights       - Search stored and CrazySupplier flights
- POST   /api/v1/flights       - Create a flight
- GET    /api/v1/flights/<id>  - Get a single flight
- PUT    /api/v1/flights/<id>  - Partially update a flight
- DELETE /api/v1/flights/<id>  - Delete a flight

Request and response bodies use camelCase field names. Timestamps are
ISO 8601; values without an offset are taken as UTC.
"""

import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional

from flask import Blueprint, current_app, jsonify, request

from flightdata.config import config
from flightdata.errors import ValidationError
from flightdata.models.flight import UNSET, FlightChanges, FlightFields
from flightdata.services.flight_records import FlightTimeRange
from flightdata.services.flight_service import FlightService

logger = logging.getLogger(__name__)

flights_bp = Blueprint('flights', __name__, url_prefix='/api/v1/flights')

# Largest row offset a page may start at (signed 32-bit, portable across databases)
MAX_RESULT_OFFSET = 2 ** 31 - 1

# JSON field -> (FlightFields attribute, parser kind)
FLIGHT_FIELDS = {
    'airline': ('airline', 'string'),
    'supplier': ('supplier', 'string'),
    'fare': ('fare', 'decimal'),
    'departureAirport': ('departure_airport', 'string'),
    'destinationAirport': ('destination_airport', 'string'),
    'departureTime': ('departure_time', 'datetime'),
    'arrivalTime': ('arrival_time', 'datetime'),
}


def _service() -> FlightService:
    return current_app.config['FLIGHT_SERVICE']


# -------------------------------------------------------------------------
# Input parsing
# -------------------------------------------------------------------------

def parse_datetime(value: str) -> datetime:
    """
    Parse an ISO 8601 timestamp ('2025-10-25T10:30:00Z').

    Raises:
        ValueError if the value is not a valid timestamp.
    """
    return datetime.fromisoformat(value.strip().replace('Z', '+00:00'))


def _parse_field(name: str, kind: str, value: Any, errors: List[str]) -> Any:
    """Convert one JSON value, recording a message on failure."""
    if kind == 'string':
        if not isinstance(value, str):
            errors.append(f'{name} must be a string')
            return None
        return value

    if kind == 'decimal':
        if isinstance(value, bool) or not isinstance(value, (int, float, str)):
            errors.append(f'{name} must be a number')
            return None
        try:
            parsed = Decimal(str(value))
        except InvalidOperation:
            errors.append(f'{name} must be a number')
            return None
        if not parsed.is_finite():
            errors.append(f'{name} must be a number')
            return None
        return parsed

    if not isinstance(value, str):
        errors.append(f'{name} must be an ISO 8601 timestamp')
        return None
    try:
        return parse_datetime(value)
    except ValueError:
        errors.append(f'{name} must be an ISO 8601 timestamp')
        return None


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError(['Request body must be a JSON object'])
    return data


def parse_flight_fields(data: dict) -> FlightFields:
    """Build FlightFields from a create request body."""
    errors: List[str] = []
    values = {}

    for json_name, (attr, kind) in FLIGHT_FIELDS.items():
        value = data.get(json_name)
        if value is None:
            continue  # Reported as "required" by model validation
        values[attr] = _parse_field(json_name, kind, value, errors)

    if errors:
        raise ValidationError(errors)
    return FlightFields(**values)


def parse_flight_changes(data: dict) -> FlightChanges:
    """
    Build FlightChanges from an update request body.

    Absent keys and explicit nulls both mean "leave unchanged".
    """
    errors: List[str] = []
    values = {}

    for json_name, (attr, kind) in FLIGHT_FIELDS.items():
        value = data.get(json_name)
        if value is None:
            values[attr] = UNSET
            continue
        values[attr] = _parse_field(json_name, kind, value, errors)

    if errors:
        raise ValidationError(errors)
    return FlightChanges(**values)


def _query_string(name: str) -> Optional[str]:
    """Query parameter with blank values treated as absent."""
    value = request.args.get(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _query_datetime(name: str, errors: List[str]) -> Optional[datetime]:
    value = _query_string(name)
    if value is None:
        return None
    try:
        return parse_datetime(value)
    except ValueError:
        errors.append(f'{name} must be an ISO 8601 timestamp')
        return None


def _query_int(name: str, default: int, minimum: int, errors: List[str]) -> int:
    value = _query_string(name)
    if value is None:
        return default
    try:
        parsed = int(value)
    except ValueError:
        errors.append(f'{name} must be an integer')
        return default
    if parsed < minimum:
        errors.append(f'{name} must be at least {minimum}')
        return default
    return parsed


# -------------------------------------------------------------------------
# Endpoints
# -------------------------------------------------------------------------

@flights_bp.route('', methods=['GET'])
def search_flights():
    """
    Search flights.

    Query parameters:
    - origin, destination: 3-letter airport codes (any case)
    - airline: case-insensitive substring
    - departureFrom, departureTo, arrivalFrom, arrivalTo: inclusive bounds
    - page: zero-based page index (default 0)
    - size: page size (default 20, capped at 100)

    CrazySupplier is only queried when both origin and destination are given.
    """
    logger.info('GET /api/v1/flights - Search request received')

    errors: List[str] = []
    time_range = FlightTimeRange(
        departure_from=_query_datetime('departureFrom', errors),
        departure_to=_query_datetime('departureTo', errors),
        arrival_from=_query_datetime('arrivalFrom', errors),
        arrival_to=_query_datetime('arrivalTo', errors),
    )
    page = _query_int('page', 0, 0, errors)
    size = min(
        _query_int('size', config.pagination.default_page_size, 1, errors),
        config.pagination.max_page_size,
    )
    if page * size > MAX_RESULT_OFFSET:
        errors.append(f'page must be at most {MAX_RESULT_OFFSET // size} for page size {size}')
    if errors:
        raise ValidationError(errors)

    result = _service().search_flights(
        origin=_query_string('origin'),
        destination=_query_string('destination'),
        airline=_query_string('airline'),
        time_range=time_range,
        page=page,
        size=size,
    )

    return jsonify(result.to_dict())


@flights_bp.route('', methods=['POST'])
def create_flight():
    """
    Create a flight.

    Body: {"airline", "supplier", "fare", "departureAirport",
           "destinationAirport", "departureTime", "arrivalTime"}
    """
    logger.info('POST /api/v1/flights - Create flight request received')

    data = parse_flight_fields(_json_body())
    view = _service().create_flight(data)

    return jsonify(view.to_dict()), 201


@flights_bp.route('/<int:flight_id>', methods=['GET'])
def get_flight(flight_id: int):
    """Get a single stored flight."""
    logger.info(f'GET /api/v1/flights/{flight_id} - Get flight by ID')

    view = _service().get_flight(flight_id)
    return jsonify(view.to_dict())


@flights_bp.route('/<int:flight_id>', methods=['PUT'])
def update_flight(flight_id: int):
    """
    Partially update a flight.

    Only non-null fields in the body are applied.
    """
    logger.info(f'PUT /api/v1/flights/{flight_id} - Update flight request received')

    changes = parse_flight_changes(_json_body())
    view = _service().update_flight(flight_id, changes)

    return jsonify(view.to_dict())


@flights_bp.route('/<int:flight_id>', methods=['DELETE'])
def delete_flight(flight_id: int):
    """Delete a flight."""
    logger.info(f'DELETE /api/v1/flights/{flight_id} - Delete flight request received')

    _service().delete_flight(flight_id)
    return '', 204
