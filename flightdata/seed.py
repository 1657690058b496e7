"""
Sample flight records for local development.

Loaded with `flask --app flightdata.app seed-db`. Skipped when the
flights table already has rows.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal

from flightdata.models.flight import FlightFields
from flightdata.services.flight_records import FlightRecordService, FlightSearchFilter

logger = logging.getLogger(__name__)

# airline, supplier, fare, from, to, departure (UTC), arrival (UTC)
SAMPLE_FLIGHTS = [
    ('American Airlines', 'GlobalSupplier', '299.99', 'JFK', 'LAX', '2025-10-25T10:30:00', '2025-10-25T16:45:00'),
    ('Delta Airlines', 'GlobalSupplier', '320.50', 'JFK', 'LAX', '2025-10-25T14:00:00', '2025-10-25T20:15:00'),
    ('United Airlines', 'GlobalSupplier', '285.00', 'JFK', 'SFO', '2025-10-25T08:15:00', '2025-10-25T14:30:00'),
    ('American Airlines', 'GlobalSupplier', '450.75', 'JFK', 'LHR', '2025-10-26T18:00:00', '2025-10-27T06:15:00'),
    ('British Airways', 'GlobalSupplier', '475.00', 'JFK', 'LHR', '2025-10-26T20:30:00', '2025-10-27T08:45:00'),
    ('Lufthansa', 'EuroSupplier', '520.00', 'JFK', 'FRA', '2025-10-26T17:45:00', '2025-10-27T07:30:00'),
    ('Air France', 'EuroSupplier', '495.50', 'JFK', 'CDG', '2025-10-26T19:15:00', '2025-10-27T08:45:00'),
    ('Emirates', 'GlobalSupplier', '850.00', 'JFK', 'DXB', '2025-10-27T22:00:00', '2025-10-28T18:30:00'),
    ('Singapore Airlines', 'AsiaSupplier', '920.00', 'JFK', 'SIN', '2025-10-28T01:00:00', '2025-10-29T06:30:00'),
    ('Qantas', 'AsiaSupplier', '1100.00', 'JFK', 'SYD', '2025-10-28T10:00:00', '2025-10-29T18:45:00'),
    ('American Airlines', 'GlobalSupplier', '310.00', 'LAX', 'JFK', '2025-10-25T07:00:00', '2025-10-25T15:15:00'),
    ('Delta Airlines', 'GlobalSupplier', '295.00', 'LAX', 'JFK', '2025-10-25T11:30:00', '2025-10-25T19:45:00'),
    ('Southwest Airlines', 'GlobalSupplier', '275.00', 'LAX', 'LAS', '2025-10-25T09:00:00', '2025-10-25T10:15:00'),
    ('Alaska Airlines', 'GlobalSupplier', '189.99', 'LAX', 'SEA', '2025-10-25T12:00:00', '2025-10-25T14:45:00'),
    ('JetBlue', 'GlobalSupplier', '249.00', 'LAX', 'BOS', '2025-10-25T06:30:00', '2025-10-25T14:50:00'),
]


def _utc(value: str) -> datetime:
    return datetime.fromisoformat(value).replace(tzinfo=timezone.utc)


def seed_sample_flights(records: FlightRecordService) -> int:
    """
    Insert SAMPLE_FLIGHTS unless flights already exist.

    Returns count of flights inserted.
    """
    existing = records.search_flights(FlightSearchFilter(page=0, size=1))
    if existing.total_elements:
        logger.info(f'Flights already loaded ({existing.total_elements} rows), skipping seed')
        return 0

    for airline, supplier, fare, origin, destination, departure, arrival in SAMPLE_FLIGHTS:
        records.create_flight(FlightFields(
            airline=airline,
            supplier=supplier,
            fare=Decimal(fare),
            departure_airport=origin,
            destination_airport=destination,
            departure_time=_utc(departure),
            arrival_time=_utc(arrival),
        ))

    logger.info(f'Seeded {len(SAMPLE_FLIGHTS)} sample flights')
    return len(SAMPLE_FLIGHTS)
