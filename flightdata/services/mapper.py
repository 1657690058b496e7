"""
Result mapping - the single response shape for all flights.

Stored flights and supplier offers are both projected into FlightView.
The only visible difference is the ID: supplier flights have none,
because they are never persisted.
"""

from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from decimal import Decimal
from functools import lru_cache
from typing import Optional

from zoneinfo import ZoneInfo

from flightdata.models.flight import Flight, as_utc
from flightdata.suppliers.crazy_supplier import SUPPLIER_NAME, SupplierOffer


@dataclass
class FlightView:
    """
    Response projection of a flight.

    Timestamps are aware UTC datetimes.
    """
    id: Optional[int]
    airline: str
    supplier: str
    fare: Decimal
    departure_airport: str
    destination_airport: str
    departure_time: datetime
    arrival_time: datetime

    @property
    def is_external(self) -> bool:
        return self.id is None

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict for API responses."""
        return {
            'id': self.id,
            'airline': self.airline,
            'supplier': self.supplier,
            'fare': float(Decimal(self.fare).quantize(Decimal('0.01'))),
            'departureAirport': self.departure_airport,
            'destinationAirport': self.destination_airport,
            'departureTime': self.departure_time.isoformat(),
            'arrivalTime': self.arrival_time.isoformat(),
        }


@lru_cache(maxsize=8)
def supplier_zone(name: str) -> tzinfo:
    """
    Resolve a named zone from the platform time zone database.

    A named zone (not a fixed offset) is required: supplier times
    follow daylight saving rules.
    """
    return ZoneInfo(name)


def local_to_utc(value: Optional[datetime], zone: tzinfo) -> Optional[datetime]:
    """Interpret a naive local date-time in `zone` and convert it to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=zone)
    return value.astimezone(timezone.utc)


def stored_to_view(flight: Optional[Flight]) -> Optional[FlightView]:
    """Project a stored flight, keeping its ID."""
    if flight is None:
        return None
    return FlightView(
        id=flight.id,
        airline=flight.airline,
        supplier=flight.supplier,
        fare=flight.fare,
        departure_airport=flight.departure_airport,
        destination_airport=flight.destination_airport,
        departure_time=as_utc(flight.departure_time),
        arrival_time=as_utc(flight.arrival_time),
    )


def external_to_view(offer: Optional[SupplierOffer], source_zone: tzinfo) -> Optional[FlightView]:
    """
    Project a supplier offer.

    The supplier label is always SUPPLIER_NAME (the carrier becomes the
    airline), the fare is base price plus tax, and local supplier times
    are converted to UTC.
    """
    if offer is None:
        return None
    return FlightView(
        id=None,
        airline=offer.carrier,
        supplier=SUPPLIER_NAME,
        fare=offer.total_fare,
        departure_airport=offer.departure_airport,
        destination_airport=offer.arrival_airport,
        departure_time=local_to_utc(offer.outbound_time, source_zone),
        arrival_time=local_to_utc(offer.inbound_time, source_zone),
    )
