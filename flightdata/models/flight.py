"""
Flight model - stored flight records.

One row per flight offered by an internal supplier. Rows are created,
partially updated and deleted through FlightRecordService; the search
endpoint reads them back ordered by departure time.

Design notes:
- Timestamps are stored as naive UTC (portable across SQLite/MySQL/PostgreSQL)
  and converted back to aware UTC when read through as_utc().
- Every create and update re-validates the full record before anything is
  written, so a rejected change never leaves a half-updated row behind.
"""

import re
from dataclasses import dataclass, fields
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

from sqlalchemy import String, Integer, Numeric, DateTime, Index
from sqlalchemy.orm import Mapped, mapped_column

from flightdata.errors import ValidationError
from flightdata.models.base import Base

AIRPORT_CODE_PATTERN = re.compile(r'[A-Z]{3}')
MAX_NAME_LENGTH = 100


# -------------------------------------------------------------------------
# Time helpers
# -------------------------------------------------------------------------

def utcnow() -> datetime:
    """Current time as naive UTC, the storage representation."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_utc_naive(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize a datetime to naive UTC. Naive input is assumed to be UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to a stored (naive UTC) datetime."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def normalize_airport_code(code: Optional[str]) -> Optional[str]:
    """Uppercase and strip an airport code. Returns None if input is None."""
    if code is None:
        return None
    return code.strip().upper()


# -------------------------------------------------------------------------
# Input structures
# -------------------------------------------------------------------------

class _Unset:
    """Marker for a field that was not supplied in a partial update."""

    def __repr__(self) -> str:
        return 'UNSET'

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


@dataclass
class FlightFields:
    """All fields needed to create a flight."""
    airline: Optional[str] = None
    supplier: Optional[str] = None
    fare: Optional[Decimal] = None
    departure_airport: Optional[str] = None
    destination_airport: Optional[str] = None
    departure_time: Optional[datetime] = None
    arrival_time: Optional[datetime] = None


@dataclass
class FlightChanges:
    """
    Partial update of a flight.

    Every field defaults to UNSET, meaning "leave unchanged". There is no way
    to clear a field: all flight fields are required.
    """
    airline: Union[str, _Unset] = UNSET
    supplier: Union[str, _Unset] = UNSET
    fare: Union[Decimal, _Unset] = UNSET
    departure_airport: Union[str, _Unset] = UNSET
    destination_airport: Union[str, _Unset] = UNSET
    departure_time: Union[datetime, _Unset] = UNSET
    arrival_time: Union[datetime, _Unset] = UNSET

    def supplied(self) -> Dict[str, Any]:
        """Fields explicitly supplied by the caller."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not UNSET
        }


def validate_flight_fields(
    airline: Optional[str],
    supplier: Optional[str],
    fare: Optional[Decimal],
    departure_airport: Optional[str],
    destination_airport: Optional[str],
    departure_time: Optional[datetime],
    arrival_time: Optional[datetime],
) -> List[str]:
    """
    Check the flight invariants and return every violation found.

    Airport codes are expected to be normalized already.
    """
    errors = []

    if airline is None or not airline.strip():
        errors.append('Airline is required')
    elif len(airline) > MAX_NAME_LENGTH:
        errors.append(f'Airline must be at most {MAX_NAME_LENGTH} characters')

    if supplier is None or not supplier.strip():
        errors.append('Supplier is required')
    elif len(supplier) > MAX_NAME_LENGTH:
        errors.append(f'Supplier must be at most {MAX_NAME_LENGTH} characters')

    if fare is None:
        errors.append('Fare is required')
    elif fare < 0:
        errors.append('Fare cannot be negative')

    if departure_airport is None or not AIRPORT_CODE_PATTERN.fullmatch(departure_airport):
        errors.append('Departure airport must be a 3-letter code')
    if destination_airport is None or not AIRPORT_CODE_PATTERN.fullmatch(destination_airport):
        errors.append('Destination airport must be a 3-letter code')
    if departure_airport and departure_airport == destination_airport:
        errors.append('Departure and destination airports cannot be the same')

    if departure_time is None:
        errors.append('Departure time is required')
    if arrival_time is None:
        errors.append('Arrival time is required')
    if departure_time is not None and arrival_time is not None and arrival_time <= departure_time:
        errors.append('Arrival time must be after departure time')

    return errors


class Flight(Base):
    """
    A stored flight record.

    Fields:
        airline: Operating airline name (e.g., 'American Airlines')
        supplier: Name of the system the flight came from (e.g., 'GlobalSupplier')
        fare: Total fare, non-negative, two decimal places
        departure_airport / destination_airport: 3-letter IATA codes
        departure_time / arrival_time: UTC timestamps
    """

    __tablename__ = 'flights'

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    airline: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
        index=True,
        comment='Operating airline name'
    )

    supplier: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
        index=True,
        comment='Origin system of the record'
    )

    fare: Mapped[Decimal] = mapped_column(
        Numeric(10, 2, asdecimal=True),
        nullable=False,
        comment='Total fare'
    )

    departure_airport: Mapped[str] = mapped_column(
        String(3),
        nullable=False,
        index=True,
        comment='Departure IATA code'
    )

    destination_airport: Mapped[str] = mapped_column(
        String(3),
        nullable=False,
        index=True,
        comment='Destination IATA code'
    )

    departure_time: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        index=True,
        comment='Departure time (UTC)'
    )

    arrival_time: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        comment='Arrival time (UTC)'
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=utcnow,
        comment='Record creation timestamp'
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        comment='Last update timestamp'
    )

    __table_args__ = (
        # Route searches filter on both airports
        Index('ix_flights_route', 'departure_airport', 'destination_airport'),
    )

    def __repr__(self) -> str:
        return f'<Flight {self.id} {self.airline} {self.departure_airport}->{self.destination_airport}>'

    @classmethod
    def create(cls, data: FlightFields) -> 'Flight':
        """
        Build a new, validated flight.

        Airport codes are uppercased and timestamps normalized to UTC
        before the invariants are checked.

        Raises:
            ValidationError if any required field is missing or malformed.
        """
        values = {
            'airline': data.airline,
            'supplier': data.supplier,
            'fare': data.fare,
            'departure_airport': normalize_airport_code(data.departure_airport),
            'destination_airport': normalize_airport_code(data.destination_airport),
            'departure_time': to_utc_naive(data.departure_time),
            'arrival_time': to_utc_naive(data.arrival_time),
        }

        errors = validate_flight_fields(**values)
        if errors:
            raise ValidationError(errors)

        return cls(**values)

    def apply_changes(self, changes: FlightChanges) -> None:
        """
        Overlay the supplied fields and re-validate the whole record.

        Nothing is modified if the resulting record would be invalid.

        Raises:
            ValidationError if the merged record breaks an invariant.
        """
        supplied = changes.supplied()

        for key in ('departure_airport', 'destination_airport'):
            if key in supplied:
                supplied[key] = normalize_airport_code(supplied[key])
        for key in ('departure_time', 'arrival_time'):
            if key in supplied:
                supplied[key] = to_utc_naive(supplied[key])

        merged = {
            'airline': self.airline,
            'supplier': self.supplier,
            'fare': self.fare,
            'departure_airport': self.departure_airport,
            'destination_airport': self.destination_airport,
            'departure_time': self.departure_time,
            'arrival_time': self.arrival_time,
        }
        merged.update(supplied)

        errors = validate_flight_fields(**merged)
        if errors:
            raise ValidationError(errors)

        for key, value in supplied.items():
            setattr(self, key, value)
