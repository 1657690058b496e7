"""
Flight record service - CRUD and search over stored flights.

This is the only component that talks to the database. Storage errors
(sqlalchemy.exc.SQLAlchemyError) are not caught here: they are the one
class of failure that is allowed to fail a request.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Generic, List, Optional, TypeVar

from sqlalchemy import func, select
from sqlalchemy.orm import sessionmaker

from flightdata.errors import FlightNotFoundError
from flightdata.models.base import SessionLocal, get_session
from flightdata.models.flight import (
    Flight,
    FlightChanges,
    FlightFields,
    normalize_airport_code,
    to_utc_naive,
)

logger = logging.getLogger(__name__)

T = TypeVar('T')


@dataclass(frozen=True)
class FlightTimeRange:
    """
    Optional, inclusive departure/arrival bounds.

    Any subset of the four bounds may be given; absent bounds impose
    no constraint.
    """
    departure_from: Optional[datetime] = None
    departure_to: Optional[datetime] = None
    arrival_from: Optional[datetime] = None
    arrival_to: Optional[datetime] = None


@dataclass(frozen=True)
class FlightSearchFilter:
    """
    Search criteria for stored flights.

    `size` must already be clamped to the configured maximum by the caller.
    """
    origin: Optional[str] = None
    destination: Optional[str] = None
    airline: Optional[str] = None
    time_range: FlightTimeRange = field(default_factory=FlightTimeRange)
    page: int = 0
    size: int = 20


@dataclass
class Page(Generic[T]):
    """One page of results plus the total count reported by the store."""
    items: List[T]
    page: int
    size: int
    total_elements: int

    @property
    def total_pages(self) -> int:
        if self.size <= 0:
            return 0
        return math.ceil(self.total_elements / self.size)


class FlightRecordService:
    """
    Persistence operations for flight records.

    Each call runs in its own session; returned Flight objects are detached
    and safe to read after the call returns.
    """

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self.session_factory = session_factory or SessionLocal

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def create_flight(self, data: FlightFields) -> Flight:
        """
        Validate and persist a new flight.

        Raises:
            ValidationError if any field is missing or malformed.
        """
        logger.debug(f'Creating new flight: {data.airline} from {data.departure_airport} to {data.destination_airport}')

        flight = Flight.create(data)

        with get_session(self.session_factory) as session:
            session.add(flight)
            session.flush()

        logger.info(f'Flight created with ID: {flight.id}')
        return flight

    def update_flight(self, flight_id: int, changes: FlightChanges) -> Flight:
        """
        Apply a partial update to an existing flight.

        Only fields supplied in `changes` are overwritten; the merged record
        is re-validated before it is written.

        Raises:
            FlightNotFoundError if no flight has this ID.
            ValidationError if the merged record is invalid.
        """
        logger.debug(f'Updating flight with ID: {flight_id}')

        with get_session(self.session_factory) as session:
            flight = session.get(Flight, flight_id)
            if flight is None:
                raise FlightNotFoundError(flight_id)

            flight.apply_changes(changes)
            session.flush()

        logger.info(f'Flight updated with ID: {flight_id}')
        return flight

    def delete_flight(self, flight_id: int) -> None:
        """
        Delete a flight.

        Raises:
            FlightNotFoundError if no flight has this ID.
        """
        logger.debug(f'Deleting flight with ID: {flight_id}')

        with get_session(self.session_factory) as session:
            flight = session.get(Flight, flight_id)
            if flight is None:
                raise FlightNotFoundError(flight_id)
            session.delete(flight)

        logger.info(f'Flight deleted with ID: {flight_id}')

    def get_flight(self, flight_id: int) -> Flight:
        """
        Load a flight by ID.

        Raises:
            FlightNotFoundError if no flight has this ID.
        """
        logger.debug(f'Retrieving flight with ID: {flight_id}')

        with self.session_factory() as session:
            flight = session.get(Flight, flight_id)

        if flight is None:
            raise FlightNotFoundError(flight_id)
        return flight

    # -------------------------------------------------------------------------
    # Search
    # -------------------------------------------------------------------------

    def search_flights(self, search: FlightSearchFilter) -> Page[Flight]:
        """
        Multi-predicate, paginated search.

        - origin/destination: exact match, case-insensitive for the caller
        - airline: case-insensitive substring
        - time range: inclusive bounds, each optional
        - ordered by departure time ascending (ID breaks ties so pages
          never overlap or skip rows)
        """
        logger.debug(
            f'Searching flights with criteria - origin: {search.origin}, '
            f'destination: {search.destination}, airline: {search.airline}'
        )

        conditions = []

        origin = normalize_airport_code(search.origin)
        if origin:
            conditions.append(Flight.departure_airport == origin)

        destination = normalize_airport_code(search.destination)
        if destination:
            conditions.append(Flight.destination_airport == destination)

        if search.airline and search.airline.strip():
            term = search.airline.strip()
            conditions.append(Flight.airline.icontains(term, autoescape=True))

        time_range = search.time_range
        if time_range.departure_from is not None:
            conditions.append(Flight.departure_time >= to_utc_naive(time_range.departure_from))
        if time_range.departure_to is not None:
            conditions.append(Flight.departure_time <= to_utc_naive(time_range.departure_to))
        if time_range.arrival_from is not None:
            conditions.append(Flight.arrival_time >= to_utc_naive(time_range.arrival_from))
        if time_range.arrival_to is not None:
            conditions.append(Flight.arrival_time <= to_utc_naive(time_range.arrival_to))

        query = (
            select(Flight)
            .where(*conditions)
            .order_by(Flight.departure_time.asc(), Flight.id.asc())
            .offset(search.page * search.size)
            .limit(search.size)
        )
        count_query = select(func.count()).select_from(Flight).where(*conditions)

        with self.session_factory() as session:
            flights = list(session.scalars(query))
            total = session.scalar(count_query) or 0

        logger.debug(f'Found {len(flights)} of {total} matching flights in database')

        return Page(
            items=flights,
            page=search.page,
            size=search.size,
            total_elements=total,
        )
