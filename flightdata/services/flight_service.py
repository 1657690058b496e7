"""
Flight service - entry point for the API layer.

Coordinates stored flight records and the CrazySupplier integration:
- CRUD operations delegate to FlightRecordService and return FlightViews
- Searches combine one page of stored flights with supplier offers

Failure isolation:
Only the stored-record query may fail a search. Supplier problems are
absorbed twice: inside CrazySupplierClient (every fault becomes an
empty list) and again here (anything that still escapes contributes
zero supplier flights).
"""

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo
from typing import List, Optional, Tuple

from flightdata.config import config
from flightdata.models.flight import FlightChanges, FlightFields, as_utc
from flightdata.services.flight_records import (
    FlightRecordService,
    FlightSearchFilter,
    FlightTimeRange,
)
from flightdata.services.mapper import (
    FlightView,
    external_to_view,
    stored_to_view,
    supplier_zone,
)
from flightdata.suppliers.crazy_supplier import CrazySupplierClient

logger = logging.getLogger(__name__)


@dataclass
class PaginationInfo:
    """Pagination block of a search response."""
    current_page: int
    page_size: int
    total_elements: int
    total_pages: int

    def to_dict(self) -> dict:
        return {
            'currentPage': self.current_page,
            'pageSize': self.page_size,
            'totalElements': self.total_elements,
            'totalPages': self.total_pages,
        }


@dataclass
class FlightSearchResult:
    """Combined search result: stored flights first, then supplier flights."""
    flights: List[FlightView]
    pagination: PaginationInfo

    def to_dict(self) -> dict:
        return {
            'flights': [flight.to_dict() for flight in self.flights],
            'pagination': self.pagination.to_dict(),
        }


class FlightService:
    """
    Orchestrates flight operations across the database and CrazySupplier.
    """

    def __init__(
        self,
        records: Optional[FlightRecordService] = None,
        supplier: Optional[CrazySupplierClient] = None,
        supplier_timezone: Optional[tzinfo] = None,
    ):
        self.records = records or FlightRecordService()
        self.supplier = supplier or CrazySupplierClient.from_config()
        self.supplier_timezone = supplier_timezone or supplier_zone(config.supplier.timezone)

    # -------------------------------------------------------------------------
    # CRUD
    # -------------------------------------------------------------------------

    def create_flight(self, data: FlightFields) -> FlightView:
        logger.info(f'Creating flight for airline: {data.airline}')
        flight = self.records.create_flight(data)
        return stored_to_view(flight)

    def get_flight(self, flight_id: int) -> FlightView:
        logger.info(f'Retrieving flight with ID: {flight_id}')
        return stored_to_view(self.records.get_flight(flight_id))

    def update_flight(self, flight_id: int, changes: FlightChanges) -> FlightView:
        logger.info(f'Updating flight with ID: {flight_id}')
        flight = self.records.update_flight(flight_id, changes)
        return stored_to_view(flight)

    def delete_flight(self, flight_id: int) -> None:
        logger.info(f'Deleting flight with ID: {flight_id}')
        self.records.delete_flight(flight_id)

    # -------------------------------------------------------------------------
    # Search
    # -------------------------------------------------------------------------

    def search_flights(
        self,
        origin: Optional[str] = None,
        destination: Optional[str] = None,
        airline: Optional[str] = None,
        time_range: Optional[FlightTimeRange] = None,
        page: int = 0,
        size: int = 20,
    ) -> FlightSearchResult:
        """
        Search stored flights and, for a concrete route, CrazySupplier.

        Pagination applies to stored flights only. Supplier flights are
        appended unpaginated to whichever page was requested, and the
        totals describe the combined list of this response rather than
        the whole catalog.
        """
        logger.info(f'Searching flights - origin: {origin}, destination: {destination}, airline: {airline}')

        time_range = time_range or FlightTimeRange()

        stored_page = self.records.search_flights(FlightSearchFilter(
            origin=origin,
            destination=destination,
            airline=airline,
            time_range=time_range,
            page=page,
            size=size,
        ))

        flights = [stored_to_view(flight) for flight in stored_page.items]
        logger.debug(f'Found {len(flights)} flights in database')

        if self._should_query_supplier(origin, destination):
            supplier_flights = self._fetch_from_supplier(origin, destination, airline, time_range)
            flights.extend(supplier_flights)
            logger.info(
                f'Combined {len(stored_page.items)} database flights with '
                f'{len(supplier_flights)} CrazySupplier flights'
            )

        total = len(flights)
        pagination = PaginationInfo(
            current_page=stored_page.page,
            page_size=stored_page.size,
            total_elements=total,
            total_pages=math.ceil(total / stored_page.size) if stored_page.size > 0 else 0,
        )

        logger.info(f'Search completed. Returning {total} total flights')
        return FlightSearchResult(flights=flights, pagination=pagination)

    def _should_query_supplier(self, origin: Optional[str], destination: Optional[str]) -> bool:
        """
        The supplier is only asked about concrete routes.

        Skipping it is normal operation, not degradation.
        """
        if not self.supplier.enabled:
            logger.debug('CrazySupplier integration is disabled')
            return False

        if not (origin and origin.strip()) or not (destination and destination.strip()):
            logger.debug('Skipping CrazySupplier query - origin or destination is missing')
            return False

        return True

    def supplier_dates(self, time_range: FlightTimeRange) -> Tuple[date, date]:
        """
        Calendar dates to send to the supplier, in its own time zone.

        outbound: date of departure_from, else today
        inbound:  date of arrival_to, else outbound + 1 day
        """
        zone = self.supplier_timezone

        if time_range.departure_from is not None:
            outbound = _local_date(time_range.departure_from, zone)
        else:
            outbound = datetime.now(zone).date()

        if time_range.arrival_to is not None:
            inbound = _local_date(time_range.arrival_to, zone)
        else:
            inbound = outbound + timedelta(days=1)

        return outbound, inbound

    def _fetch_from_supplier(
        self,
        origin: str,
        destination: str,
        airline: Optional[str],
        time_range: FlightTimeRange,
    ) -> List[FlightView]:
        """Supplier flights for the route; empty on any error."""
        try:
            outbound, inbound = self.supplier_dates(time_range)
            logger.debug(f'Fetching flights from CrazySupplier for route {origin} -> {destination}')

            offers = self.supplier.search_flights(
                origin.strip().upper(),
                destination.strip().upper(),
                outbound,
                inbound,
            )
            flights = [external_to_view(offer, self.supplier_timezone) for offer in offers]

            # Stored flights were filtered by the query; supplier results arrive unfiltered
            if airline and airline.strip():
                term = airline.strip().lower()
                flights = [f for f in flights if f.airline and term in f.airline.lower()]
                logger.debug(f"Filtered CrazySupplier results by airline '{airline}': {len(flights)} flights remain")

            logger.info(f'Retrieved {len(flights)} flights from CrazySupplier')
            return flights

        except Exception:
            logger.exception('Error fetching from CrazySupplier, continuing with database results only')
            return []


def _local_date(value: datetime, zone: tzinfo) -> date:
    """Calendar date of an instant in `zone`. Naive input is treated as UTC."""
    return as_utc(value).astimezone(zone).date()
