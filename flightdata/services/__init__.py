"""
Flight services.

FlightRecordService owns the database; FlightService combines it with
the CrazySupplier integration and is what the API layer calls.
"""

from flightdata.services.flight_records import (
    FlightRecordService,
    FlightSearchFilter,
    FlightTimeRange,
    Page,
)
from flightdata.services.flight_service import FlightService, FlightSearchResult, PaginationInfo
from flightdata.services.mapper import FlightView, external_to_view, stored_to_view

__all__ = [
    'FlightRecordService',
    'FlightSearchFilter',
    'FlightTimeRange',
    'Page',
    'FlightService',
    'FlightSearchResult',
    'PaginationInfo',
    'FlightView',
    'external_to_view',
    'stored_to_view',
]
