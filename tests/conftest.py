"""Shared fixtures for FlightData tests."""

import json
import os
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional
from unittest.mock import MagicMock
from zoneinfo import ZoneInfo

# Keep the module-level engine off disk and the supplier quiet by default.
os.environ.setdefault('DATABASE_URL', 'sqlite://')
os.environ.setdefault('CRAZY_SUPPLIER_ENABLED', 'false')

import pytest
import requests
from sqlalchemy.pool import StaticPool

from flightdata.app import create_app
from flightdata.models import FlightFields, build_engine, build_session_factory, init_db
from flightdata.services import FlightRecordService, FlightService
from flightdata.suppliers import CrazySupplierClient

CET = ZoneInfo('CET')


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


class FakeSupplier:
    """Stand-in for CrazySupplierClient that records calls."""

    def __init__(self, offers=None, enabled: bool = True, error: Optional[Exception] = None):
        self.offers = offers or []
        self.enabled = enabled
        self.error = error
        self.calls: List[tuple] = []

    def search_flights(self, origin, destination, outbound_date, inbound_date):
        self.calls.append((origin, destination, outbound_date, inbound_date))
        if self.error is not None:
            raise self.error
        return list(self.offers)


@pytest.fixture
def engine():
    """Isolated in-memory database with the schema created."""
    db_engine = build_engine('sqlite://', poolclass=StaticPool)
    init_db(db_engine)
    yield db_engine
    db_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def records(session_factory) -> FlightRecordService:
    return FlightRecordService(session_factory)


@pytest.fixture
def make_fields():
    """Factory fixture for valid FlightFields (JFK -> LAX by default)."""

    def _make(**overrides) -> FlightFields:
        values = dict(
            airline='American Airlines',
            supplier='GlobalSupplier',
            fare=Decimal('299.99'),
            departure_airport='JFK',
            destination_airport='LAX',
            departure_time=utc(2025, 10, 25, 10, 30),
            arrival_time=utc(2025, 10, 25, 16, 45),
        )
        values.update(overrides)
        return FlightFields(**values)

    return _make


@pytest.fixture
def make_response():
    """Factory fixture for real requests.Response objects."""

    def _make(status_code: int, body=None, content: Optional[bytes] = None) -> requests.Response:
        response = requests.Response()
        response.status_code = status_code
        if content is None:
            content = b'' if body is None else json.dumps(body).encode()
        response._content = content
        return response

    return _make


@pytest.fixture
def http_session():
    """Mocked requests.Session for the supplier client."""
    session = MagicMock(spec=requests.Session)
    session.headers = {}
    return session


@pytest.fixture
def supplier_client(http_session) -> CrazySupplierClient:
    return CrazySupplierClient(
        base_url='http://supplier.test/api',
        timeout_seconds=2.0,
        enabled=True,
        session=http_session,
    )


@pytest.fixture
def lufthansa_offer() -> dict:
    return {
        'carrier': 'Lufthansa',
        'basePrice': 250,
        'tax': 50,
        'departureAirportName': 'JFK',
        'arrivalAirportName': 'LAX',
        'outboundDateTime': '2025-10-25T14:00:00',
        'inboundDateTime': '2025-10-25T20:15:00',
    }


@pytest.fixture
def make_app(records):
    """Factory fixture for a test app bound to the isolated database."""

    def _make(supplier=None):
        if supplier is None:
            session = MagicMock(spec=requests.Session)
            session.headers = {}
            supplier = CrazySupplierClient(enabled=False, session=session)
        service = FlightService(records=records, supplier=supplier, supplier_timezone=CET)
        app = create_app(flight_service=service, init_database=False)
        app.config['TESTING'] = True
        return app

    return _make


@pytest.fixture
def client(make_app):
    return make_app().test_client()
