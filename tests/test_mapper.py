"""Tests for projecting stored flights and supplier offers into FlightView."""

from datetime import datetime, timezone
from decimal import Decimal

from flightdata.models import Flight
from flightdata.services.mapper import (
    external_to_view,
    local_to_utc,
    stored_to_view,
    supplier_zone,
)
from flightdata.suppliers.crazy_supplier import SUPPLIER_NAME, SupplierOffer

CET = supplier_zone('CET')


def test_none_maps_to_none():
    assert stored_to_view(None) is None
    assert external_to_view(None, CET) is None


def test_stored_flight_keeps_id_and_reads_as_utc(make_fields):
    flight = Flight.create(make_fields())
    flight.id = 7

    view = stored_to_view(flight)

    assert view.id == 7
    assert not view.is_external
    assert view.departure_time == datetime(2025, 10, 25, 10, 30, tzinfo=timezone.utc)
    assert view.to_dict() == {
        'id': 7,
        'airline': 'American Airlines',
        'supplier': 'GlobalSupplier',
        'fare': 299.99,
        'departureAirport': 'JFK',
        'destinationAirport': 'LAX',
        'departureTime': '2025-10-25T10:30:00+00:00',
        'arrivalTime': '2025-10-25T16:45:00+00:00',
    }


def test_offer_maps_to_external_view(lufthansa_offer):
    view = external_to_view(SupplierOffer.from_dict(lufthansa_offer), CET)

    assert view.id is None
    assert view.is_external
    assert view.supplier == SUPPLIER_NAME
    assert view.airline == 'Lufthansa'
    assert view.fare == Decimal('300.00')
    assert view.departure_airport == 'JFK'
    assert view.destination_airport == 'LAX'


def test_summer_time_converted_with_dst_offset(lufthansa_offer):
    view = external_to_view(SupplierOffer.from_dict(lufthansa_offer), CET)

    # 2025-10-25 is still CEST (UTC+2)
    assert view.departure_time == datetime(2025, 10, 25, 12, 0, tzinfo=timezone.utc)
    assert view.arrival_time == datetime(2025, 10, 25, 18, 15, tzinfo=timezone.utc)


def test_winter_time_converted_with_standard_offset():
    # Clocks went back on 2025-10-26
    assert local_to_utc(datetime(2025, 10, 27, 14, 0), CET) == datetime(2025, 10, 27, 13, 0, tzinfo=timezone.utc)


def test_fare_serialized_with_two_decimals():
    offer = SupplierOffer.from_dict({
        'carrier': 'Air France',
        'basePrice': '100.005',
        'tax': 0,
        'departureAirportName': 'CDG',
        'arrivalAirportName': 'JFK',
        'outboundDateTime': '2025-12-01T09:00:00',
        'inboundDateTime': '2025-12-01T17:00:00',
    })

    assert external_to_view(offer, CET).to_dict()['fare'] == 100.0
