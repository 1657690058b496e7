"""Tests for the CrazySupplier client: retry policy and offer validation."""

from datetime import date, datetime
from decimal import Decimal
from unittest.mock import call, patch

import pytest
import requests

from flightdata.suppliers.crazy_supplier import (
    AttemptStatus,
    CrazySupplierClient,
    SupplierOffer,
    SupplierSearchRequest,
)

OUTBOUND = date(2025, 10, 25)
INBOUND = date(2025, 10, 26)


@pytest.fixture
def sleep():
    with patch('flightdata.suppliers.crazy_supplier.time.sleep') as mock_sleep:
        yield mock_sleep


def _search(client):
    return client.search_flights('JFK', 'LAX', OUTBOUND, INBOUND)


class TestRequest:

    def test_payload_uses_supplier_field_names(self):
        request = SupplierSearchRequest('JFK', 'LAX', OUTBOUND, INBOUND)

        assert request.to_payload() == {
            'from': 'JFK',
            'to': 'LAX',
            'outboundDate': '2025-10-25',
            'inboundDate': '2025-10-26',
        }

    def test_posts_to_flights_endpoint(self, supplier_client, http_session, make_response, lufthansa_offer):
        http_session.post.return_value = make_response(200, [lufthansa_offer])

        _search(supplier_client)

        http_session.post.assert_called_once_with(
            'http://supplier.test/api/flights',
            json={'from': 'JFK', 'to': 'LAX', 'outboundDate': '2025-10-25', 'inboundDate': '2025-10-26'},
            timeout=2.0,
        )
        assert http_session.headers['Accept'] == 'application/json'
        assert http_session.headers['Content-Type'] == 'application/json'

    def test_disabled_client_makes_no_request(self, http_session):
        client = CrazySupplierClient(enabled=False, session=http_session)

        assert _search(client) == []
        http_session.post.assert_not_called()


class TestRetryPolicy:

    def test_client_error_is_not_retried(self, supplier_client, http_session, make_response, sleep):
        http_session.post.return_value = make_response(400, {'error': 'bad request'})

        assert _search(supplier_client) == []
        assert http_session.post.call_count == 1
        sleep.assert_not_called()

    def test_server_error_retried_with_backoff(self, supplier_client, http_session, make_response, sleep):
        http_session.post.return_value = make_response(503)

        assert _search(supplier_client) == []
        assert http_session.post.call_count == 3
        assert sleep.call_args_list == [call(1.0), call(2.0)]

    def test_network_errors_retried(self, supplier_client, http_session, sleep):
        http_session.post.side_effect = requests.exceptions.ConnectionError('refused')

        assert _search(supplier_client) == []
        assert http_session.post.call_count == 3
        assert sleep.call_count == 2

    def test_recovers_after_transient_failure(self, supplier_client, http_session, make_response,
                                              lufthansa_offer, sleep):
        http_session.post.side_effect = [
            requests.exceptions.Timeout('slow'),
            make_response(500),
            make_response(200, [lufthansa_offer]),
        ]

        offers = _search(supplier_client)

        assert [offer.carrier for offer in offers] == ['Lufthansa']
        assert sleep.call_args_list == [call(1.0), call(2.0)]

    def test_retry_loop_reports_exhaustion(self, supplier_client, http_session, make_response, sleep):
        http_session.post.return_value = make_response(502)

        result = supplier_client._run_attempts({})

        assert result.status is AttemptStatus.EXHAUSTED
        assert result.detail == 'HTTP 502'
        assert http_session.post.call_count == 3

    def test_client_error_ends_retry_loop(self, supplier_client, http_session, make_response, sleep):
        http_session.post.return_value = make_response(404)

        assert supplier_client._run_attempts({}).status is AttemptStatus.CLIENT_FAULT
        sleep.assert_not_called()

    def test_malformed_body_is_not_retried(self, supplier_client, http_session, make_response, sleep):
        http_session.post.return_value = make_response(200, content=b'{not json')

        assert _search(supplier_client) == []
        assert http_session.post.call_count == 1
        sleep.assert_not_called()

    def test_non_list_body_is_unexpected(self, supplier_client, http_session, make_response):
        http_session.post.return_value = make_response(200, {'flights': []})

        result = supplier_client._attempt({})

        assert result.status is AttemptStatus.UNEXPECTED_FAULT

    @pytest.mark.parametrize('content', [b'', b'null'])
    def test_null_body_is_empty_success(self, supplier_client, http_session, make_response, content):
        http_session.post.return_value = make_response(200, content=content)

        result = supplier_client._attempt({})

        assert result.status is AttemptStatus.SUCCESS
        assert result.offers == []

    def test_unexpected_exception_never_escapes(self, supplier_client, http_session):
        http_session.post.side_effect = RuntimeError('boom')

        assert _search(supplier_client) == []
        assert http_session.post.call_count == 1

    def test_backoff_is_capped(self):
        client = CrazySupplierClient(enabled=True, max_attempts=5)

        assert [client.backoff_delay(n) for n in range(1, 5)] == [1.0, 2.0, 4.0, 5.0]


class TestOffers:

    def test_invalid_offers_filtered(self, supplier_client, http_session, make_response, lufthansa_offer):
        negative_price = dict(lufthansa_offer, basePrice=-1)
        backwards = dict(lufthansa_offer, inboundDateTime='2025-10-25T13:00:00')
        bad_airport = dict(lufthansa_offer, arrivalAirportName='LA')
        trailing_newline = dict(lufthansa_offer, arrivalAirportName='LAX\n')
        http_session.post.return_value = make_response(
            200, [negative_price, lufthansa_offer, backwards, bad_airport, trailing_newline, 'garbage'],
        )

        offers = _search(supplier_client)

        assert len(offers) == 1
        assert offers[0].carrier == 'Lufthansa'

    @pytest.mark.parametrize('field,value', [
        ('basePrice', float('nan')),
        ('tax', float('inf')),
        ('basePrice', '-Infinity'),
    ])
    def test_non_finite_price_drops_only_that_offer(self, supplier_client, http_session, make_response,
                                                    lufthansa_offer, field, value):
        broken = dict(lufthansa_offer, **{field: value})
        http_session.post.return_value = make_response(200, [lufthansa_offer, broken])

        offers = _search(supplier_client)

        assert len(offers) == 1
        assert offers[0].total_fare == Decimal('300.00')

    def test_from_dict_parses_supplier_fields(self, lufthansa_offer):
        offer = SupplierOffer.from_dict(lufthansa_offer)

        assert offer.base_price == Decimal('250')
        assert offer.tax == Decimal('50')
        assert offer.departure_airport == 'JFK'
        assert offer.arrival_airport == 'LAX'
        assert offer.outbound_time == datetime(2025, 10, 25, 14, 0)
        assert offer.is_valid()

    def test_total_fare(self):
        offer = SupplierOffer.from_dict({'basePrice': 200, 'tax': 40})

        assert offer.total_fare == Decimal('240.00')

    def test_total_fare_without_prices_is_zero(self):
        offer = SupplierOffer.from_dict({'carrier': 'Lufthansa'})

        assert offer.total_fare == Decimal('0')
        assert not offer.is_valid()

    def test_datetime_with_offset_rejected(self, lufthansa_offer):
        offer = SupplierOffer.from_dict(dict(lufthansa_offer, outboundDateTime='2025-10-25T14:00:00+02:00'))

        assert offer.outbound_time is None
        assert not offer.is_valid()
