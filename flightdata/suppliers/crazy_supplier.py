"""
CrazySupplier API client.

Handles communication with the CrazySupplier flight search API, including:
- Request building (route + calendar dates in the supplier's time zone)
- Retry with exponential backoff on server and network errors
- Response validation (invalid offers are dropped)
- Graceful degradation: every failure ends in an empty list

Request body (POST /flights):
    {"from": "JFK", "to": "LAX", "outboundDate": "2025-10-25", "inboundDate": "2025-10-26"}

Response body (list of offers):
    carrier              - Airline name
    basePrice            - Price before tax
    tax                  - Tax amount
    departureAirportName - 3-letter IATA code
    arrivalAirportName   - 3-letter IATA code
    outboundDateTime     - Local date-time, no offset (supplier time zone)
    inboundDateTime      - Local date-time, no offset (supplier time zone)

Attempt outcomes:
    SUCCESS          - 2xx; offers parsed and validated
    CLIENT_FAULT     - 4xx; our request is wrong, repeating will not help
    RETRYABLE_FAULT  - 5xx, timeout, refused connection, broken transport
    UNEXPECTED_FAULT - malformed body or anything else; not retried

Search outcome after retries:
    EXHAUSTED        - every attempt was a RETRYABLE_FAULT
"""

import logging
import re
import time
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, List, Optional

import requests

from flightdata.config import config

logger = logging.getLogger(__name__)

# Supplier label for every flight that came from this API
SUPPLIER_NAME = 'CrazySupplier'

AIRPORT_CODE_PATTERN = re.compile(r'[A-Z]{3}')


def _parse_decimal(value: Any) -> Optional[Decimal]:
    """Parse a JSON number (or numeric string) into Decimal, or None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        parsed = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    # JSON NaN and Infinity tokens are not prices
    if not parsed.is_finite():
        return None
    return parsed


def _parse_local_datetime(value: Any) -> Optional[datetime]:
    """
    Parse an ISO local date-time ('2025-10-25T14:00:00').

    Values carrying an explicit offset are not in the supplier's
    documented format and are rejected.
    """
    if not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        return None
    return parsed


@dataclass(frozen=True)
class SupplierSearchRequest:
    """Search payload sent to CrazySupplier."""
    origin: str
    destination: str
    outbound_date: date
    inbound_date: date

    def to_payload(self) -> dict:
        """Convert to the supplier's JSON request body."""
        return {
            'from': self.origin,
            'to': self.destination,
            'outboundDate': self.outbound_date.isoformat(),
            'inboundDate': self.inbound_date.isoformat(),
        }


@dataclass
class SupplierOffer:
    """
    A single flight option returned by CrazySupplier.

    Ephemeral: offers are never persisted. Date-times are naive and
    expressed in the supplier's time zone.
    """
    carrier: Optional[str]
    base_price: Optional[Decimal]
    tax: Optional[Decimal]
    departure_airport: Optional[str]
    arrival_airport: Optional[str]
    outbound_time: Optional[datetime]
    inbound_time: Optional[datetime]

    @classmethod
    def from_dict(cls, data: Any) -> 'SupplierOffer':
        """
        Parse one item of the supplier response.

        Never raises: unparseable values become None, which makes the
        offer invalid so it gets dropped by is_valid().
        """
        if not isinstance(data, dict):
            data = {}

        carrier = data.get('carrier')
        departure = data.get('departureAirportName')
        arrival = data.get('arrivalAirportName')

        return cls(
            carrier=carrier if isinstance(carrier, str) else None,
            base_price=_parse_decimal(data.get('basePrice')),
            tax=_parse_decimal(data.get('tax')),
            departure_airport=departure if isinstance(departure, str) else None,
            arrival_airport=arrival if isinstance(arrival, str) else None,
            outbound_time=_parse_local_datetime(data.get('outboundDateTime')),
            inbound_time=_parse_local_datetime(data.get('inboundDateTime')),
        )

    @property
    def total_fare(self) -> Decimal:
        """Base price plus tax; 0 when either part is missing."""
        if self.base_price is None or self.tax is None:
            return Decimal('0.00')
        return (self.base_price + self.tax).quantize(Decimal('0.01'))

    def is_valid(self) -> bool:
        """Check that the offer is complete and internally consistent."""
        return (
            bool(self.carrier and self.carrier.strip())
            and self.base_price is not None and self.base_price >= 0
            and self.tax is not None and self.tax >= 0
            and self.departure_airport is not None
            and AIRPORT_CODE_PATTERN.fullmatch(self.departure_airport) is not None
            and self.arrival_airport is not None
            and AIRPORT_CODE_PATTERN.fullmatch(self.arrival_airport) is not None
            and self.outbound_time is not None
            and self.inbound_time is not None
            and self.inbound_time > self.outbound_time
        )


class AttemptStatus(str, Enum):
    """Classification of an HTTP attempt, or of the whole retry loop."""
    SUCCESS = 'success'
    CLIENT_FAULT = 'client_fault'
    RETRYABLE_FAULT = 'retryable_fault'
    UNEXPECTED_FAULT = 'unexpected_fault'
    EXHAUSTED = 'exhausted'


@dataclass
class AttemptResult:
    """Outcome of one call to the supplier, or of the whole retry loop."""
    status: AttemptStatus
    offers: List[SupplierOffer] = field(default_factory=list)
    detail: str = ''


class CrazySupplierClient:
    """
    Client for the CrazySupplier API.

    Handles:
    - POST requests to /flights
    - Up to max_attempts attempts with exponential backoff between them
    - Validation of returned offers

    search_flights() never raises: a disabled integration, a client error,
    exhausted retries and unexpected faults all produce an empty list.
    """

    def __init__(
        self,
        base_url: str = 'http://localhost:8089/api',
        timeout_seconds: float = 5.0,
        enabled: bool = True,
        max_attempts: int = 3,
        initial_backoff_seconds: float = 1.0,
        backoff_multiplier: float = 2.0,
        max_backoff_seconds: float = 5.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.timeout_seconds = timeout_seconds
        self.enabled = enabled
        self.max_attempts = max(1, max_attempts)
        self.initial_backoff_seconds = initial_backoff_seconds
        self.backoff_multiplier = backoff_multiplier
        self.max_backoff_seconds = max_backoff_seconds

        self.session = session or requests.Session()
        self.session.headers.update({
            'Content-Type': 'application/json',
            'Accept': 'application/json',
        })

        logger.info(
            f'CrazySupplier client initialized - enabled: {enabled}, '
            f'baseUrl: {self.base_url}, timeout: {timeout_seconds}s'
        )

    @classmethod
    def from_config(cls) -> 'CrazySupplierClient':
        """Create client from application configuration."""
        supplier = config.supplier
        return cls(
            base_url=supplier.base_url,
            timeout_seconds=supplier.timeout_seconds,
            enabled=supplier.enabled,
            max_attempts=supplier.max_attempts,
            initial_backoff_seconds=supplier.initial_backoff_seconds,
            backoff_multiplier=supplier.backoff_multiplier,
            max_backoff_seconds=supplier.max_backoff_seconds,
        )

    def backoff_delay(self, attempt: int) -> float:
        """
        Seconds to wait after the given (1-based) failed attempt.

        1s, 2s, 4s, ... capped at max_backoff_seconds.
        """
        delay = self.initial_backoff_seconds * (self.backoff_multiplier ** (attempt - 1))
        return min(delay, self.max_backoff_seconds)

    def search_flights(
        self,
        origin: str,
        destination: str,
        outbound_date: date,
        inbound_date: date,
    ) -> List[SupplierOffer]:
        """
        Fetch valid offers for a route.

        Args:
            origin: Departure airport code
            destination: Arrival airport code
            outbound_date: Departure date in the supplier's time zone
            inbound_date: Arrival date in the supplier's time zone

        Returns:
            Valid offers, or an empty list if the integration is disabled
            or the supplier could not be reached.
        """
        if not self.enabled:
            logger.debug('CrazySupplier integration is disabled')
            return []

        try:
            payload = SupplierSearchRequest(
                origin=origin,
                destination=destination,
                outbound_date=outbound_date,
                inbound_date=inbound_date,
            ).to_payload()
            logger.debug(f'Searching CrazySupplier flights: {payload}')

            result = self._run_attempts(payload)

            if result.status is AttemptStatus.SUCCESS:
                return self._valid_offers(result.offers)

            if result.status is AttemptStatus.CLIENT_FAULT:
                logger.error(f'Client error from CrazySupplier: {result.detail}')
            elif result.status is AttemptStatus.EXHAUSTED:
                logger.error(f'CrazySupplier unavailable after {self.max_attempts} attempts: {result.detail}')
            else:
                logger.error(f'Unexpected error fetching flights from CrazySupplier: {result.detail}')
            return []

        except Exception:
            logger.exception('Unexpected error fetching flights from CrazySupplier')
            return []

    def _run_attempts(self, payload: dict) -> AttemptResult:
        """
        Attempt the call until it settles or the attempt budget runs out.

        Returns the first non-retryable result, or EXHAUSTED carrying the
        detail of the last retryable failure.
        """
        result = AttemptResult(AttemptStatus.EXHAUSTED)

        for attempt in range(1, self.max_attempts + 1):
            result = self._attempt(payload)
            if result.status is not AttemptStatus.RETRYABLE_FAULT:
                return result

            if attempt < self.max_attempts:
                delay = self.backoff_delay(attempt)
                logger.warning(
                    f'CrazySupplier attempt {attempt}/{self.max_attempts} failed '
                    f'({result.detail}), retrying in {delay:.1f}s'
                )
                time.sleep(delay)

        return AttemptResult(AttemptStatus.EXHAUSTED, detail=result.detail)

    def _attempt(self, payload: dict) -> AttemptResult:
        """Perform one HTTP call and classify its outcome."""
        url = f'{self.base_url}/flights'

        try:
            response = self.session.post(
                url,
                json=payload,
                timeout=self.timeout_seconds,
            )
        except requests.exceptions.RequestException as e:
            return AttemptResult(AttemptStatus.RETRYABLE_FAULT, detail=f'network error: {e}')
        except Exception as e:
            return AttemptResult(AttemptStatus.UNEXPECTED_FAULT, detail=repr(e))

        status_code = response.status_code
        if 400 <= status_code < 500:
            return AttemptResult(AttemptStatus.CLIENT_FAULT, detail=f'HTTP {status_code}')
        if status_code >= 500:
            return AttemptResult(AttemptStatus.RETRYABLE_FAULT, detail=f'HTTP {status_code}')

        try:
            body = response.json() if response.content else None
        except ValueError as e:
            return AttemptResult(AttemptStatus.UNEXPECTED_FAULT, detail=f'malformed response body: {e}')

        if body is None:
            logger.warning('CrazySupplier returned null response')
            return AttemptResult(AttemptStatus.SUCCESS)

        if not isinstance(body, list):
            return AttemptResult(
                AttemptStatus.UNEXPECTED_FAULT,
                detail=f'expected a list of offers, got {type(body).__name__}',
            )

        return AttemptResult(
            AttemptStatus.SUCCESS,
            offers=[SupplierOffer.from_dict(item) for item in body],
        )

    def _valid_offers(self, offers: List[SupplierOffer]) -> List[SupplierOffer]:
        """Drop offers that fail validation."""
        valid = [offer for offer in offers if offer.is_valid()]

        if len(valid) < len(offers):
            logger.warning(f'Filtered out {len(offers) - len(valid)} invalid responses from CrazySupplier')

        logger.info(f'Successfully retrieved {len(valid)} valid flights from CrazySupplier')
        return valid
