"""
Error taxonomy for FlightData.

Validation and not-found errors are raised close to where they are detected
and travel unchanged up to the HTTP layer, which maps them to 400 and 404.
Storage faults are SQLAlchemy's own exceptions and are not wrapped here.
Supplier faults never become exceptions at all: the supplier client turns
them into an empty offer list.
"""

from typing import Iterable


class FlightDataError(Exception):
    """Base class for errors surfaced to API callers."""


class ValidationError(FlightDataError):
    """
    Malformed or missing input.

    Carries every violated rule so callers can fix them in one round trip.
    """

    def __init__(self, errors: Iterable[str]):
        self.errors = list(errors) or ['Invalid input']
        super().__init__(self.message)

    @property
    def message(self) -> str:
        return 'Validation failed: ' + ', '.join(self.errors)


class FlightNotFoundError(FlightDataError):
    """Referenced flight ID does not exist."""

    def __init__(self, flight_id: int):
        self.flight_id = flight_id
        super().__init__(f'Flight not found with ID: {flight_id}')

    @property
    def message(self) -> str:
        return str(self)
