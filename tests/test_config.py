"""Tests for configuration parsing."""

import pytest

from flightdata.config import DatabaseConfig, SupplierConfig, _parse_bool


@pytest.mark.parametrize('value,expected', [
    ('true', True), ('1', True), (' YES ', True), ('on', True),
    ('false', False), ('0', False), ('', False),
])
def test_parse_bool(value, expected):
    assert _parse_bool(value) is expected


def test_supplier_timeout_in_seconds():
    assert SupplierConfig(timeout_ms=2500).timeout_seconds == 2.5


def test_supplier_retry_defaults():
    supplier = SupplierConfig()

    assert supplier.max_attempts == 3
    assert supplier.initial_backoff_seconds == 1.0
    assert supplier.max_backoff_seconds == 5.0


def test_sqlite_detection():
    assert DatabaseConfig(url='sqlite://').is_sqlite
    assert not DatabaseConfig(url='postgresql://localhost/flights').is_sqlite

