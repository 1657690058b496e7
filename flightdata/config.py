"""
Configuration management for FlightData.

Loads settings from environment variables with sensible defaults.
All configuration is centralized here to avoid magic strings scattered
throughout the codebase.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _parse_bool(value: str) -> bool:
    """Parse common truthy strings ('1', 'true', 'yes', 'on')."""
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


@dataclass(frozen=True)
class DatabaseConfig:
    """Database configuration."""
    url: str = os.getenv('DATABASE_URL', 'sqlite:///flightdata.db')

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith('sqlite')


@dataclass(frozen=True)
class SupplierConfig:
    """CrazySupplier API configuration."""
    base_url: str = os.getenv('CRAZY_SUPPLIER_BASE_URL', 'http://localhost:8089/api')
    timeout_ms: int = int(os.getenv('CRAZY_SUPPLIER_TIMEOUT_MS', '5000'))
    enabled: bool = _parse_bool(os.getenv('CRAZY_SUPPLIER_ENABLED', 'true'))

    # Civil time zone of every date and date-time the supplier sends or expects
    timezone: str = os.getenv('CRAZY_SUPPLIER_TIMEZONE', 'CET')

    # Retry policy: 3 attempts, 1s then 2s between them, never more than 5s
    max_attempts: int = 3
    initial_backoff_seconds: float = 1.0
    backoff_multiplier: float = 2.0
    max_backoff_seconds: float = 5.0

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000.0


@dataclass(frozen=True)
class PaginationConfig:
    """Search pagination limits."""
    default_page_size: int = int(os.getenv('DEFAULT_PAGE_SIZE', '20'))
    max_page_size: int = int(os.getenv('MAX_PAGE_SIZE', '100'))


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration."""
    database: DatabaseConfig
    supplier: SupplierConfig
    pagination: PaginationConfig

    # Flask settings
    secret_key: str
    debug: bool


def load_config() -> AppConfig:
    """Load and validate all configuration."""
    return AppConfig(
        database=DatabaseConfig(),
        supplier=SupplierConfig(),
        pagination=PaginationConfig(),
        secret_key=os.getenv('SECRET_KEY', 'dev-key-change-in-prod'),
        debug=os.getenv('FLASK_DEBUG', '0') == '1',
    )


# Singleton instance
config = load_config()
