"""
FlightData Backend Package.

Flight record CRUD and search backend built with Flask, SQLAlchemy, and requests,
aggregating the CrazySupplier flight search API at query time.

Modules:
    api/         REST endpoints for flight CRUD, search, and system status
    models/      SQLAlchemy ORM models (Flight) and session management
    services/    Record persistence, result mapping, search aggregation
    suppliers/   CrazySupplier HTTP client with retry and response validation
    seed.py      Sample flights for local development
    config.py    Centralized configuration from environment variables
"""

__version__ = '1.0.0'
