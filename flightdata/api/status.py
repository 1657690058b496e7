"""
Status API endpoints.

Provides endpoints for:
- GET /api/status - System health: database connectivity and supplier settings
"""

import logging
import time
from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from flightdata.suppliers.crazy_supplier import SUPPLIER_NAME

logger = logging.getLogger(__name__)

status_bp = Blueprint('status', __name__, url_prefix='/api/status')


@status_bp.route('', methods=['GET'])
def get_system_status():
    """
    Get system health and status information.

    Returns:
    - Database connectivity
    - CrazySupplier integration settings
    """
    start_time = time.perf_counter()

    service = current_app.config['FLIGHT_SERVICE']

    db_ok = True
    try:
        with service.records.session_factory() as session:
            session.execute(text('SELECT 1'))
    except SQLAlchemyError as e:
        db_ok = False
        logger.error(f'Database health check failed: {e}')

    supplier = service.supplier
    query_time_ms = (time.perf_counter() - start_time) * 1000

    return jsonify({
        'status': 'healthy' if db_ok else 'degraded',
        'database': {
            'connected': db_ok,
        },
        'supplier': {
            'name': SUPPLIER_NAME,
            'enabled': supplier.enabled,
            'base_url': supplier.base_url,
            'timeout_seconds': supplier.timeout_seconds,
            'max_attempts': supplier.max_attempts,
        },
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'query_time_ms': round(query_time_ms, 2),
    }), 200 if db_ok else 503
