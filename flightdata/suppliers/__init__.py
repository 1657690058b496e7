"""
External flight suppliers.

Queried at search time; results are merged with stored flights and
never persisted.
"""

from flightdata.suppliers.crazy_supplier import (
    CrazySupplierClient,
    SupplierOffer,
    SUPPLIER_NAME,
)

__all__ = ['CrazySupplierClient', 'SupplierOffer', 'SUPPLIER_NAME']
