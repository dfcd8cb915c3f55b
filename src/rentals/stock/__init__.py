"""Stock store adapter registry — pluggable product stock collaborator.

Uses the in-memory store by default. Initial levels can be seeded from a
JSON object of ``{product_id: quantity}`` in the STOCK_LEVELS environment
variable.
"""

import json
import os

_stock_store_instance = None


def get_stock_store():
    """Return the configured stock store adapter (singleton).

    Configure via the STOCK_ADAPTER environment variable.
    """
    global _stock_store_instance
    if _stock_store_instance is None:
        adapter = os.environ.get("STOCK_ADAPTER", "memory")
        if adapter == "memory":
            from rentals.stock.memory_adapter import InMemoryStockStore

            levels = json.loads(os.environ.get("STOCK_LEVELS", "{}"))
            _stock_store_instance = InMemoryStockStore(levels)
        else:
            raise ValueError(f"Unknown stock adapter: {adapter}")
    return _stock_store_instance


def reset_stock_store():
    """Reset the stock store singleton (useful for testing)."""
    global _stock_store_instance
    _stock_store_instance = None
