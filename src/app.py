"""Storefront ordering FastAPI application.

Serves order placement, public status polling, administrator status changes,
client ledger sync and product favorite counters. Commands are processed
synchronously within each request.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV controls which config overlay is applied.
from ordering.api.app import create_app
from ordering.domain import ordering

ordering.init()

app = create_app()
