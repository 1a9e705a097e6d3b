"""Ordering bounded context: order store, status lifecycle and client sync.

Handles order creation with human-readable identities, the administrator-driven
status state machine, and the reconciliation of client-held order ledgers into
the authoritative store.
"""

import structlog
from protean.domain import Domain

from ordering.utils.logging import configure_logging

configure_logging()

ordering = Domain(name="ordering")

logger = structlog.get_logger(__name__)
