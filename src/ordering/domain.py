"""Ordering bounded context: catalogue snapshot, carts, promos, checkout and orders.

Holds every aggregate the checkout core persists. Services that orchestrate
them (cart aggregator, checkout, payment callbacks) receive their external
collaborators explicitly and use this domain's repositories for persistence.
"""

import structlog
from protean.domain import Domain

ordering = Domain(name="ordering")

logger = structlog.get_logger(__name__)
