"""Storefront bounded context: Shopping Cart and Checkout.

Holds the buyer-side cart (persisted to a durable key-value slot), the
pricing rules, and the checkout wizard that submits orders to the
marketplace order service.
"""

import structlog
from protean.domain import Domain

storefront = Domain(name="storefront")

logger = structlog.get_logger(__name__)
