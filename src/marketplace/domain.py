"""Marketplace bounded context: listings, stock, carts and orders.

Users list items for sale and keep per-item stock; buyers fill a cart that
is converted into an immutable order at checkout. Stock, cart lines and
orders live in the same domain so checkout commits them in a single unit
of work.
"""

from protean.domain import Domain

from marketplace.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

marketplace = Domain(name="marketplace")
