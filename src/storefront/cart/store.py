"""Cart Store: sole owner of the buyer's cart.

Every mutation is write-through: the durable slot is updated before the
mutating call returns, so reloading from storage reconstructs the exact
cart. Quantities are never rejected; they are clamped into
``[1, available_stock]``.

Lifecycle::

    store = CartStore(storage)
    store.load()            # hydrate (corrupt/missing data -> empty cart)
    store.add_item(...)     # mutate, then persist
    store.snapshot()        # immutable view for pricing and checkout
"""

import json
import threading

import structlog
from protean.exceptions import ValidationError

from storefront.cart.items import CartLineItem, CatalogProduct
from storefront.storage.port import KeyValueStorage

logger = structlog.get_logger(__name__)

CART_KEY = "cart"


def clamp(value: int, lower: int, upper: int) -> int:
    return max(lower, min(upper, value))


class CartStore:
    def __init__(self, storage: KeyValueStorage, key: str = CART_KEY) -> None:
        self.storage = storage
        self.key = key
        self._items: list[CartLineItem] = []
        self._lock = threading.RLock()

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def load(self) -> "CartStore":
        """Replace in-memory contents with what the durable slot holds."""
        with self._lock:
            self._items = self._read()
        return self

    def _read(self) -> list[CartLineItem]:
        raw = self.storage.get(self.key)
        if raw is None:
            return []

        try:
            records = json.loads(raw)
            if not isinstance(records, list):
                raise ValueError("cart slot does not hold a list")
            items = [CartLineItem.from_record(record) for record in records]
        except (ValueError, TypeError, RecursionError, ValidationError) as exc:
            logger.warning("Discarding unreadable cart", key=self.key, error=str(exc))
            return []

        # Keep the first occurrence of a product if the slot was edited by hand
        seen = set()
        unique = []
        for item in items:
            if item.product_id not in seen:
                seen.add(item.product_id)
                unique.append(item)
        return unique

    def persist(self) -> None:
        """Write the in-memory cart to the durable slot."""
        with self._lock:
            self._write(self._items)

    def _write(self, items: list[CartLineItem]) -> None:
        payload = json.dumps([item.to_record() for item in items], ensure_ascii=False)
        self.storage.set(self.key, payload)

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def snapshot(self) -> tuple[CartLineItem, ...]:
        with self._lock:
            return tuple(self._items)

    def get_item(self, product_id: str) -> CartLineItem | None:
        return next((i for i in self.snapshot() if i.product_id == str(product_id)), None)

    @property
    def item_count(self) -> int:
        return len(self._items)

    @property
    def is_empty(self) -> bool:
        return not self._items

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    def add_item(self, product: CatalogProduct, requested_quantity: int = 1) -> CartLineItem | None:
        """Add a product, or raise the quantity of its existing line.

        Returns the resulting line, or None when the product has no stock
        and therefore cannot form a valid line.
        """
        if product.available_stock < 1:
            logger.info("Ignoring out-of-stock product", product_id=product.product_id)
            return None

        with self._lock:
            items = list(self._items)
            index = self._index_of(product.product_id)
            if index is None:
                line = CartLineItem.from_product(product, clamp(requested_quantity, 1, product.available_stock))
                items.append(line)
            else:
                quantity = clamp(items[index].quantity + requested_quantity, 1, product.available_stock)
                line = CartLineItem.from_product(product, quantity)
                items[index] = line
            self._commit(items)

        logger.debug(
            "Cart item added",
            product_id=line.product_id,
            requested=requested_quantity,
            quantity=line.quantity,
        )
        return line

    def update_quantity(self, product_id: str, new_quantity: int) -> CartLineItem | None:
        with self._lock:
            index = self._index_of(product_id)
            if index is None:
                return None

            items = list(self._items)
            existing = items[index]
            line = existing.with_quantity(clamp(new_quantity, 1, existing.available_stock))
            items[index] = line
            self._commit(items)

        logger.debug(
            "Cart quantity updated",
            product_id=line.product_id,
            requested=new_quantity,
            quantity=line.quantity,
        )
        return line

    def remove_item(self, product_id: str) -> bool:
        with self._lock:
            index = self._index_of(product_id)
            if index is None:
                return False

            items = list(self._items)
            del items[index]
            self._commit(items)

        logger.debug("Cart item removed", product_id=str(product_id))
        return True

    def clear(self) -> None:
        with self._lock:
            self._commit([])

        logger.info("Cart cleared", key=self.key)

    def _commit(self, items: list[CartLineItem]) -> None:
        # Storage first: a failed write leaves memory untouched
        self._write(items)
        self._items = items

    def _index_of(self, product_id: str) -> int | None:
        return next(
            (idx for idx, item in enumerate(self._items) if item.product_id == str(product_id)),
            None,
        )


# ---------------------------------------------------------------------------
# Active store
# ---------------------------------------------------------------------------
_current_store: CartStore | None = None


def get_cart_store() -> CartStore:
    """Return the active cart store, loading it from the configured storage on first use."""
    global _current_store
    if _current_store is None:
        from storefront.storage import get_storage

        _current_store = CartStore(get_storage()).load()
    return _current_store


def set_cart_store(store: CartStore) -> None:
    """Override the active cart store (useful for tests)."""
    global _current_store
    _current_store = store


def reset_cart_store() -> None:
    global _current_store
    _current_store = None
