"""FastAPI routes for the Storefront domain: cart and checkout.

Thin adapters over the cart store and the checkout wizard. Validation
problems come back as 422 with per-field messages.
"""

from fastapi import APIRouter, HTTPException
from protean.exceptions import ValidationError

from storefront.api.schemas import (
    AddToCartRequest,
    CartResponse,
    CheckoutResponse,
    LineItemSchema,
    PaymentRequest,
    ShippingRequest,
    StartCheckoutRequest,
    StatusResponse,
    TotalsSchema,
    UpdateQuantityRequest,
)
from storefront.cart.items import CatalogProduct
from storefront.cart.pricing import compute_totals
from storefront.cart.store import get_cart_store
from storefront.checkout.session import UserContext
from storefront.checkout.wizard import CheckoutWizard

# ---------------------------------------------------------------------------
# Open checkout
# ---------------------------------------------------------------------------
_active_wizard: CheckoutWizard | None = None


def get_active_wizard() -> CheckoutWizard:
    if _active_wizard is None:
        raise HTTPException(status_code=404, detail="No checkout in progress")
    return _active_wizard


def close_checkout() -> None:
    global _active_wizard
    _active_wizard = None


def _reject_if_submitting() -> None:
    if _active_wizard is not None and _active_wizard.is_submitting:
        raise HTTPException(status_code=409, detail="An order is being submitted")


def _unprocessable(exc: ValidationError) -> HTTPException:
    return HTTPException(status_code=422, detail=exc.messages)


def _cart_response() -> CartResponse:
    store = get_cart_store()
    items = store.snapshot()
    return CartResponse(
        items=[LineItemSchema.from_item(item) for item in items],
        item_count=len(items),
        totals=TotalsSchema.from_snapshot(compute_totals(items)),
    )


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=CartResponse)
def get_cart() -> CartResponse:
    return _cart_response()


@cart_router.post("/items", response_model=CartResponse)
def add_cart_item(body: AddToCartRequest) -> CartResponse:
    try:
        product = CatalogProduct(
            product_id=body.product_id,
            name=body.name,
            localized_name=body.localized_name,
            unit_price=body.unit_price,
            available_stock=body.available_stock,
            images=body.images,
        )
    except ValidationError as exc:
        raise _unprocessable(exc) from exc

    get_cart_store().add_item(product, body.quantity)
    return _cart_response()


@cart_router.put("/items/{product_id}", response_model=CartResponse)
def update_cart_item_quantity(product_id: str, body: UpdateQuantityRequest) -> CartResponse:
    get_cart_store().update_quantity(product_id, body.quantity)
    return _cart_response()


@cart_router.delete("/items/{product_id}", response_model=CartResponse)
def remove_cart_item(product_id: str) -> CartResponse:
    get_cart_store().remove_item(product_id)
    return _cart_response()


@cart_router.delete("", response_model=CartResponse)
def clear_cart() -> CartResponse:
    get_cart_store().clear()
    return _cart_response()


# ---------------------------------------------------------------------------
# Checkout Router
# ---------------------------------------------------------------------------
checkout_router = APIRouter(prefix="/checkout", tags=["checkout"])


@checkout_router.post("", status_code=201, response_model=CheckoutResponse)
def start_checkout(body: StartCheckoutRequest | None = None) -> CheckoutResponse:
    """Open the checkout wizard over the current cart.

    An empty cart cannot be checked out; the caller should send the buyer
    back to the cart page. An open checkout whose order is still being
    submitted is never replaced.
    """
    global _active_wizard

    _reject_if_submitting()
    store = get_cart_store()
    if store.is_empty:
        raise HTTPException(status_code=409, detail="Cart is empty")

    user = None
    if body is not None and any(v is not None for v in body.model_dump().values()):
        user = UserContext(**body.model_dump(exclude_none=True))

    _active_wizard = CheckoutWizard(store, user=user)
    return CheckoutResponse.from_wizard(_active_wizard)


@checkout_router.get("", response_model=CheckoutResponse)
def get_checkout() -> CheckoutResponse:
    return CheckoutResponse.from_wizard(get_active_wizard())


@checkout_router.post("/shipping", response_model=CheckoutResponse)
def submit_shipping(body: ShippingRequest) -> CheckoutResponse:
    wizard = get_active_wizard()
    try:
        wizard.submit_shipping(**body.model_dump(exclude_none=True))
    except ValidationError as exc:
        raise _unprocessable(exc) from exc
    if wizard.errors:
        raise HTTPException(status_code=422, detail=wizard.errors)
    return CheckoutResponse.from_wizard(wizard)


@checkout_router.post("/payment", response_model=CheckoutResponse)
def submit_payment(body: PaymentRequest) -> CheckoutResponse:
    """Confirm the order. A failed order is not an HTTP error: the response
    carries step "Failed" and the reason."""
    wizard = get_active_wizard()
    card = body.card_details.model_dump(exclude_none=True) if body.card_details else None
    try:
        wizard.submit_payment(card_details=card, payment_method=body.method)
    except ValidationError as exc:
        raise _unprocessable(exc) from exc
    if wizard.errors:
        raise HTTPException(status_code=422, detail=wizard.errors)
    return CheckoutResponse.from_wizard(wizard)


@checkout_router.post("/back", response_model=CheckoutResponse)
def go_back() -> CheckoutResponse:
    wizard = get_active_wizard()
    try:
        wizard.back()
    except ValidationError as exc:
        raise _unprocessable(exc) from exc
    return CheckoutResponse.from_wizard(wizard)


@checkout_router.post("/retry", response_model=CheckoutResponse)
def retry_checkout() -> CheckoutResponse:
    wizard = get_active_wizard()
    try:
        wizard.retry()
    except ValidationError as exc:
        raise _unprocessable(exc) from exc
    return CheckoutResponse.from_wizard(wizard)


@checkout_router.delete("", response_model=StatusResponse)
def cancel_checkout() -> StatusResponse:
    _reject_if_submitting()
    close_checkout()
    return StatusResponse()
