"""FastAPI routes for the Marketplace: users, items, carts and orders."""

import json

import structlog
from fastapi import APIRouter, Depends
from protean.exceptions import ExpectedVersionError
from protean.utils.globals import current_domain

from marketplace.api.dependencies import current_identity
from marketplace.api.schemas import (
    AddAddressRequest,
    AddressIdResponse,
    AddToCartRequest,
    CartLineSchema,
    CartResponse,
    CartUpdateResponse,
    CartValidationResponse,
    DispatchResponse,
    EditItemRequest,
    ItemIdResponse,
    ItemResponse,
    ListItemRequest,
    LogInRequest,
    OrderCreatedResponse,
    OrderLineSchema,
    OrderResponse,
    PlaceOrderRequest,
    RateItemRequest,
    RatingResponse,
    SearchSuggestionsResponse,
    SessionResponse,
    SetCartQuantityRequest,
    SetStockRequest,
    SignUpRequest,
    StatusResponse,
    StockResponse,
    UserProfileResponse,
)
from marketplace.cart.cart import Cart
from marketplace.cart.items import AddToCart, SetCartQuantity
from marketplace.cart.validation import ValidateCart
from marketplace.errors import CheckoutRejected, Forbidden, NotFound
from marketplace.item.item import Item
from marketplace.item.listing import DelistItem, EditItem, ListItem
from marketplace.item.rating import RateItem
from marketplace.order.creation import PlaceOrder
from marketplace.order.dispatch import MarkDispatched
from marketplace.order.order import Order
from marketplace.stock.management import SetStock
from marketplace.stock.stock import StockRecord
from marketplace.user.addresses import AddAddress
from marketplace.user.registration import SignUp
from marketplace.user.session import LogIn, LogOut, UserIdentity
from marketplace.user.user import User

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# User Router
# ---------------------------------------------------------------------------
user_router = APIRouter(prefix="/users", tags=["users"])


@user_router.post("/signup", status_code=201, response_model=SessionResponse)
async def sign_up(body: SignUpRequest) -> SessionResponse:
    command = SignUp(
        username=body.username,
        email=body.email,
        password=body.password,
    )
    result = current_domain.process(command, asynchronous=False)
    return SessionResponse(**result)


@user_router.post("/login", response_model=SessionResponse)
async def log_in(body: LogInRequest) -> SessionResponse:
    command = LogIn(username=body.username, password=body.password)
    session_id = current_domain.process(command, asynchronous=False)
    return SessionResponse(session_id=session_id)


@user_router.post("/logout", response_model=StatusResponse)
async def log_out(identity: UserIdentity = Depends(current_identity)) -> StatusResponse:
    current_domain.process(LogOut(session_id=identity.session_id), asynchronous=False)
    return StatusResponse()


@user_router.post("/me/addresses", status_code=201, response_model=AddressIdResponse)
async def add_address(
    body: AddAddressRequest,
    identity: UserIdentity = Depends(current_identity),
) -> AddressIdResponse:
    command = AddAddress(
        user_id=identity.user_id,
        label=body.label,
        street=body.street,
        city=body.city,
        postal_code=body.postal_code,
        country=body.country,
    )
    address_id = current_domain.process(command, asynchronous=False)
    return AddressIdResponse(address_id=address_id)


@user_router.get("/{username}", response_model=UserProfileResponse)
async def get_profile(username: str) -> UserProfileResponse:
    user = current_domain.repository_for(User).find_by_username(username)
    if user is None:
        raise NotFound(f"User {username} not found")

    return UserProfileResponse(
        username=user.username,
        email=user.email,
        created_at=user.created_at,
        item_count=current_domain.repository_for(Item).count_owned_by(user.id),
    )


# ---------------------------------------------------------------------------
# Item Router
# ---------------------------------------------------------------------------
item_router = APIRouter(prefix="/items", tags=["items"])


@item_router.post("", status_code=201, response_model=ItemIdResponse)
async def list_item(
    body: ListItemRequest,
    identity: UserIdentity = Depends(current_identity),
) -> ItemIdResponse:
    command = ListItem(
        owner_id=identity.user_id,
        title=body.title,
        content=body.content,
        price=body.price,
        media_refs=json.dumps(body.media_refs),
    )
    item_id = current_domain.process(command, asynchronous=False)
    return ItemIdResponse(item_id=item_id)


@item_router.get("/search_suggestions", response_model=SearchSuggestionsResponse)
async def search_suggestions(q: str = "") -> SearchSuggestionsResponse:
    titles = current_domain.repository_for(Item).search_titles(q)
    return SearchSuggestionsResponse(titles=titles)


@item_router.get("/{item_id}", response_model=ItemResponse)
async def get_item(item_id: str) -> ItemResponse:
    item = current_domain.repository_for(Item).get(item_id)
    return ItemResponse(
        item_id=str(item.id),
        owner_id=str(item.owner_id),
        title=item.title,
        content=item.content,
        price=item.price,
        rating=item.rating,
        media_refs=item.media,
        stock=current_domain.repository_for(StockRecord).get_quantity(item.id),
    )


@item_router.put("/{item_id}", response_model=StatusResponse)
async def edit_item(
    item_id: str,
    body: EditItemRequest,
    identity: UserIdentity = Depends(current_identity),
) -> StatusResponse:
    command = EditItem(
        item_id=item_id,
        actor_id=identity.user_id,
        title=body.title,
        content=body.content,
        price=body.price,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@item_router.delete("/{item_id}", response_model=StatusResponse)
async def delist_item(item_id: str, identity: UserIdentity = Depends(current_identity)) -> StatusResponse:
    current_domain.process(DelistItem(item_id=item_id, actor_id=identity.user_id), asynchronous=False)
    return StatusResponse()


@item_router.put("/{item_id}/stock", response_model=StockResponse)
async def set_stock(
    item_id: str,
    body: SetStockRequest,
    identity: UserIdentity = Depends(current_identity),
) -> StockResponse:
    command = SetStock(item_id=item_id, actor_id=identity.user_id, quantity=body.quantity)
    quantity = current_domain.process(command, asynchronous=False)
    return StockResponse(item_id=item_id, quantity=quantity)


@item_router.post("/{item_id}/ratings", response_model=RatingResponse)
async def rate_item(
    item_id: str,
    body: RateItemRequest,
    identity: UserIdentity = Depends(current_identity),
) -> RatingResponse:
    command = RateItem(
        item_id=item_id,
        user_id=identity.user_id,
        rating=body.rating,
        content=body.content,
    )
    rating = current_domain.process(command, asynchronous=False)
    return RatingResponse(rating=rating)


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=CartResponse)
async def get_cart(identity: UserIdentity = Depends(current_identity)) -> CartResponse:
    cart = current_domain.repository_for(Cart).for_user(identity.user_id)
    return CartResponse(lines=[CartLineSchema(**line.to_dict()) for line in cart.list_lines()])


@cart_router.post("/items", status_code=201, response_model=StatusResponse)
async def add_to_cart(
    body: AddToCartRequest,
    identity: UserIdentity = Depends(current_identity),
) -> StatusResponse:
    command = AddToCart(
        user_id=identity.user_id,
        item_id=body.item_id,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@cart_router.put("/items/{item_id}", response_model=CartUpdateResponse)
async def set_cart_quantity(
    item_id: str,
    body: SetCartQuantityRequest,
    identity: UserIdentity = Depends(current_identity),
) -> CartUpdateResponse:
    command = SetCartQuantity(
        user_id=identity.user_id,
        item_id=item_id,
        quantity=body.quantity,
    )
    outcome = current_domain.process(command, asynchronous=False)
    return CartUpdateResponse(status=outcome)


@cart_router.post("/validate", response_model=CartValidationResponse)
async def validate_cart(identity: UserIdentity = Depends(current_identity)) -> CartValidationResponse:
    result = current_domain.process(ValidateCart(user_id=identity.user_id), asynchronous=False)
    if not result.ok:
        raise CheckoutRejected("Cart contained lines that stock cannot satisfy", result.removed)
    return CartValidationResponse(ok=True)


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


def _place_order(user_id, address_id):
    try:
        return current_domain.process(PlaceOrder(user_id=user_id, address_id=address_id), asynchronous=False)
    except ExpectedVersionError:
        # Lost a race on the cart or a stock record; the retry sees the winner's commit
        logger.info("Checkout hit a concurrent write, retrying", user_id=user_id)
        return current_domain.process(PlaceOrder(user_id=user_id, address_id=address_id), asynchronous=False)


def _order_response(order) -> OrderResponse:
    return OrderResponse(
        order_id=str(order.id),
        user_id=str(order.user_id),
        address_id=str(order.address_id),
        order_date=order.order_date,
        lines=[
            OrderLineSchema(
                item_id=str(line.item_id),
                seller_id=str(line.seller_id),
                quantity=line.quantity,
                dispatched=bool(line.dispatched),
                dispatched_at=line.dispatched_at,
            )
            for line in order.lines
        ],
    )


@order_router.post("", status_code=201, response_model=OrderCreatedResponse)
async def place_order(
    body: PlaceOrderRequest,
    identity: UserIdentity = Depends(current_identity),
) -> OrderCreatedResponse:
    result = _place_order(identity.user_id, body.address_id)
    if not result.created:
        raise CheckoutRejected("Cart contained lines that stock cannot satisfy", result.removed)
    return OrderCreatedResponse(order_id=result.order_id, order_date=result.order_date)


@order_router.get("", response_model=list[OrderResponse])
async def list_orders(identity: UserIdentity = Depends(current_identity)) -> list[OrderResponse]:
    orders = current_domain.repository_for(Order).placed_by(identity.user_id)
    return [_order_response(order) for order in orders]


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, identity: UserIdentity = Depends(current_identity)) -> OrderResponse:
    order = current_domain.repository_for(Order).get(order_id)
    if not order.is_visible_to(identity.user_id):
        raise Forbidden(f"Order {order_id} belongs to another user")
    return _order_response(order)


@order_router.put("/{order_id}/items/{item_id}/dispatch", response_model=DispatchResponse)
async def mark_dispatched(
    order_id: str,
    item_id: str,
    identity: UserIdentity = Depends(current_identity),
) -> DispatchResponse:
    command = MarkDispatched(order_id=order_id, item_id=item_id, actor_id=identity.user_id)
    dispatched_at = current_domain.process(command, asynchronous=False)
    return DispatchResponse(dispatched_at=dispatched_at)
