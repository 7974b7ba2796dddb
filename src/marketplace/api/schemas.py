"""Pydantic request/response schemas for the Marketplace API.

These are the external contracts; Protean commands stay internal. The acting
user never appears in a request body, it always comes from the session.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Users & sessions
# ---------------------------------------------------------------------------
class SignUpRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "username": "jane",
                    "email": "jane.doe@example.com",
                    "password": "correct-horse-battery",
                }
            ]
        }
    }

    username: str = Field(..., min_length=1, max_length=50)
    email: str = Field(..., max_length=254)
    password: str = Field(..., max_length=128)


class LogInRequest(BaseModel):
    username: str = Field(..., max_length=50)
    password: str = Field(..., max_length=128)


class SessionResponse(BaseModel):
    user_id: str | None = None
    session_id: str


class AddAddressRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "label": "Home",
                    "street": "123 Elm Street",
                    "city": "Springfield",
                    "postal_code": "62701",
                    "country": "US",
                }
            ]
        }
    }

    label: str | None = Field(None, max_length=50)
    street: str = Field(..., max_length=255)
    city: str = Field(..., max_length=100)
    postal_code: str = Field(..., max_length=20)
    country: str = Field(..., max_length=100)


class AddressIdResponse(BaseModel):
    address_id: str


class UserProfileResponse(BaseModel):
    username: str
    email: str
    created_at: datetime | None = None
    item_count: int


# ---------------------------------------------------------------------------
# Items & stock
# ---------------------------------------------------------------------------
class ListItemRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "title": "Vintage record player",
                    "content": "Fully working, minor scratches on the lid.",
                    "price": 120.0,
                    "media_refs": ["items/3f2a/cover.jpg"],
                }
            ]
        }
    }

    title: str = Field(..., min_length=1, max_length=200)
    content: str | None = None
    price: float = Field(..., ge=0)
    media_refs: list[str] = Field(default_factory=list)


class EditItemRequest(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=200)
    content: str | None = None
    price: float | None = Field(None, ge=0)


class ItemIdResponse(BaseModel):
    item_id: str


class ItemResponse(BaseModel):
    item_id: str
    owner_id: str
    title: str
    content: str | None = None
    price: float
    rating: float | None = None
    media_refs: list[str] = Field(default_factory=list)
    stock: int | None = None


class SetStockRequest(BaseModel):
    quantity: int = Field(..., ge=0)


class StockResponse(BaseModel):
    item_id: str
    quantity: int | None = None


class RateItemRequest(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    content: str | None = None


class RatingResponse(BaseModel):
    rating: float | None = None


class SearchSuggestionsResponse(BaseModel):
    titles: list[str]


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    item_id: str
    quantity: int = Field(default=1, ge=1)


class SetCartQuantityRequest(BaseModel):
    quantity: int  # zero or less removes the line


class CartLineSchema(BaseModel):
    item_id: str
    quantity: int


class CartResponse(BaseModel):
    lines: list[CartLineSchema]


class CartUpdateResponse(BaseModel):
    status: str


class CartValidationResponse(BaseModel):
    ok: bool
    removed: list[CartLineSchema] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class PlaceOrderRequest(BaseModel):
    address_id: str


class OrderCreatedResponse(BaseModel):
    order_id: str
    order_date: datetime


class OrderLineSchema(BaseModel):
    item_id: str
    seller_id: str
    quantity: int
    dispatched: bool
    dispatched_at: datetime | None = None


class OrderResponse(BaseModel):
    order_id: str
    user_id: str
    address_id: str
    order_date: datetime
    lines: list[OrderLineSchema]


class DispatchResponse(BaseModel):
    dispatched_at: datetime


class StatusResponse(BaseModel):
    status: str = "ok"
