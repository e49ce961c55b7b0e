"""Request and response bodies for the shop endpoints.

Request models accept both snake_case and the camelCase keys the browser
frontend sends. Fields the handlers validate themselves are optional here,
so a missing value reaches the handler and is reported on the activity
trail instead of being rejected before any handler runs.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _Body(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Users ────────────────────────────────────────────────────────────


class RegisterRequest(_Body):
    username: str | None = None
    email: str | None = None
    password: str | None = None
    first_name: str | None = None
    last_name: str | None = None


class LoginRequest(_Body):
    email: str | None = None
    password: str | None = None


class AddressIn(_Body):
    street: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    country: str | None = None


class ProfileUpdate(_Body):
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    username: str | None = None
    address: AddressIn | None = None
    phone: str | None = None
    password: str | None = None


class UserOut(BaseModel):
    id: int
    username: str
    email: str
    first_name: str
    last_name: str
    role: str
    address: dict[str, str | None] = Field(default_factory=dict)
    phone: str | None = None


class AuthOut(UserOut):
    token: str


# ── Products ─────────────────────────────────────────────────────────


class ProductIn(_Body):
    name: str | None = None
    price: float | None = None
    description: str | None = None
    images: list[str] | None = None
    brand: str | None = None
    category: str | None = None
    stock: int | None = None


class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str
    price: float
    category: str
    brand: str
    stock: int
    images: list[str] = Field(default_factory=list)
    specifications: dict[str, Any] = Field(default_factory=dict)
    rating_average: float = 0.0
    rating_count: int = 0
    is_featured: bool = False


class ProductPage(BaseModel):
    products: list[ProductOut]
    page: int
    pages: int
    total: int


# ── Cart ─────────────────────────────────────────────────────────────


class CartAddRequest(_Body):
    product_id: int
    quantity: int = 1


class CartUpdateRequest(_Body):
    quantity: int


class CartOut(BaseModel):
    message: str | None = None
    cart_items: list[dict[str, Any]] = Field(default_factory=list)
    session_id: str | None = None


# ── Orders ───────────────────────────────────────────────────────────


class OrderItemIn(_Body):
    product_id: int
    name: str | None = None
    image: str | None = None
    price: float = 0.0
    quantity: int = 1


class ShippingAddressIn(_Body):
    street: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str | None = None

    def is_complete(self) -> bool:
        return all((self.street, self.city, self.state, self.postal_code, self.country))


class OrderCreateRequest(_Body):
    order_items: list[OrderItemIn] | None = None
    shipping_address: ShippingAddressIn | None = None
    payment_method: str | None = None
    items_price: float = 0.0
    tax_price: float = 0.0
    shipping_price: float = 0.0
    total_price: float = 0.0


class PaymentResultIn(BaseModel):
    id: str | None = None
    status: str | None = None
    update_time: str | None = None


class OrderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    items: list[dict[str, Any]] = Field(default_factory=list)
    shipping_street: str
    shipping_city: str
    shipping_state: str
    shipping_zip_code: str
    shipping_country: str
    payment_method: str
    payment_result_id: str | None = None
    payment_result_status: str | None = None
    payment_result_update_time: str | None = None
    items_price: float
    tax_price: float
    shipping_price: float
    total_price: float
    is_paid: bool
    paid_at: datetime | None = None
    is_delivered: bool
    delivered_at: datetime | None = None
    created_at: datetime | None = None
