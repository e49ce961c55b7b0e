"""Cart endpoints — signed-in users and anonymous guests.

Guests are tracked by the `x-session-id` header. A guest adding their first
item without one gets a fresh id back in the same header.
"""
# ruff: noqa: B008  — Depends() in function defaults is standard FastAPI

from __future__ import annotations

import logging
import secrets
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import flag_modified

from honeypot.activity.context import SESSION_HEADER
from honeypot.activity.logger import ActivityLogger
from honeypot.api.deps import get_activity_logger, optional_user, request_context
from honeypot.api.errors import reporting_errors
from honeypot.db.engine import get_session
from honeypot.models.cart import Cart
from honeypot.models.product import Product
from honeypot.models.user import User
from honeypot.schemas.activity import CartAction, RequestContext
from honeypot.schemas.shop import CartAddRequest, CartOut, CartUpdateRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cart", tags=["cart"])


async def _find_cart(db: AsyncSession, user: User | None, session_id: str | None) -> Cart | None:
    if user is not None:
        stmt = select(Cart).where(Cart.user_id == user.id)
    elif session_id:
        stmt = select(Cart).where(Cart.session_id == session_id)
    else:
        return None
    result = await db.execute(stmt)
    return result.scalars().first()


def _owner(user: User | None, session_id: str | None) -> tuple[int | None, str | None]:
    """(user_id, session_id) as reported on the activity trail."""
    if user is not None:
        return user.id, None
    return None, session_id


def _find_item(items: list[dict[str, Any]], product_id: int) -> dict[str, Any] | None:
    return next((item for item in items if item.get("product_id") == product_id), None)


@router.get("")
async def get_cart_items(
    user: User | None = Depends(optional_user),
    db: AsyncSession = Depends(get_session),
    activity: ActivityLogger = Depends(get_activity_logger),
    ctx: RequestContext = Depends(request_context),
) -> CartOut:
    with reporting_errors(activity, "GET_CART_ERROR", ctx):
        cart = await _find_cart(db, user, ctx.session_id)
        user_id, session_id = _owner(user, ctx.session_id)
        activity.cart_operation(CartAction.VIEW, None, None, user_id, session_id, ctx)
        return CartOut(cart_items=list(cart.items or []) if cart else [], session_id=session_id)


@router.post("", status_code=status.HTTP_201_CREATED)
async def add_to_cart(
    body: CartAddRequest,
    response: Response,
    user: User | None = Depends(optional_user),
    db: AsyncSession = Depends(get_session),
    activity: ActivityLogger = Depends(get_activity_logger),
    ctx: RequestContext = Depends(request_context),
) -> CartOut:
    """Add `quantity` of a product, creating the cart on first use."""
    product_id, quantity = body.product_id, body.quantity
    with reporting_errors(activity, "ADD_TO_CART_ERROR", ctx, productId=product_id):
        if quantity <= 0:
            activity.suspicious_activity("ADD_TO_CART_INVALID_QUANTITY", {"productId": product_id, "quantity": quantity}, ctx)
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Quantity must be greater than 0")

        product = await db.get(Product, product_id)
        if product is None:
            activity.suspicious_activity("ADD_TO_CART_INVALID_PRODUCT", {"productId": product_id}, ctx)
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")

        session_id = ctx.session_id if user is None else None
        if user is None and not session_id:
            session_id = secrets.token_hex(16)

        cart = await _find_cart(db, user, session_id)
        items = list(cart.items or []) if cart else []
        existing = _find_item(items, product_id)
        in_cart = existing["quantity"] if existing else 0

        if product.stock < in_cart + quantity:
            activity.suspicious_activity(
                "ADD_TO_CART_INSUFFICIENT_STOCK",
                {"productId": product_id, "quantity": quantity, "stock": product.stock},
                ctx,
            )
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Not enough stock available")

        if cart is None:
            cart = Cart(user_id=user.id if user else None, session_id=session_id, items=[])
            db.add(cart)

        if existing:
            existing["quantity"] = in_cart + quantity
        else:
            items.append({
                "product_id": product.id,
                "name": product.name,
                "image": product.images[0] if product.images else "",
                "price": float(product.price),
                "quantity": quantity,
            })
        cart.items = items
        flag_modified(cart, "items")
        await db.commit()

        if session_id:
            response.headers[SESSION_HEADER] = session_id
        user_id, session_id = _owner(user, session_id)
        activity.cart_operation(CartAction.ADD, product_id, quantity, user_id, session_id, ctx)
        return CartOut(message="Item added to cart", cart_items=items, session_id=session_id)


@router.delete("/{product_id}")
async def remove_from_cart(
    product_id: int,
    user: User | None = Depends(optional_user),
    db: AsyncSession = Depends(get_session),
    activity: ActivityLogger = Depends(get_activity_logger),
    ctx: RequestContext = Depends(request_context),
) -> CartOut:
    with reporting_errors(activity, "REMOVE_FROM_CART_ERROR", ctx, productId=product_id):
        cart = await _find_cart(db, user, ctx.session_id)
        if cart is None:
            activity.suspicious_activity("REMOVE_FROM_CART_NOT_FOUND", {"productId": product_id}, ctx)
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Cart not found")

        items = [item for item in (cart.items or []) if item.get("product_id") != product_id]
        cart.items = items
        flag_modified(cart, "items")
        await db.commit()

        user_id, session_id = _owner(user, ctx.session_id)
        activity.cart_operation(CartAction.REMOVE, product_id, None, user_id, session_id, ctx)
        return CartOut(message="Item removed from cart", cart_items=items, session_id=session_id)


@router.put("/{product_id}")
async def update_cart_item(
    product_id: int,
    body: CartUpdateRequest,
    user: User | None = Depends(optional_user),
    db: AsyncSession = Depends(get_session),
    activity: ActivityLogger = Depends(get_activity_logger),
    ctx: RequestContext = Depends(request_context),
) -> CartOut:
    """Set the quantity of an item already in the cart."""
    quantity = body.quantity
    with reporting_errors(activity, "UPDATE_CART_ERROR", ctx, productId=product_id):
        if quantity <= 0:
            activity.suspicious_activity("UPDATE_CART_INVALID_QUANTITY", {"productId": product_id, "quantity": quantity}, ctx)
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Quantity must be greater than 0")

        cart = await _find_cart(db, user, ctx.session_id)
        if cart is None:
            activity.suspicious_activity("UPDATE_CART_NOT_FOUND", {"productId": product_id, "quantity": quantity}, ctx)
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Cart not found")

        product = await db.get(Product, product_id)
        if product is None:
            activity.suspicious_activity("UPDATE_CART_INVALID_PRODUCT", {"productId": product_id, "quantity": quantity}, ctx)
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")

        if product.stock < quantity:
            activity.suspicious_activity(
                "UPDATE_CART_INSUFFICIENT_STOCK",
                {"productId": product_id, "quantity": quantity, "stock": product.stock},
                ctx,
            )
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Not enough stock available")

        items = list(cart.items or [])
        item = _find_item(items, product_id)
        if item is None:
            activity.suspicious_activity("UPDATE_CART_ITEM_NOT_FOUND", {"productId": product_id, "quantity": quantity}, ctx)
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found in cart")

        item["quantity"] = quantity
        cart.items = items
        flag_modified(cart, "items")
        await db.commit()

        user_id, session_id = _owner(user, ctx.session_id)
        activity.cart_operation(CartAction.UPDATE, product_id, quantity, user_id, session_id, ctx)
        return CartOut(message="Cart updated", cart_items=items, session_id=session_id)
