"""Order endpoints — every route requires a signed-in user.

Totals are taken from the client as submitted. The ORDER_CREATED record is
written only after the order, the stock changes and the cart clean-up are
committed, so it is always the last activity of a successful checkout.
"""
# ruff: noqa: B008  — Depends() in function defaults is standard FastAPI

from __future__ import annotations

import logging
from datetime import UTC, datetime
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from honeypot.activity.logger import ActivityLogger
from honeypot.api.deps import get_activity_logger, protect, request_context, require_admin
from honeypot.api.errors import reporting_errors
from honeypot.db.engine import get_session
from honeypot.models.cart import Cart
from honeypot.models.order import Order
from honeypot.models.product import Product
from honeypot.models.user import User
from honeypot.schemas.activity import RequestContext
from honeypot.schemas.shop import OrderCreateRequest, OrderOut, PaymentResultIn

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/orders", tags=["orders"])


def _money(value: float) -> Decimal:
    return Decimal(str(value)).quantize(Decimal("0.01"))


@router.post("", status_code=status.HTTP_201_CREATED)
async def add_order_items(
    body: OrderCreateRequest,
    user: User = Depends(protect),
    db: AsyncSession = Depends(get_session),
    activity: ActivityLogger = Depends(get_activity_logger),
    ctx: RequestContext = Depends(request_context),
) -> OrderOut:
    """Place an order, decrement stock and empty the user's cart."""
    with reporting_errors(activity, "CREATE_ORDER_ERROR", ctx, userId=user.id):
        if not body.order_items:
            activity.suspicious_activity("CREATE_ORDER_EMPTY", {"userId": user.id}, ctx)
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No order items")

        shipping = body.shipping_address
        if shipping is None or not shipping.is_complete():
            activity.suspicious_activity(
                "CREATE_ORDER_INVALID_SHIPPING",
                {"userId": user.id, "shippingAddress": shipping.model_dump() if shipping else None},
                ctx,
            )
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Incomplete shipping address")

        if not body.payment_method:
            activity.suspicious_activity("CREATE_ORDER_INVALID_PAYMENT", {"userId": user.id}, ctx)
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Payment method is required")

        order = Order(
            user_id=user.id,
            items=[item.model_dump() for item in body.order_items],
            shipping_street=shipping.street,
            shipping_city=shipping.city,
            shipping_state=shipping.state,
            shipping_zip_code=shipping.postal_code,
            shipping_country=shipping.country,
            payment_method=body.payment_method,
            items_price=_money(body.items_price),
            tax_price=_money(body.tax_price),
            shipping_price=_money(body.shipping_price),
            total_price=_money(body.total_price),
        )
        db.add(order)

        for item in body.order_items:
            product = await db.get(Product, item.product_id)
            if product is not None:
                product.stock = max(product.stock - item.quantity, 0)

        await db.execute(delete(Cart).where(Cart.user_id == user.id))
        await db.commit()
        await db.refresh(order)

        logger.info("Order %s placed by user %s", order.id, user.id)
        activity.order_created(order.id, user.id, body.total_price, None, ctx)
        return OrderOut.model_validate(order)


@router.get("/myorders")
async def get_my_orders(
    user: User = Depends(protect),
    db: AsyncSession = Depends(get_session),
    activity: ActivityLogger = Depends(get_activity_logger),
    ctx: RequestContext = Depends(request_context),
) -> list[OrderOut]:
    with reporting_errors(activity, "GET_MY_ORDERS_ERROR", ctx, userId=user.id):
        result = await db.execute(
            select(Order).where(Order.user_id == user.id).order_by(Order.created_at.desc(), Order.id.desc())
        )
        orders = result.scalars().all()
        activity.api_access("/api/orders/myorders", "GET", user.id, None, ctx)
        return [OrderOut.model_validate(o) for o in orders]


@router.get("/{order_id}")
async def get_order_by_id(
    order_id: int,
    user: User = Depends(protect),
    db: AsyncSession = Depends(get_session),
    activity: ActivityLogger = Depends(get_activity_logger),
    ctx: RequestContext = Depends(request_context),
) -> OrderOut:
    """Owner-only order lookup."""
    with reporting_errors(activity, "GET_ORDER_ERROR", ctx, orderId=order_id):
        order = await db.get(Order, order_id)
        if order is None:
            activity.suspicious_activity("GET_ORDER_NOT_FOUND", {"orderId": order_id}, ctx)
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")

        if order.user_id != user.id:
            activity.suspicious_activity("GET_ORDER_UNAUTHORIZED", {"orderId": order_id, "userId": user.id}, ctx)
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authorized")

        activity.api_access(f"/api/orders/{order_id}", "GET", user.id, None, ctx)
        return OrderOut.model_validate(order)


@router.put("/{order_id}/pay")
async def update_order_to_paid(
    order_id: int,
    body: PaymentResultIn,
    user: User = Depends(protect),
    db: AsyncSession = Depends(get_session),
    activity: ActivityLogger = Depends(get_activity_logger),
    ctx: RequestContext = Depends(request_context),
) -> OrderOut:
    with reporting_errors(activity, "UPDATE_ORDER_PAID_ERROR", ctx, orderId=order_id):
        order = await db.get(Order, order_id)
        if order is None:
            activity.suspicious_activity("UPDATE_ORDER_PAID_NOT_FOUND", {"orderId": order_id}, ctx)
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")

        if order.user_id != user.id:
            activity.suspicious_activity(
                "UPDATE_ORDER_PAID_UNAUTHORIZED", {"orderId": order_id, "userId": user.id}, ctx
            )
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authorized")

        order.is_paid = True
        order.paid_at = datetime.now(UTC)
        order.payment_result_id = body.id or ""
        order.payment_result_status = body.status or ""
        order.payment_result_update_time = body.update_time or ""
        await db.commit()
        await db.refresh(order)

        activity.api_access(f"/api/orders/{order_id}/pay", "PUT", user.id, None, ctx)
        return OrderOut.model_validate(order)


@router.put("/{order_id}/deliver")
async def update_order_to_delivered(
    order_id: int,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
    activity: ActivityLogger = Depends(get_activity_logger),
    ctx: RequestContext = Depends(request_context),
) -> OrderOut:
    with reporting_errors(activity, "UPDATE_ORDER_DELIVERED_ERROR", ctx, orderId=order_id):
        order = await db.get(Order, order_id)
        if order is None:
            activity.suspicious_activity("UPDATE_ORDER_DELIVERED_NOT_FOUND", {"orderId": order_id}, ctx)
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")

        order.is_delivered = True
        order.delivered_at = datetime.now(UTC)
        await db.commit()
        await db.refresh(order)

        activity.api_access(f"/api/orders/{order_id}/deliver", "PUT", admin.id, None, ctx)
        return OrderOut.model_validate(order)


@router.get("")
async def get_orders(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
    activity: ActivityLogger = Depends(get_activity_logger),
    ctx: RequestContext = Depends(request_context),
) -> list[OrderOut]:
    """Every order, newest first (admin only)."""
    with reporting_errors(activity, "GET_ORDERS_ERROR", ctx):
        result = await db.execute(select(Order).order_by(Order.created_at.desc(), Order.id.desc()))
        orders = result.scalars().all()
        activity.api_access("/api/orders", "GET", admin.id, None, ctx)
        return [OrderOut.model_validate(o) for o in orders]
