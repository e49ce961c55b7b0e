"""Catalogue endpoints — public browsing, admin-only maintenance."""
# ruff: noqa: B008  — Depends() in function defaults is standard FastAPI

from __future__ import annotations

import logging
import math
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from honeypot.activity.logger import ActivityLogger
from honeypot.api.deps import get_activity_logger, optional_user, request_context, require_admin
from honeypot.api.errors import reporting_errors
from honeypot.db.engine import get_session
from honeypot.models.product import Product
from honeypot.models.user import User
from honeypot.schemas.activity import RequestContext
from honeypot.schemas.shop import ProductIn, ProductOut, ProductPage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/products", tags=["products"])

PAGE_SIZE = 10


@router.get("")
async def get_products(
    keyword: str | None = Query(None),
    page_number: int = Query(1, alias="pageNumber", ge=1),
    user: User | None = Depends(optional_user),
    db: AsyncSession = Depends(get_session),
    activity: ActivityLogger = Depends(get_activity_logger),
    ctx: RequestContext = Depends(request_context),
) -> ProductPage:
    """Paginated listing, optionally filtered by a name substring."""
    with reporting_errors(activity, "GET_PRODUCTS_ERROR", ctx):
        where = Product.name.ilike(f"%{keyword}%") if keyword else None

        count_stmt = select(func.count()).select_from(Product)
        list_stmt = select(Product).order_by(Product.created_at.desc(), Product.id.desc())
        if where is not None:
            count_stmt = count_stmt.where(where)
            list_stmt = list_stmt.where(where)

        total = (await db.execute(count_stmt)).scalar_one()
        result = await db.execute(list_stmt.limit(PAGE_SIZE).offset(PAGE_SIZE * (page_number - 1)))
        products = result.scalars().all()

        activity.api_access("/api/products", "GET", user.id if user else None, ctx.session_id, ctx)
        return ProductPage(
            products=[ProductOut.model_validate(p) for p in products],
            page=page_number,
            pages=math.ceil(total / PAGE_SIZE),
            total=total,
        )


@router.get("/{product_id}")
async def get_product_by_id(
    product_id: int,
    user: User | None = Depends(optional_user),
    db: AsyncSession = Depends(get_session),
    activity: ActivityLogger = Depends(get_activity_logger),
    ctx: RequestContext = Depends(request_context),
) -> ProductOut:
    with reporting_errors(activity, "GET_PRODUCT_ERROR", ctx, productId=product_id):
        product = await db.get(Product, product_id)
        if product is None:
            activity.suspicious_activity("GET_PRODUCT_NOT_FOUND", {"productId": product_id}, ctx)
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")

        activity.product_view(product_id, user.id if user else None, ctx.session_id, ctx)
        return ProductOut.model_validate(product)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_product(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
    activity: ActivityLogger = Depends(get_activity_logger),
    ctx: RequestContext = Depends(request_context),
) -> ProductOut:
    """Create a placeholder product for the admin to edit."""
    with reporting_errors(activity, "CREATE_PRODUCT_ERROR", ctx):
        product = Product(
            name="Sample Name",
            description="Sample Description",
            price=Decimal("0.00"),
            category="Sample Category",
            brand="Sample Brand",
            stock=0,
            images=["/images/sample.jpg"],
            specifications={},
        )
        db.add(product)
        await db.commit()
        await db.refresh(product)

        activity.api_access("/api/products", "POST", admin.id, None, ctx)
        return ProductOut.model_validate(product)


@router.put("/{product_id}")
async def update_product(
    product_id: int,
    body: ProductIn,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
    activity: ActivityLogger = Depends(get_activity_logger),
    ctx: RequestContext = Depends(request_context),
) -> ProductOut:
    with reporting_errors(activity, "UPDATE_PRODUCT_ERROR", ctx, productId=product_id):
        product = await db.get(Product, product_id)
        if product is None:
            activity.suspicious_activity("UPDATE_PRODUCT_NOT_FOUND", {"productId": product_id}, ctx)
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")

        product.name = body.name or product.name
        if body.price is not None:
            product.price = Decimal(str(body.price))
        product.description = body.description or product.description
        product.images = body.images if body.images is not None else product.images
        product.brand = body.brand or product.brand
        product.category = body.category or product.category
        if body.stock is not None:
            product.stock = body.stock

        await db.commit()
        await db.refresh(product)

        activity.api_access(f"/api/products/{product_id}", "PUT", admin.id, None, ctx)
        return ProductOut.model_validate(product)


@router.delete("/{product_id}")
async def delete_product(
    product_id: int,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
    activity: ActivityLogger = Depends(get_activity_logger),
    ctx: RequestContext = Depends(request_context),
) -> dict[str, str]:
    with reporting_errors(activity, "DELETE_PRODUCT_ERROR", ctx, productId=product_id):
        product = await db.get(Product, product_id)
        if product is None:
            activity.suspicious_activity("DELETE_PRODUCT_NOT_FOUND", {"productId": product_id}, ctx)
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")

        await db.delete(product)
        await db.commit()

        activity.api_access(f"/api/products/{product_id}", "DELETE", admin.id, None, ctx)
        return {"message": "Product removed"}
