"""Order model — placed by an authenticated user, paid and delivered later."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from honeypot.models.base import Base, TimestampMixin


class Order(TimestampMixin, Base):
    """A submitted order with its shipping, payment and fulfilment state."""

    __tablename__ = "orders"

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    items: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)

    # Shipping
    shipping_street: Mapped[str] = mapped_column(String(255), nullable=False)
    shipping_city: Mapped[str] = mapped_column(String(100), nullable=False)
    shipping_state: Mapped[str] = mapped_column(String(100), nullable=False)
    shipping_zip_code: Mapped[str] = mapped_column(String(20), nullable=False)
    shipping_country: Mapped[str] = mapped_column(String(100), nullable=False)

    # Payment
    payment_method: Mapped[str] = mapped_column(String(50), nullable=False)
    payment_result_id: Mapped[str | None] = mapped_column(String(100))
    payment_result_status: Mapped[str | None] = mapped_column(String(50))
    payment_result_update_time: Mapped[str | None] = mapped_column(String(50))

    # Totals as submitted by the client
    items_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0.00"))
    tax_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0.00"))
    shipping_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0.00"))
    total_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0.00"))

    # Fulfilment
    is_paid: Mapped[bool] = mapped_column(Boolean, default=False)
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    is_delivered: Mapped[bool] = mapped_column(Boolean, default=False)
    delivered_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    def __repr__(self) -> str:
        return f"<Order id={self.id} user={self.user_id} total={self.total_price} paid={self.is_paid}>"
