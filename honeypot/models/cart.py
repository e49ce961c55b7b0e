"""Cart model — one per user, or one per guest session id.

Items are kept as a JSON list of {product_id, name, image, price, quantity}.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import JSON, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from honeypot.models.base import Base, TimestampMixin


class Cart(TimestampMixin, Base):
    """Shopping cart owned by a user or by an anonymous session."""

    __tablename__ = "carts"

    user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"), index=True)
    session_id: Mapped[str | None] = mapped_column(String(64), index=True)
    items: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)

    def __repr__(self) -> str:
        owner = f"user={self.user_id}" if self.user_id else f"session={self.session_id}"
        return f"<Cart id={self.id} {owner} items={len(self.items or [])}>"
