"""Cart item model."""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


class CartItem(Base):
    """Model representing one line in the shopping cart.

    ``book_id`` is a weak reference: there is no foreign key, so an item can
    outlive its book if the cascade cleanup fails.
    """

    __tablename__ = "cart"

    id: Mapped[str] = mapped_column(String(24), primary_key=True)
    book_id: Mapped[str] = mapped_column(String(24), nullable=False, index=True)
    quantity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<CartItem(id={self.id}, book_id={self.book_id}, quantity={self.quantity})>"
