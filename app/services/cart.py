"""Cart repository."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from fastapi import Depends

from app.core.config import Settings, get_settings
from app.core.database import Storage, get_storage
from app.models.cart import CartItem
from app.services.clock import UtcClock, utc_clock
from app.services.collection import Document, DocumentCollection
from app.services.identifiers import require_valid_id
from app.services.validation import check_quantity

logger = logging.getLogger(__name__)


@dataclass
class CartItemRecord:
    """One line in the shopping cart."""

    id: str
    book_id: str
    quantity: Any
    created_at: datetime

    @classmethod
    def from_document(cls, document: Document) -> "CartItemRecord":
        return cls(
            id=document["id"],
            book_id=document["book_id"],
            quantity=document["quantity"],
            created_at=document["created_at"],
        )


class CartRepository:
    """CRUD operations over the cart collection.

    The cart is one global collection shared by every caller; items are not
    scoped to a user.
    """

    def __init__(
        self,
        storage: Storage,
        strict: bool = False,
        clock: UtcClock | None = None,
    ) -> None:
        self.collection = DocumentCollection(storage, CartItem)
        self.strict = strict
        self._clock = clock or utc_clock

    async def list_cart(self) -> list[CartItemRecord]:
        documents = await self.collection.find_all()
        return [CartItemRecord.from_document(d) for d in documents]

    async def add_to_cart(self, book_id: object, quantity: Any = 1) -> CartItemRecord:
        """Add a line for ``book_id``. The book's existence is not checked."""
        book_id = require_valid_id(book_id, "book ID")
        if self.strict:
            check_quantity(quantity)

        document = await self.collection.insert_one(
            {"book_id": book_id, "quantity": quantity, "created_at": self._clock.now()}
        )
        logger.info(f"Added book {book_id} to cart (quantity={quantity})")
        return CartItemRecord.from_document(document)

    async def remove_cart_item(self, item_id: object) -> None:
        """Remove one cart line. Removing a missing item is not an error."""
        item_id = require_valid_id(item_id)
        deleted = await self.collection.delete_one(item_id)
        logger.debug(f"Removed cart item {item_id} (deleted={deleted})")

    async def clear_cart(self) -> int:
        deleted = await self.collection.delete_many({})
        logger.info(f"Cleared cart ({deleted} items)")
        return deleted

    async def remove_items_for_book(self, book_id: object) -> int:
        """Delete every cart line referencing ``book_id``."""
        book_id = require_valid_id(book_id, "book ID")
        return await self.collection.delete_many({"book_id": book_id})


async def get_cart_repository(
    storage: Storage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
) -> CartRepository:
    """Dependency that provides the cart repository."""
    return CartRepository(storage, strict=settings.strict_validation)
