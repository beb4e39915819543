"""Book deletion with dependent cart cleanup."""

import logging
from dataclasses import dataclass

from opentelemetry.trace import Status, StatusCode

from app.core.errors import PartialCascadeFailure, StorageFailure
from app.core.tracing import get_tracer
from app.services.cart import CartRepository
from app.services.collection import DocumentCollection

logger = logging.getLogger(__name__)

# Get tracer for this module
tracer = get_tracer(__name__)


@dataclass
class CascadeResult:
    """Outcome of a cascading book delete."""

    book_deleted: bool
    cart_items_removed: int


class CascadeCoordinator:
    """Deletes a book, then every cart item that references it.

    The two steps are separate storage calls. The book always goes first; if
    the cart step then fails, the book stays deleted and its cart items are
    left orphaned. Nothing is retried or compensated.
    """

    def __init__(self, books: DocumentCollection, cart: CartRepository) -> None:
        self.books = books
        self.cart = cart

    async def delete_book_cascade(self, book_id: str) -> CascadeResult:
        with tracer.start_as_current_span("cascade.delete_book") as span:
            span.set_attribute("cascade.book_id", book_id)

            # Step 1: a failure here propagates and the cart is left untouched
            deleted = await self.books.delete_one(book_id)
            span.set_attribute("cascade.book_deleted", bool(deleted))

            # Step 2
            try:
                removed = await self.cart.remove_items_for_book(book_id)
            except StorageFailure as e:
                logger.error(
                    f"Book {book_id} deleted but cart cleanup failed; "
                    f"cart items may still reference it: {e}"
                )
                span.record_exception(e)
                span.set_status(Status(StatusCode.ERROR, "partial cascade"))
                raise PartialCascadeFailure(book_id) from e

            span.set_attribute("cascade.cart_items_removed", removed)
            if removed:
                logger.info(f"Removed {removed} cart items for deleted book {book_id}")
            return CascadeResult(book_deleted=bool(deleted), cart_items_removed=removed)
