"""Book repository."""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from fastapi import Depends

from app.core.config import Settings, get_settings
from app.core.database import Storage, get_storage
from app.core.errors import BookValidationError, NotFoundError
from app.models.book import Book
from app.services.cart import CartRepository
from app.services.cascade import CascadeCoordinator, CascadeResult
from app.services.clock import UtcClock, utc_clock
from app.services.collection import Document, DocumentCollection
from app.services.identifiers import require_valid_id
from app.services.validation import (
    check_book_values,
    check_required_book_fields,
    check_storable_book_values,
)

logger = logging.getLogger(__name__)

# Caller-editable fields, in storage order
BOOK_FIELDS = (
    "title",
    "author",
    "price",
    "published_year",
    "genre",
    "description",
    "image_url",
)
OPTIONAL_FIELDS = ("published_year", "genre", "description", "image_url")


@dataclass
class BookRecord:
    """A catalog entry as stored."""

    id: str
    title: str | None
    author: str | None
    price: Any
    published_year: int | None
    genre: str | None
    description: str | None
    image_url: str | None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_document(cls, document: Document) -> "BookRecord":
        return cls(**{field: document[field] for field in cls.__dataclass_fields__})


def normalize_book(data: Mapping[str, Any]) -> dict[str, Any]:
    """Project ``data`` onto the book shape.

    Unknown keys are dropped and empty optional fields become ``None``.
    """
    book = {field: data.get(field) for field in BOOK_FIELDS}
    for field in OPTIONAL_FIELDS:
        if book[field] in ("", 0):
            book[field] = None
    return book


def normalize_patch(patch: Mapping[str, Any]) -> dict[str, Any]:
    """Keep only caller-editable fields that are present in ``patch``."""
    return {field: patch[field] for field in BOOK_FIELDS if field in patch}


class BookRepository:
    """CRUD operations over the book collection.

    Owns ``created_at``/``updated_at`` and the shape of stored books.
    Deleting a book goes through the cascade coordinator so dependent cart
    items are removed too.
    """

    def __init__(
        self,
        storage: Storage,
        cart: CartRepository | None = None,
        strict: bool = False,
        clock: UtcClock | None = None,
    ) -> None:
        self.collection = DocumentCollection(storage, Book)
        self.cart = cart or CartRepository(storage, strict=strict, clock=clock)
        self.cascade = CascadeCoordinator(self.collection, self.cart)
        self.strict = strict
        self._clock = clock or utc_clock

    async def create_book(
        self, data: Mapping[str, Any] | Sequence[Mapping[str, Any]]
    ) -> BookRecord | int:
        """Create one book, or bulk-insert a batch.

        A single mapping returns the created ``BookRecord``. A sequence of
        mappings is inserted in one call and returns the inserted count.
        """
        if isinstance(data, Mapping):
            return await self._create_one(data)
        return await self._create_many(data)

    async def _create_one(self, data: Mapping[str, Any]) -> BookRecord:
        check_required_book_fields(data)
        book = normalize_book(data)
        check_storable_book_values(book)
        if self.strict:
            check_book_values(book)

        now = self._clock.now()
        document = await self.collection.insert_one({**book, "created_at": now, "updated_at": now})
        logger.info(f"Created book {document['id']} ('{book['title']}')")
        return BookRecord.from_document(document)

    async def _create_many(self, items: Sequence[Mapping[str, Any]]) -> int:
        if isinstance(items, str | bytes) or not isinstance(items, Sequence):
            raise BookValidationError("Expected a book or a list of books")
        if not items or not all(isinstance(item, Mapping) for item in items):
            raise BookValidationError("Expected a non-empty list of books")

        books = [normalize_book(item) for item in items]
        for book in books:
            check_storable_book_values(book)
        if self.strict:
            for item, book in zip(items, books, strict=True):
                check_required_book_fields(item)
                check_book_values(book)

        now = self._clock.now()
        ids = await self.collection.insert_many(
            [{**book, "created_at": now, "updated_at": now} for book in books]
        )
        logger.info(f"Bulk-inserted {len(ids)} books")
        return len(ids)

    async def list_books(self) -> list[BookRecord]:
        documents = await self.collection.find_all()
        return [BookRecord.from_document(d) for d in documents]

    async def get_book(self, book_id: object) -> BookRecord:
        book_id = require_valid_id(book_id)
        document = await self.collection.find_one(book_id)
        if document is None:
            raise NotFoundError("Book not found")
        return BookRecord.from_document(document)

    async def update_book(self, book_id: object, patch: Mapping[str, Any]) -> None:
        """Merge ``patch`` into the book and refresh ``updated_at``.

        Succeeds even when no book matches. Values must fit their columns;
        the remaining checks apply only in strict mode.
        """
        book_id = require_valid_id(book_id)
        values = normalize_patch(patch)
        check_storable_book_values(values)
        if self.strict:
            check_book_values(values)

        values["updated_at"] = self._clock.now()
        matched = await self.collection.update_one(book_id, values)
        logger.debug(f"Updated book {book_id} (matched={matched}, fields={sorted(values)})")

    async def delete_book(self, book_id: object) -> CascadeResult:
        """Delete the book and cascade to the cart, whether or not it existed."""
        book_id = require_valid_id(book_id)
        result = await self.cascade.delete_book_cascade(book_id)
        logger.info(
            f"Deleted book {book_id} (found={result.book_deleted}, "
            f"cart_items_removed={result.cart_items_removed})"
        )
        return result


async def get_book_repository(
    storage: Storage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
) -> BookRepository:
    """Dependency that provides the book repository."""
    return BookRepository(storage, strict=settings.strict_validation)
