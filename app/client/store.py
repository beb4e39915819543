"""Optimistic local stores for the book and cart lists.

A mutation updates the local list right away, then calls the API. A
successful response is folded back in; a failure restores the list exactly
as it was before the mutation and reports the error.
"""

import asyncio
import logging
import uuid
from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager
from enum import Enum
from typing import Any, TypeVar

from app.client.api_client import CatalogAPIError, CatalogClient

logger = logging.getLogger(__name__)

T = TypeVar("T")

Record = dict[str, Any]
Notifier = Callable[[str, str], None]

NUMERIC_SORT_KEYS = ("price", "publishedYear")
SEARCH_FIELDS = ("title", "author", "genre")

# Entity id for mutations that touch the whole list
ALL_ENTITIES = "*"


class MutationState(str, Enum):
    """Mutation state of a store's list."""

    STABLE = "stable"  # No mutation in flight
    PENDING = "pending"  # Optimistic value shown, awaiting the server
    RECONCILED = "reconciled"  # Server confirmed; authoritative value applied
    ROLLED_BACK = "rolled_back"  # Server rejected; pre-mutation list restored


def log_notification(level: str, message: str) -> None:
    """Default notifier: write user-facing messages to the log."""
    if level == "error":
        logger.error(message)
    else:
        logger.info(message)


def _error_text(error: Exception, fallback: str) -> str:
    if isinstance(error, CatalogAPIError) and error.message:
        return error.message
    return fallback


def _temporary_id() -> str:
    return f"pending-{uuid.uuid4().hex}"


class OptimisticStore:
    """Local mirror of one entity list with optimistic mutations.

    Concurrent mutations are not coordinated unless ``serialize_per_entity``
    is set: each finishes independently and the last response wins. With
    serialization, mutations on the same entity id run one at a time.

    A rejected mutation only reverts the entity it touched, so changes other
    mutations made in the meantime survive the rollback.
    """

    def __init__(
        self,
        client: CatalogClient,
        notify: Notifier | None = None,
        serialize_per_entity: bool = False,
        on_transition: Callable[[MutationState], None] | None = None,
    ) -> None:
        self.client = client
        self.items: list[Record] = []
        self.state = MutationState.STABLE
        self._notify = notify or log_notification
        self._serialize = serialize_per_entity
        self._on_transition = on_transition
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}

    def _transition(self, state: MutationState) -> None:
        self.state = state
        if self._on_transition is not None:
            self._on_transition(state)

    @asynccontextmanager
    async def _serialized(self, entity_id: str):
        """Hold the entity's lock; the lock is dropped once nobody needs it."""
        if not self._serialize:
            yield
            return

        lock = self._locks.setdefault(entity_id, asyncio.Lock())
        self._lock_users[entity_id] = self._lock_users.get(entity_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[entity_id] -= 1
            if not self._lock_users[entity_id]:
                del self._lock_users[entity_id]
                del self._locks[entity_id]

    def find(self, entity_id: str) -> Record | None:
        return next((item for item in self.items if item.get("_id") == entity_id), None)

    async def mutate(
        self,
        entity_id: str,
        apply: Callable[[list[Record]], list[Record]],
        request: Callable[[], Awaitable[T]],
        reconcile: Callable[[list[Record], T], list[Record]] | None = None,
        success_message: str | None = None,
        failure_message: str = "Request failed. Reverting.",
    ) -> T:
        """Apply ``apply`` locally, then confirm it with ``request``.

        Args:
            entity_id: Id of the entity being changed, used for serialization
                and rollback. ``ALL_ENTITIES`` marks a whole-list change.
            apply: Builds the intended list from the current one.
            request: Performs the API call.
            reconcile: Folds the server's response into the list.
            success_message: Notification sent on success.
            failure_message: Notification sent when the error has no text.

        Returns:
            Whatever ``request`` returned.
        """
        async with self._serialized(entity_id):
            snapshot = self.items
            self.items = apply(list(snapshot))
            self._transition(MutationState.PENDING)

            try:
                result = await request()
            except Exception as e:
                self.items = _revert(self.items, snapshot, entity_id)
                self._transition(MutationState.ROLLED_BACK)
                self._notify("error", _error_text(e, failure_message))
                self._transition(MutationState.STABLE)
                raise

            if reconcile is not None:
                self.items = reconcile(self.items, result)
            self._transition(MutationState.RECONCILED)
            if success_message:
                self._notify("success", success_message)
            return result


def _revert(items: list[Record], snapshot: list[Record], entity_id: str) -> list[Record]:
    """Undo one mutation's effect on ``entity_id`` and leave other records alone.

    The entity's pre-mutation record goes back at its old position; a record
    that did not exist before (a pending add) is dropped. For whole-list
    mutations every record missing from ``items`` is restored.
    """
    if entity_id == ALL_ENTITIES:
        present = {item.get("_id") for item in items}
        return [item for item in snapshot if item.get("_id") not in present] + items

    reverted = [item for item in items if item.get("_id") != entity_id]
    for index, item in enumerate(snapshot):
        if item.get("_id") == entity_id:
            reverted.insert(min(index, len(reverted)), item)
            break
    return reverted


def _replace(items: list[Record], entity_id: str, record: Record) -> list[Record]:
    return [record if item.get("_id") == entity_id else item for item in items]


class BookStore(OptimisticStore):
    """Optimistic store for the admin book list."""

    async def refresh(self) -> list[Record]:
        try:
            books = await self.client.list_books(admin=True)
        except CatalogAPIError as e:
            self._notify("error", "Failed to load books")
            logger.error(f"Failed to fetch books: {e}")
            raise
        self.items = list(books)
        self._transition(MutationState.STABLE)
        return self.items

    async def add(self, fields: Record) -> Record:
        """Add a book, showing it immediately under a temporary id."""
        temp_id = _temporary_id()
        optimistic = {**fields, "_id": temp_id}

        def reconcile(items: list[Record], response: dict) -> list[Record]:
            stored = response.get("book") or {**fields, "_id": response.get("id", temp_id)}
            return _replace(items, temp_id, stored)

        response = await self.mutate(
            temp_id,
            apply=lambda items: [*items, optimistic],
            request=lambda: self.client.create_book(fields, admin=True),
            reconcile=reconcile,
            success_message="Book added successfully!",
            failure_message="Failed to add book.",
        )
        return response.get("book") or self.find(response.get("id", temp_id)) or optimistic

    async def update(self, book_id: str, patch: Record) -> Record:
        """Merge ``patch`` into the book locally, then on the server."""
        optimistic: Record = {"_id": book_id, **patch}

        def apply(items: list[Record]) -> list[Record]:
            # Merge at apply time so queued updates build on each other
            current = next((item for item in items if item.get("_id") == book_id), {})
            optimistic.update({**current, **patch})
            return _replace(items, book_id, dict(optimistic))

        def reconcile(items: list[Record], response: dict) -> list[Record]:
            # The API acknowledges updates without a record; keep ours then
            return _replace(items, book_id, response.get("book") or dict(optimistic))

        await self.mutate(
            book_id,
            apply=apply,
            request=lambda: self.client.update_book(book_id, patch),
            reconcile=reconcile,
            success_message="Book updated successfully",
            failure_message="Failed to update. Reverting changes.",
        )
        return self.find(book_id) or optimistic

    async def delete(self, book_id: str) -> None:
        await self.mutate(
            book_id,
            apply=lambda items: [item for item in items if item.get("_id") != book_id],
            request=lambda: self.client.delete_book(book_id),
            success_message="Book deleted",
            failure_message="Failed to delete. Reverting.",
        )

    def displayed(
        self,
        query: str = "",
        sort_key: str = "title",
        sort_dir: str = "asc",
    ) -> list[Record]:
        """Books matching ``query`` on title, author or genre, sorted.

        ``price`` and ``publishedYear`` sort numerically; other keys sort as
        lowercase text.
        """
        needle = query.strip().lower()
        books = [
            book
            for book in self.items
            if not needle
            or any(needle in str(book.get(field) or "").lower() for field in SEARCH_FIELDS)
        ]

        def numeric(book: Record) -> float:
            try:
                return float(book.get(sort_key) or 0)
            except (TypeError, ValueError):
                return 0.0

        def text(book: Record) -> str:
            value = book.get(sort_key)
            return "" if value is None else str(value).lower()

        key = numeric if sort_key in NUMERIC_SORT_KEYS else text
        return sorted(books, key=key, reverse=sort_dir == "desc")


class CartStore(OptimisticStore):
    """Optimistic store for the shopping cart."""

    async def refresh(self) -> list[Record]:
        try:
            items = await self.client.list_cart()
        except CatalogAPIError as e:
            # Show an empty cart rather than a stale one
            self.items = []
            logger.error(f"Fetch cart error: {e}")
            raise
        self.items = list(items)
        self._transition(MutationState.STABLE)
        return self.items

    async def add(self, book_id: str, quantity: int = 1) -> Record:
        temp_id = _temporary_id()
        optimistic = {"_id": temp_id, "bookId": book_id, "quantity": quantity}

        item = await self.mutate(
            temp_id,
            apply=lambda items: [*items, optimistic],
            request=lambda: self.client.add_to_cart(book_id, quantity),
            reconcile=lambda items, created: _replace(items, temp_id, created),
            success_message="Book added to cart",
            failure_message="Failed to add to cart",
        )
        return item

    async def remove(self, item_id: str) -> None:
        await self.mutate(
            item_id,
            apply=lambda items: [item for item in items if item.get("_id") != item_id],
            request=lambda: self.client.remove_cart_item(item_id),
            success_message="Item removed from cart",
            failure_message="Failed to remove item",
        )

    async def clear(self) -> int:
        return await self.mutate(
            ALL_ENTITIES,
            apply=lambda items: [],
            request=self.client.clear_cart,
            success_message="Cart cleared",
            failure_message="Failed to clear cart",
        )
