"""Book API routes.

Public routes under ``/books`` and token-protected admin routes under
``/admin/books``. Both delete routes cascade to the cart.
"""

from fastapi import APIRouter, Body, Depends, status

from app.api.auth import require_token
from app.api.schemas import (
    BookCreatedResponse,
    BookDeletedResponse,
    BookPayload,
    BookResponse,
    MessageResponse,
)
from app.services.books import BookRepository, get_book_repository

router = APIRouter(prefix="/books", tags=["books"])
admin_router = APIRouter(
    prefix="/admin/books",
    tags=["admin"],
    dependencies=[Depends(require_token)],
)


async def _create_books(
    payload: BookPayload | list[BookPayload],
    books: BookRepository,
) -> BookCreatedResponse:
    if isinstance(payload, list):
        count = await books.create_book([item.model_dump(exclude_unset=True) for item in payload])
        return BookCreatedResponse(message="Books created", inserted_count=count)

    record = await books.create_book(payload.model_dump(exclude_unset=True))
    return BookCreatedResponse(
        message="Book created",
        id=record.id,
        book=BookResponse.model_validate(record),
    )


async def _list_books(books: BookRepository) -> list[BookResponse]:
    return [BookResponse.model_validate(record) for record in await books.list_books()]


async def _delete_book(book_id: str, books: BookRepository) -> BookDeletedResponse:
    result = await books.delete_book(book_id)
    return BookDeletedResponse(message="Book deleted", cart_items_removed=result.cart_items_removed)


@router.get("", response_model=list[BookResponse])
async def list_books(
    books: BookRepository = Depends(get_book_repository),
) -> list[BookResponse]:
    """List all books."""
    return await _list_books(books)


@router.post(
    "",
    response_model=BookCreatedResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_book(
    payload: BookPayload | list[BookPayload] = Body(...),
    books: BookRepository = Depends(get_book_repository),
) -> BookCreatedResponse:
    """Create a book, or several when given a list."""
    return await _create_books(payload, books)


@router.get("/{book_id}", response_model=BookResponse)
async def get_book(
    book_id: str,
    books: BookRepository = Depends(get_book_repository),
) -> BookResponse:
    """Get a specific book by ID."""
    return BookResponse.model_validate(await books.get_book(book_id))


@router.delete("/{book_id}", response_model=BookDeletedResponse)
async def delete_book(
    book_id: str,
    books: BookRepository = Depends(get_book_repository),
) -> BookDeletedResponse:
    """Delete a book and its cart items."""
    return await _delete_book(book_id, books)


@admin_router.get("", response_model=list[BookResponse])
async def admin_list_books(
    books: BookRepository = Depends(get_book_repository),
) -> list[BookResponse]:
    """List all books for the admin dashboard."""
    return await _list_books(books)


@admin_router.post(
    "",
    response_model=BookCreatedResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def admin_create_book(
    payload: BookPayload | list[BookPayload] = Body(...),
    books: BookRepository = Depends(get_book_repository),
) -> BookCreatedResponse:
    """Create a book from the admin dashboard."""
    return await _create_books(payload, books)


@admin_router.put("/{book_id}", response_model=MessageResponse)
async def admin_update_book(
    book_id: str,
    payload: BookPayload,
    books: BookRepository = Depends(get_book_repository),
) -> MessageResponse:
    """Merge the given fields into a book."""
    await books.update_book(book_id, payload.model_dump(exclude_unset=True))
    return MessageResponse(message="Book updated")


@admin_router.delete("/{book_id}", response_model=BookDeletedResponse)
async def admin_delete_book(
    book_id: str,
    books: BookRepository = Depends(get_book_repository),
) -> BookDeletedResponse:
    """Delete a book and its cart items."""
    return await _delete_book(book_id, books)
