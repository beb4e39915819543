"""Pydantic schemas for API request/response validation.

Wire names follow the camelCase JSON the catalog frontend speaks; record
identifiers travel as ``_id``.
"""

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# Book schemas
class BookPayload(CamelModel):
    """Book fields sent by a client, for create and partial update.

    Everything is optional here; required-field rules are enforced by the
    repository so that missing fields produce the same error everywhere.
    """

    model_config = ConfigDict(extra="ignore")

    title: str | None = None
    author: str | None = None
    price: float | None = None
    published_year: int | None = None
    genre: str | None = None
    description: str | None = None
    image_url: str | None = None


class BookResponse(CamelModel):
    """Schema for book response."""

    id: str = Field(validation_alias=AliasChoices("_id", "id"), serialization_alias="_id")
    title: str | None
    author: str | None
    price: float | None
    published_year: int | None = None
    genre: str | None = None
    description: str | None = None
    image_url: str | None = None
    created_at: datetime
    updated_at: datetime


class BookCreatedResponse(CamelModel):
    """Schema for create response: one book or a bulk insert."""

    message: str
    id: str | None = None
    book: BookResponse | None = None
    inserted_count: int | None = None


class BookDeletedResponse(CamelModel):
    """Schema for delete response."""

    message: str
    cart_items_removed: int = 0


# Cart schemas
class CartAddRequest(CamelModel):
    """Schema for adding a book to the cart."""

    book_id: Any = None
    quantity: int | None = 1


class CartItemResponse(CamelModel):
    """Schema for cart item response."""

    id: str = Field(validation_alias=AliasChoices("_id", "id"), serialization_alias="_id")
    book_id: str
    quantity: int | None
    created_at: datetime


class CartAddResponse(CamelModel):
    """Schema for add-to-cart response."""

    message: str
    item: CartItemResponse


class CartClearedResponse(CamelModel):
    """Schema for clear-cart response."""

    message: str
    deleted_count: int


class MessageResponse(BaseModel):
    """Schema for a plain acknowledgement."""

    message: str
