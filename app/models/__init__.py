"""Database models."""

from app.models.book import Book
from app.models.cart import CartItem

__all__ = ["Book", "CartItem"]
