"""Error taxonomy for catalog and cart operations."""


class CatalogError(Exception):
    """Base class for errors raised by the catalog core."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidIdentifierError(CatalogError):
    """An externally supplied identifier is malformed. Storage was not touched."""

    status_code = 400

    def __init__(self, raw: object, label: str = "ID") -> None:
        super().__init__(f"Invalid {label}")
        self.raw = raw


class RecordValidationError(CatalogError):
    """A record failed field validation before reaching storage."""

    status_code = 400


class BookValidationError(RecordValidationError):
    """A book is missing required fields or carries invalid values."""


class CartValidationError(RecordValidationError):
    """A cart item carries an invalid quantity (strict mode only)."""


class NotFoundError(CatalogError):
    """The identifier is well-formed but no record matches it."""

    status_code = 404


class StorageFailure(CatalogError):
    """The underlying database call failed."""

    status_code = 503


class PartialCascadeFailure(StorageFailure):
    """The book was deleted but removing its cart items failed.

    The cart collection may still hold items that reference ``book_id``.
    """

    def __init__(self, book_id: str, message: str | None = None) -> None:
        super().__init__(message or f"Book {book_id} deleted but cart cleanup failed")
        self.book_id = book_id
