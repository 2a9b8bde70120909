"""
Error taxonomy shared by the repository, service and HTTP layers.
"""
from typing import Dict, Optional


class BookShopError(Exception):
    """Base class for errors raised by the book shop."""


class ValidationError(BookShopError):
    """Input did not have the expected shape."""

    def __init__(self, message: str, fields: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.fields = fields or {}


class NotFoundError(BookShopError):
    """No book row matched the given identifier."""

    def __init__(self, book_id: int):
        super().__init__(f"Book {book_id} not found")
        self.book_id = book_id


class StorageError(BookShopError):
    """The database connection or a query failed."""


class StartupError(BookShopError):
    """Fatal problem while booting: missing env file, bad DSN, failed ping."""
