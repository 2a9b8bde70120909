"""
Book service: validation in front of the books repository.

Business rules for the shop go here. Input is checked before anything is
written, so a rejected request never reaches the database.
"""
import logging
import math
from dataclasses import replace
from typing import Any, Dict, List

from domain.errors import ValidationError
from domain.models import (
    MUTABLE_FIELDS,
    PRICE_LIMIT,
    PRICE_SCALE,
    QUANTITY_MAX,
    TEXT_MAX_LENGTH,
    Book,
)
from repositories.books import BooksRepository

logger = logging.getLogger(__name__)


def _check_text(name: str, value: Any, errors: Dict[str, str]) -> None:
    if not isinstance(value, str) or not value.strip():
        errors[name] = f"{name} must be a non-empty string"
    elif len(value.strip()) > TEXT_MAX_LENGTH:
        errors[name] = f"{name} must be at most {TEXT_MAX_LENGTH} characters"


def _check_price(value: Any, errors: Dict[str, str]) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        errors["price"] = "price must be a number"
    elif not math.isfinite(value) or value < 0:
        errors["price"] = "price must be a finite number >= 0"
    elif value >= PRICE_LIMIT:
        errors["price"] = f"price must be less than {PRICE_LIMIT}"
    elif round(value, PRICE_SCALE) != value:
        errors["price"] = f"price must have at most {PRICE_SCALE} decimal places"


def _check_quantity(value: Any, errors: Dict[str, str]) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        errors["quantity"] = "quantity must be an integer"
    elif value < 0:
        errors["quantity"] = "quantity must be >= 0"
    elif value > QUANTITY_MAX:
        errors["quantity"] = f"quantity must be at most {QUANTITY_MAX}"


_CHECKS = {
    "title": lambda value, errors: _check_text("title", value, errors),
    "author": lambda value, errors: _check_text("author", value, errors),
    "price": _check_price,
    "quantity": _check_quantity,
}


def validate_fields(values: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate a (possibly partial) set of book fields.

    Args:
        values: field name -> value; only the supplied fields are checked

    Returns:
        A cleaned copy with text fields stripped.

    Raises:
        ValidationError: listing every offending field.
    """
    errors: Dict[str, str] = {}
    for name in values:
        if name not in MUTABLE_FIELDS:
            errors[name] = f"unknown field {name}"
    for name, check in _CHECKS.items():
        if name in values:
            check(values[name], errors)
    if errors:
        logger.debug("Rejected book data: %s", errors)
        raise ValidationError("Invalid book data", errors)

    cleaned = dict(values)
    for name in ("title", "author"):
        if name in cleaned:
            cleaned[name] = cleaned[name].strip()
    return cleaned


def validate_book(book: Book) -> Book:
    """Check every mutable field of a full book record."""
    cleaned = validate_fields(book.mutable_values())
    return replace(book, **cleaned)


class BookService:
    """Operations exposed to the HTTP layer."""

    def __init__(self, repository: BooksRepository):
        self.repository = repository

    def create_book(self, book: Book) -> Book:
        book = validate_book(replace(book, id=None))
        book_id = self.repository.create(book)
        return self.repository.get_by_id(book_id)

    def get_book(self, book_id: int) -> Book:
        return self.repository.get_by_id(book_id)

    def list_books(self) -> List[Book]:
        return self.repository.list()

    def update_book(self, book_id: int, book: Book) -> Book:
        book = validate_book(book)
        self.repository.update(book_id, book)
        return self.repository.get_by_id(book_id)

    def patch_book(self, book_id: int, changes: Dict[str, Any]) -> Book:
        """Update only the supplied fields; an empty patch just returns the book."""
        cleaned = validate_fields(changes)
        if not cleaned:
            return self.repository.get_by_id(book_id)
        self.repository.update_fields(book_id, cleaned)
        return self.repository.get_by_id(book_id)

    def delete_book(self, book_id: int) -> None:
        self.repository.delete(book_id)
