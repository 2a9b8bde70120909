"""
Book repository backed by SQLAlchemy.

Each method runs exactly one SQL statement in its own session and relies on
the database for atomicity.
"""
import logging
from typing import Any, Dict, List

from sqlalchemy.exc import SQLAlchemyError

from db import Database
from domain.errors import NotFoundError, StorageError
from domain.models import ID_MAX, MUTABLE_FIELDS, Book
from repositories.models import BookORM

logger = logging.getLogger(__name__)


def _book_from_orm(orm: BookORM) -> Book:
    return Book(
        id=orm.id,
        title=orm.title,
        author=orm.author,
        price=float(orm.price),
        quantity=orm.quantity,
    )


def _check_id(book_id: int) -> None:
    # ids outside the column range can never match a row
    if not 1 <= book_id <= ID_MAX:
        raise NotFoundError(book_id)


def _check_fields(changes: Dict[str, Any]) -> None:
    unknown = set(changes) - set(MUTABLE_FIELDS)
    if unknown:
        raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")


class BooksRepository:
    """CRUD operations for books."""

    def __init__(self, database: Database):
        self.database = database

    def create(self, book: Book) -> int:
        orm = BookORM(**book.mutable_values())
        try:
            with self.database.session() as session:
                session.add(orm)
                session.flush()
                book_id = orm.id
                session.commit()
        except SQLAlchemyError as exc:
            logger.exception("Failed to insert book %r", book.title)
            raise StorageError(f"Failed to create book: {exc}") from exc
        logger.info("Created book %s", book_id)
        return book_id

    def get_by_id(self, book_id: int) -> Book:
        _check_id(book_id)
        try:
            with self.database.session() as session:
                orm = session.get(BookORM, book_id)
                book = _book_from_orm(orm) if orm else None
        except SQLAlchemyError as exc:
            logger.exception("Failed to load book %s", book_id)
            raise StorageError(f"Failed to get book {book_id}: {exc}") from exc
        if book is None:
            raise NotFoundError(book_id)
        return book

    def list(self) -> List[Book]:
        """All books, ordered by id ascending."""
        try:
            with self.database.session() as session:
                rows = session.query(BookORM).order_by(BookORM.id.asc()).all()
                return [_book_from_orm(b) for b in rows]
        except SQLAlchemyError as exc:
            logger.exception("Failed to list books")
            raise StorageError(f"Failed to list books: {exc}") from exc

    def update(self, book_id: int, book: Book) -> None:
        self.update_fields(book_id, book.mutable_values())

    def update_fields(self, book_id: int, changes: Dict[str, Any]) -> None:
        """UPDATE only the given columns; NotFoundError when no row matched."""
        _check_fields(changes)
        if not changes:
            raise ValueError("No fields to update")
        _check_id(book_id)
        try:
            with self.database.session() as session:
                matched = (
                    session.query(BookORM)
                    .filter(BookORM.id == book_id)
                    .update(changes, synchronize_session=False)
                )
                session.commit()
        except SQLAlchemyError as exc:
            logger.exception("Failed to update book %s", book_id)
            raise StorageError(f"Failed to update book {book_id}: {exc}") from exc
        if matched == 0:
            raise NotFoundError(book_id)
        logger.info("Updated book %s (%s)", book_id, ", ".join(sorted(changes)))

    def delete(self, book_id: int) -> None:
        _check_id(book_id)
        try:
            with self.database.session() as session:
                deleted = (
                    session.query(BookORM)
                    .filter(BookORM.id == book_id)
                    .delete(synchronize_session=False)
                )
                session.commit()
        except SQLAlchemyError as exc:
            logger.exception("Failed to delete book %s", book_id)
            raise StorageError(f"Failed to delete book {book_id}: {exc}") from exc
        if deleted == 0:
            raise NotFoundError(book_id)
        logger.info("Deleted book %s", book_id)
