from unittest.mock import MagicMock

import pytest

from domain.errors import NotFoundError, ValidationError
from domain.models import Book
from repositories.books import BooksRepository
from services.book_service import BookService, validate_fields


def test_create_strips_text_and_returns_stored_book(service):
    created = service.create_book(Book(title="  Emma ", author="Jane Austen ", price=4, quantity=1))

    assert created.id is not None
    assert created.title == "Emma"
    assert created.author == "Jane Austen"
    assert service.get_book(created.id) == created


def test_create_ignores_client_supplied_id(service):
    created = service.create_book(Book(id=777, title="Emma", author="Jane Austen", price=4.0))
    assert created.id != 777
    assert [b.id for b in service.list_books()] == [created.id]


@pytest.mark.parametrize(
    "kwargs, field",
    [
        ({"title": ""}, "title"),
        ({"title": "   "}, "title"),
        ({"author": ""}, "author"),
        ({"price": -1.0}, "price"),
        ({"price": float("nan")}, "price"),
        ({"quantity": -2}, "quantity"),
    ],
)
def test_invalid_book_is_rejected_without_write(kwargs, field):
    repo = MagicMock(spec=BooksRepository)
    service = BookService(repo)
    data = {"title": "Emma", "author": "Jane Austen", "price": 4.0, "quantity": 1}
    data.update(kwargs)

    with pytest.raises(ValidationError) as excinfo:
        service.create_book(Book(**data))

    assert field in excinfo.value.fields
    repo.create.assert_not_called()


def test_update_validates_before_writing():
    repo = MagicMock(spec=BooksRepository)
    service = BookService(repo)

    with pytest.raises(ValidationError):
        service.update_book(1, Book(title="", author="", price=1.0))

    repo.update.assert_not_called()


def test_update_missing_book(service):
    with pytest.raises(NotFoundError):
        service.update_book(12, Book(title="Emma", author="Jane Austen", price=4.0))


def test_patch_only_touches_given_fields(service):
    created = service.create_book(Book(title="Emma", author="Jane Austen", price=4.0, quantity=1))

    patched = service.patch_book(created.id, {"price": 5.5})

    assert patched.price == 5.5
    assert patched.title == "Emma"
    assert patched.quantity == 1


def test_empty_patch_on_missing_book_is_not_found(service):
    with pytest.raises(NotFoundError):
        service.patch_book(3, {})


def test_patch_rejects_null_title(service):
    created = service.create_book(Book(title="Emma", author="Jane Austen", price=4.0))
    with pytest.raises(ValidationError):
        service.patch_book(created.id, {"title": None})


def test_validate_fields_reports_every_error():
    with pytest.raises(ValidationError) as excinfo:
        validate_fields({"title": "", "price": "free", "quantity": True, "isbn": "x"})
    assert set(excinfo.value.fields) == {"title", "price", "quantity", "isbn"}


def test_delete_then_list(service):
    keep = service.create_book(Book(title="Keep", author="A", price=1.0))
    gone = service.create_book(Book(title="Gone", author="B", price=1.0))

    service.delete_book(gone.id)

    assert [b.id for b in service.list_books()] == [keep.id]
    with pytest.raises(NotFoundError):
        service.delete_book(gone.id)
