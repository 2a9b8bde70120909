"""
Books API routes.
"""
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Path, Request, Response
from pydantic import BaseModel

from domain.models import ID_MAX, Book
from services.book_service import BookService

router = APIRouter()


class BookCreate(BaseModel):
    title: str
    author: str
    price: float
    quantity: int = 0


class BookUpdate(BookCreate):
    pass


class BookPatch(BaseModel):
    title: Optional[str] = None
    author: Optional[str] = None
    price: Optional[float] = None
    quantity: Optional[int] = None


class BookResponse(BaseModel):
    id: int
    title: str
    author: str
    price: float
    quantity: int


def book_to_response(book: Book) -> BookResponse:
    """Convert domain Book to API response."""
    return BookResponse(
        id=book.id,
        title=book.title,
        author=book.author,
        price=book.price,
        quantity=book.quantity,
    )


BookId = Annotated[int, Path(ge=1, le=ID_MAX)]


def get_book_service(request: Request) -> BookService:
    return request.app.state.book_service


@router.get("", response_model=List[BookResponse])
def list_books(service: BookService = Depends(get_book_service)):
    """List all books, id ascending."""
    return [book_to_response(b) for b in service.list_books()]


@router.post("", response_model=BookResponse, status_code=201)
def create_book(data: BookCreate, service: BookService = Depends(get_book_service)):
    """Create a new book."""
    book = Book(title=data.title, author=data.author, price=data.price, quantity=data.quantity)
    return book_to_response(service.create_book(book))


@router.get("/{book_id}", response_model=BookResponse)
def get_book(book_id: BookId, service: BookService = Depends(get_book_service)):
    """Get a book by ID."""
    return book_to_response(service.get_book(book_id))


@router.put("/{book_id}", response_model=BookResponse)
def update_book(book_id: BookId, data: BookUpdate, service: BookService = Depends(get_book_service)):
    """Replace every field of a book."""
    book = Book(title=data.title, author=data.author, price=data.price, quantity=data.quantity)
    return book_to_response(service.update_book(book_id, book))


@router.patch("/{book_id}", response_model=BookResponse)
def patch_book(book_id: BookId, data: BookPatch, service: BookService = Depends(get_book_service)):
    """Update only the fields present in the body."""
    changes = data.model_dump(exclude_unset=True)
    return book_to_response(service.patch_book(book_id, changes))


@router.delete("/{book_id}", status_code=204)
def delete_book(book_id: BookId, service: BookService = Depends(get_book_service)):
    """Delete a book."""
    service.delete_book(book_id)
    return Response(status_code=204)
