from __future__ import annotations

from fastapi import APIRouter, Depends, status
from pydantic import UUID4

from catalogdb.schemas import CreateBookInput, ListBooksQuery, UpdateBookInput
from catalogdb.services.book_service import BookService

from ..core.deps import get_book_service, query_model, require_admin
from ..core.responses import success_response

router = APIRouter(prefix="/books", tags=["books"], dependencies=[Depends(require_admin)])


@router.post("", status_code=status.HTTP_201_CREATED)
def create_book(payload: CreateBookInput, service: BookService = Depends(get_book_service)):
    book = service.create(payload)
    return success_response(book, "Book created successfully", status.HTTP_201_CREATED)


@router.get("")
def list_books(
    query: ListBooksQuery = Depends(query_model(ListBooksQuery)),
    service: BookService = Depends(get_book_service),
):
    result = service.list(query)
    return success_response(result, "Books retrieved successfully")


@router.get("/{book_id}")
def get_book(book_id: UUID4, service: BookService = Depends(get_book_service)):
    book = service.get_by_id(str(book_id))
    return success_response(book, "Book retrieved successfully")


@router.put("/{book_id}")
def update_book(
    book_id: UUID4,
    payload: UpdateBookInput,
    service: BookService = Depends(get_book_service),
):
    book = service.update(str(book_id), payload)
    return success_response(book, "Book updated successfully")


@router.delete("/{book_id}")
def delete_book(book_id: UUID4, service: BookService = Depends(get_book_service)):
    service.delete(str(book_id))
    return success_response(None, "Book deleted successfully")
