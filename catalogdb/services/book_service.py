"""Book aggregate: cross-record rules on top of the CRUD layer.

The service owns the unit of work for each call (it commits) and returns
*shaped* books: plain dicts with camelCase keys and the join rows flattened
into ordered ``authors`` / ``categories`` arrays. Typed failures from the
store propagate unchanged.
"""

from __future__ import annotations

import logging
import math
from typing import Any

from sqlalchemy import inspect
from sqlalchemy.orm import Session

from ..db.crud import DUPLICATE_ISBN_MESSAGE, AuthorCRUD, BookCRUD, BookFilters, CategoryCRUD
from ..db.models import Book
from ..errors import ConflictError, NotFoundError, ValidationError
from ..schemas import CreateBookInput, ListBooksQuery, UpdateBookInput

logger = logging.getLogger(__name__)


def build_pagination(page: int, limit: int, total: int) -> dict[str, Any]:
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "totalPages": math.ceil(total / limit),
        "hasNext": page * limit < total,
        "hasPrev": page > 1,
    }


def format_book(book: Book) -> dict[str, Any]:
    """Flatten a Book row and its join rows into the public representation.

    Relation arrays are only present when the relationship was loaded.
    """
    data = {
        "id": book.id,
        "isbn": book.isbn,
        "isbn13": book.isbn13,
        "title": book.title,
        "subtitle": book.subtitle,
        "description": book.description,
        "publisher": book.publisher,
        "publicationDate": book.publication_date,
        "edition": book.edition,
        "language": book.language,
        "pageCount": book.page_count,
        "format": book.format.value if book.format is not None else None,
        "price": book.price,
        "discountPrice": book.discount_price,
        "stockQuantity": book.stock_quantity,
        "coverImageUrl": book.cover_image_url,
        "previewUrl": book.preview_url,
        "averageRating": book.average_rating,
        "ratingsCount": book.ratings_count,
        "additionalInfo": book.additional_info,
        "isFeatured": book.is_featured,
        "isActive": book.is_active,
        "createdAt": book.created_at,
        "updatedAt": book.updated_at,
    }
    unloaded = inspect(book).unloaded
    if "authors" not in unloaded:
        data["authors"] = [
            {"id": ba.author.id, "name": ba.author.name, "order": ba.author_order}
            for ba in sorted(book.authors, key=lambda ba: ba.author_order)
        ]
    if "categories" not in unloaded:
        data["categories"] = [
            {
                "id": bc.category.id,
                "name": bc.category.name,
                "slug": bc.category.slug,
                "isPrimary": bc.is_primary,
            }
            for bc in sorted(book.categories, key=lambda bc: not bc.is_primary)
        ]
    return data


def _unique(ids: list[str]) -> list[str]:
    return list(dict.fromkeys(ids))


class BookService:
    def __init__(self, session: Session):
        self.session = session

    def create(self, data: CreateBookInput) -> dict[str, Any]:
        # Fast path only; the unique indexes are what actually guard ISBNs.
        if data.isbn or data.isbn13:
            if BookCRUD.find_duplicate(self.session, isbn=data.isbn, isbn13=data.isbn13):
                raise ConflictError(DUPLICATE_ISBN_MESSAGE)

        author_ids = _unique([str(i) for i in data.author_ids])
        category_ids = _unique([str(i) for i in data.category_ids])
        authors = AuthorCRUD.get_by_ids(self.session, author_ids)
        categories = CategoryCRUD.get_by_ids(self.session, category_ids)
        errors = []
        missing_author = next((i for i in author_ids if i not in authors), None)
        if missing_author is not None:
            errors.append({
                "field": "authorIds",
                "message": f"Author with identifier '{missing_author}' not found",
                "value": missing_author,
            })
        missing_category = next((i for i in category_ids if i not in categories), None)
        if missing_category is not None:
            errors.append({
                "field": "categoryIds",
                "message": f"Category with identifier '{missing_category}' not found",
                "value": missing_category,
            })
        if errors:
            raise ValidationError("Validation failed", errors)

        book = BookCRUD.create(
            self.session,
            authors=[authors[i] for i in author_ids],
            categories=[categories[i] for i in category_ids],
            **data.book_fields(),
        )
        book_id = book.id
        self.session.commit()
        logger.info("Created book %s (%d authors, %d categories)", book_id, len(author_ids), len(category_ids))
        return self.get_by_id(book_id)

    def list(self, query: ListBooksQuery) -> dict[str, Any]:
        filters = BookFilters(
            search=query.search,
            format=query.format,
            is_active=query.is_active,
            is_featured=query.is_featured,
        )
        skip = (query.page - 1) * query.limit
        # Page and total are not read under one snapshot; a concurrent write
        # may make them disagree by a row or two.
        books = BookCRUD.list(self.session, filters, offset=skip, limit=query.limit)
        total = BookCRUD.count(self.session, filters)
        return {
            "books": [format_book(book) for book in books],
            "pagination": build_pagination(query.page, query.limit, total),
        }

    def get_by_id(self, book_id: str) -> dict[str, Any]:
        book = BookCRUD.get_by_id(self.session, book_id, with_relations=True)
        if book is None:
            raise NotFoundError("Book", book_id)
        return format_book(book)

    def update(self, book_id: str, data: UpdateBookInput) -> dict[str, Any]:
        fields = data.book_fields()
        BookCRUD.update(self.session, book_id, **fields)
        self.session.commit()
        logger.info("Updated book %s fields=%s", book_id, sorted(fields))
        return self.get_by_id(book_id)

    def delete(self, book_id: str) -> None:
        if not BookCRUD.delete(self.session, book_id):
            raise NotFoundError("Book", book_id)
        self.session.commit()
        logger.info("Deleted book %s", book_id)
