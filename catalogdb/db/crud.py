"""CRUD helpers for the catalog schema.

One class per model in ``catalogdb.db.models``, with static methods taking a
SQLAlchemy ``Session``. Writes flush so IDs and join rows are available
immediately; committing is left to the caller. Integrity failures surfaced
by a flush are translated into ``ConflictError``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from sqlalchemy import ColumnElement, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from ..errors import ConflictError, NotFoundError, ValidationError
from .models import (
    Author,
    Book,
    BookAuthor,
    BookCategory,
    BookFormat,
    Category,
)

DUPLICATE_ISBN_MESSAGE = "A book with this ISBN already exists"

BOOK_LOAD_OPTIONS = (
    selectinload(Book.authors).selectinload(BookAuthor.author),
    selectinload(Book.categories).selectinload(BookCategory.category),
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_SLUG_STRIP_RE = re.compile(r"[^a-z0-9]+")


def slugify(value: str) -> str:
    """Lowercase ``value`` and collapse every non-alphanumeric run into one hyphen."""
    return _SLUG_STRIP_RE.sub("-", value.lower()).strip("-")


def _require_non_empty(value: str | None, field_name: str) -> str:
    """Validate that a string field is not None, empty, or whitespace-only.

    The value is returned as given; only the check ignores surrounding spaces.
    """
    if value is None:
        raise ValueError(f"{field_name} is required")
    if not str(value).strip():
        raise ValueError(f"{field_name} must not be empty")
    return value


def _like_pattern(text: str) -> str:
    """Substring LIKE pattern with the wildcard characters in ``text`` escaped."""
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _check_unique(
    session: Session, model, field, value, label: str, exclude_id: str | None = None,
) -> None:
    """Pre-check a UNIQUE column, raising ConflictError on collision."""
    stmt = select(model).where(field == value)
    if exclude_id is not None:
        stmt = stmt.where(model.id != exclude_id)
    if session.scalar(stmt) is not None:
        raise ConflictError(f"{label} {value!r} is already taken")


INTEGRITY_MESSAGE = "The change conflicts with existing records"


def _is_unique_violation(exc: IntegrityError) -> bool:
    # psycopg exposes the SQLSTATE; sqlite only has the message text.
    if getattr(exc.orig, "sqlstate", None) == "23505":
        return True
    return "UNIQUE constraint failed" in str(exc.orig)


def _flush_or_conflict(session: Session, message: str) -> None:
    """Flush pending writes, rolling back and raising ConflictError on an integrity failure.

    ``message`` is used for unique violations only; foreign key and other
    constraint failures get a neutral message.
    """
    try:
        session.flush()
    except IntegrityError as exc:
        session.rollback()
        if _is_unique_violation(exc):
            raise ConflictError(message) from exc
        raise ConflictError(INTEGRITY_MESSAGE) from exc


@dataclass(frozen=True)
class BookFilters:
    search: str | None = None
    format: BookFormat | None = None
    is_active: bool | None = None
    is_featured: bool | None = None

    def clauses(self) -> list[ColumnElement[bool]]:
        clauses: list[ColumnElement[bool]] = []
        if self.search:
            clauses.append(Book.title.ilike(_like_pattern(self.search), escape="\\"))
        if self.format is not None:
            clauses.append(Book.format == self.format)
        if self.is_active is not None:
            clauses.append(Book.is_active == self.is_active)
        if self.is_featured is not None:
            clauses.append(Book.is_featured == self.is_featured)
        return clauses


class AuthorCRUD:
    @staticmethod
    def get_by_id(session: Session, author_id: str) -> Author | None:
        return session.get(Author, author_id)

    @staticmethod
    def get_by_ids(session: Session, author_ids: Iterable[str]) -> dict[str, Author]:
        ids = set(author_ids)
        if not ids:
            return {}
        stmt = select(Author).where(Author.id.in_(ids))
        return {a.id: a for a in session.scalars(stmt).all()}

    @staticmethod
    def get_by_name(session: Session, name: str) -> Author | None:
        stmt = select(Author).where(Author.name == name).limit(1)
        return session.scalar(stmt)

    @staticmethod
    def list(session: Session, offset: int = 0, limit: int = 20) -> Sequence[Author]:
        stmt = select(Author).order_by(Author.name, Author.id).offset(offset).limit(limit)
        return session.scalars(stmt).all()

    @staticmethod
    def count(session: Session) -> int:
        return session.scalar(select(func.count()).select_from(Author))

    @staticmethod
    def create(session: Session, name: str, **kwargs) -> Author:
        name = _require_non_empty(name, "name")
        author = Author(name=name, **kwargs)
        session.add(author)
        session.flush()
        return author

    @staticmethod
    def delete(session: Session, author_id: str) -> bool:
        author = session.get(Author, author_id)
        if not author:
            return False
        session.delete(author)
        session.flush()
        return True


class CategoryCRUD:
    @staticmethod
    def get_by_id(session: Session, category_id: str) -> Category | None:
        return session.get(Category, category_id)

    @staticmethod
    def get_by_ids(session: Session, category_ids: Iterable[str]) -> dict[str, Category]:
        ids = set(category_ids)
        if not ids:
            return {}
        stmt = select(Category).where(Category.id.in_(ids))
        return {c.id: c for c in session.scalars(stmt).all()}

    @staticmethod
    def get_by_slug(session: Session, slug: str) -> Category | None:
        return session.scalar(select(Category).where(Category.slug == slug))

    @staticmethod
    def list(session: Session, offset: int = 0, limit: int = 20) -> Sequence[Category]:
        stmt = select(Category).order_by(Category.name).offset(offset).limit(limit)
        return session.scalars(stmt).all()

    @staticmethod
    def count(session: Session) -> int:
        return session.scalar(select(func.count()).select_from(Category))

    @staticmethod
    def create(
        session: Session,
        name: str,
        slug: str | None = None,
        parent_id: str | None = None,
        **kwargs,
    ) -> Category:
        name = _require_non_empty(name, "name")
        slug = slug or slugify(name)
        if not slug:
            raise ValidationError(
                "Validation failed",
                [{"field": "slug", "message": "slug cannot be derived from name", "value": None}],
            )
        _check_unique(session, Category, Category.name, name, "Category name")
        _check_unique(session, Category, Category.slug, slug, "Category slug")
        if parent_id is not None and session.get(Category, parent_id) is None:
            raise NotFoundError("Category", parent_id)
        category = Category(name=name, slug=slug, parent_id=parent_id, **kwargs)
        session.add(category)
        _flush_or_conflict(session, "A category with this name or slug already exists")
        return category

    @staticmethod
    def ancestors(session: Session, category_id: str) -> list[Category]:
        """Walk parent links upwards, nearest first. Stops on a cycle."""
        category = session.get(Category, category_id)
        if category is None:
            return []
        chain: list[Category] = []
        visited = {category.id}
        parent_id = category.parent_id
        while parent_id is not None and parent_id not in visited:
            visited.add(parent_id)
            parent = session.get(Category, parent_id)
            if parent is None:
                break
            chain.append(parent)
            parent_id = parent.parent_id
        return chain

    @staticmethod
    def delete(session: Session, category_id: str) -> bool:
        category = session.get(Category, category_id)
        if not category:
            return False
        session.delete(category)
        session.flush()
        return True


class BookCRUD:
    @staticmethod
    def get_by_id(session: Session, book_id: str, with_relations: bool = False) -> Book | None:
        if not with_relations:
            return session.get(Book, book_id)
        stmt = (
            select(Book)
            .where(Book.id == book_id)
            .options(*BOOK_LOAD_OPTIONS)
            .execution_options(populate_existing=True)
        )
        return session.scalar(stmt)

    @staticmethod
    def find_duplicate(
        session: Session, isbn: str | None = None, isbn13: str | None = None,
    ) -> Book | None:
        """Return any book whose ``isbn`` or ``isbn13`` matches one of the given values."""
        conditions = []
        if isbn:
            conditions.append(Book.isbn == isbn)
        if isbn13:
            conditions.append(Book.isbn13 == isbn13)
        if not conditions:
            return None
        return session.scalar(select(Book).where(or_(*conditions)).limit(1))

    @staticmethod
    def list(
        session: Session,
        filters: BookFilters | None = None,
        offset: int = 0,
        limit: int = 20,
    ) -> Sequence[Book]:
        filters = filters or BookFilters()
        stmt = (
            select(Book)
            .where(*filters.clauses())
            .order_by(Book.created_at.desc(), Book.id)
            .offset(offset)
            .limit(limit)
            .options(*BOOK_LOAD_OPTIONS)
        )
        return session.scalars(stmt).all()

    @staticmethod
    def count(session: Session, filters: BookFilters | None = None) -> int:
        filters = filters or BookFilters()
        stmt = select(func.count()).select_from(Book).where(*filters.clauses())
        return session.scalar(stmt)

    @staticmethod
    def create(
        session: Session,
        authors: Sequence[Author] = (),
        categories: Sequence[Category] = (),
        **fields: Any,
    ) -> Book:
        """Insert a book together with its join rows in one flush.

        ``authors`` are credited in the given order starting at 1; the first
        of ``categories`` is the primary one.
        """
        fields["title"] = _require_non_empty(fields.get("title"), "title")
        book = Book(**fields)
        book.authors = [
            BookAuthor(author=author, author_order=position)
            for position, author in enumerate(authors, start=1)
        ]
        book.categories = [
            BookCategory(category=category, is_primary=position == 0)
            for position, category in enumerate(categories)
        ]
        session.add(book)
        _flush_or_conflict(session, DUPLICATE_ISBN_MESSAGE)
        return book

    @staticmethod
    def update(session: Session, book_id: str, **fields: Any) -> Book:
        book = session.get(Book, book_id)
        if not book:
            raise NotFoundError("Book", book_id)
        if "title" in fields:
            fields["title"] = _require_non_empty(fields["title"], "title")
        for key, value in fields.items():
            setattr(book, key, value)
        _flush_or_conflict(session, DUPLICATE_ISBN_MESSAGE)
        return book

    @staticmethod
    def delete(session: Session, book_id: str) -> bool:
        book = session.get(Book, book_id)
        if not book:
            return False
        session.delete(book)
        session.flush()
        return True


class BookAuthorCRUD:
    @staticmethod
    def get_for_book(session: Session, book_id: str) -> Sequence[BookAuthor]:
        stmt = (
            select(BookAuthor)
            .where(BookAuthor.book_id == book_id)
            .order_by(BookAuthor.author_order)
        )
        return session.scalars(stmt).all()


class BookCategoryCRUD:
    @staticmethod
    def get_for_book(session: Session, book_id: str) -> Sequence[BookCategory]:
        stmt = (
            select(BookCategory)
            .where(BookCategory.book_id == book_id)
            .order_by(BookCategory.is_primary.desc())
        )
        return session.scalars(stmt).all()
