"""Shared fixtures and factory helpers for catalog CRUD tests.

Uses an in-memory SQLite database, so no running Postgres is required.
Each test gets a completely fresh database (function-scoped engine).
"""

from decimal import Decimal

import pytest
from sqlalchemy.orm import Session

from catalogdb.db.base import Base
from catalogdb.db.crud import AuthorCRUD, BookCRUD, CategoryCRUD
from catalogdb.db.models import BookFormat
from catalogdb.db.session import make_engine


# ---------------------------------------------------------------------------
# Core fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def session():
    """Provide a fresh, isolated in-memory SQLite session for each test."""
    engine = make_engine("sqlite://")
    Base.metadata.create_all(engine)
    with Session(engine, autoflush=False) as sess:
        yield sess
    engine.dispose()


# ---------------------------------------------------------------------------
# Factory helpers (plain functions, not fixtures, so tests can call them
# with custom arguments easily)
# ---------------------------------------------------------------------------


def make_author(session, name="George Orwell", **kwargs):
    return AuthorCRUD.create(session, name=name, **kwargs)


def make_category(session, name="Fiction", **kwargs):
    return CategoryCRUD.create(session, name=name, **kwargs)


def make_book(session, title="1984", **kwargs):
    fields = {
        "description": "A dystopian novel.",
        "format": BookFormat.PAPERBACK,
        "price": Decimal("9.99"),
        "cover_image_url": "https://covers.example.com/1984.jpg",
    }
    fields.update(kwargs)
    return BookCRUD.create(session, title=title, **fields)
