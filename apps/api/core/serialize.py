"""Helpers to serialize SQLAlchemy ORM models to API dicts.

Books are shaped by ``catalogdb.services.book_service.format_book``.
"""

from __future__ import annotations

from catalogdb.db.models import Author, Category


def serialize_author(author: Author) -> dict:
    return {
        "id": author.id,
        "name": author.name,
        "bio": author.bio,
        "photoUrl": author.photo_url,
        "birthDate": author.birth_date,
        "createdAt": author.created_at,
        "updatedAt": author.updated_at,
    }


def serialize_category(category: Category, ancestors: list[Category] | None = None) -> dict:
    data = {
        "id": category.id,
        "name": category.name,
        "slug": category.slug,
        "parentId": category.parent_id,
        "description": category.description,
        "createdAt": category.created_at,
        "updatedAt": category.updated_at,
    }
    if ancestors is not None:
        data["ancestors"] = [
            {"id": c.id, "name": c.name, "slug": c.slug} for c in ancestors
        ]
    return data
