from __future__ import annotations

from fastapi import APIRouter, Depends, status
from pydantic import UUID4
from sqlalchemy.orm import Session

from catalogdb.db.crud import AuthorCRUD
from catalogdb.errors import NotFoundError
from catalogdb.schemas import CreateAuthorInput, PageQuery
from catalogdb.services.book_service import build_pagination

from ..core.deps import get_db, query_model, require_admin
from ..core.responses import success_response
from ..core.serialize import serialize_author

router = APIRouter(prefix="/authors", tags=["authors"], dependencies=[Depends(require_admin)])


def _get_author_or_404(db: Session, author_id: UUID4):
    author = AuthorCRUD.get_by_id(db, str(author_id))
    if author is None:
        raise NotFoundError("Author", author_id)
    return author


@router.post("", status_code=status.HTTP_201_CREATED)
def create_author(payload: CreateAuthorInput, db: Session = Depends(get_db)):
    author = AuthorCRUD.create(db, **payload.model_dump())
    db.commit()
    return success_response(serialize_author(author), "Author created successfully", status.HTTP_201_CREATED)


@router.get("")
def list_authors(query: PageQuery = Depends(query_model(PageQuery)), db: Session = Depends(get_db)):
    authors = AuthorCRUD.list(db, offset=(query.page - 1) * query.limit, limit=query.limit)
    total = AuthorCRUD.count(db)
    return success_response(
        {
            "authors": [serialize_author(a) for a in authors],
            "pagination": build_pagination(query.page, query.limit, total),
        },
        "Authors retrieved successfully",
    )


@router.get("/{author_id}")
def get_author(author_id: UUID4, db: Session = Depends(get_db)):
    return success_response(serialize_author(_get_author_or_404(db, author_id)), "Author retrieved successfully")


@router.delete("/{author_id}")
def delete_author(author_id: UUID4, db: Session = Depends(get_db)):
    author = _get_author_or_404(db, author_id)
    AuthorCRUD.delete(db, author.id)
    db.commit()
    return success_response(None, "Author deleted successfully")
