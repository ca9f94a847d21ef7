from __future__ import annotations

from fastapi import APIRouter, Depends, status
from pydantic import UUID4
from sqlalchemy.orm import Session

from catalogdb.db.crud import CategoryCRUD
from catalogdb.errors import NotFoundError
from catalogdb.schemas import CreateCategoryInput, PageQuery
from catalogdb.services.book_service import build_pagination

from ..core.deps import get_db, query_model, require_admin
from ..core.responses import success_response
from ..core.serialize import serialize_category

router = APIRouter(prefix="/categories", tags=["categories"], dependencies=[Depends(require_admin)])


def _get_category_or_404(db: Session, category_id: UUID4):
    category = CategoryCRUD.get_by_id(db, str(category_id))
    if category is None:
        raise NotFoundError("Category", category_id)
    return category


@router.post("", status_code=status.HTTP_201_CREATED)
def create_category(payload: CreateCategoryInput, db: Session = Depends(get_db)):
    category = CategoryCRUD.create(db, **payload.category_fields())
    db.commit()
    return success_response(
        serialize_category(category),
        "Category created successfully",
        status.HTTP_201_CREATED,
    )


@router.get("")
def list_categories(query: PageQuery = Depends(query_model(PageQuery)), db: Session = Depends(get_db)):
    categories = CategoryCRUD.list(db, offset=(query.page - 1) * query.limit, limit=query.limit)
    total = CategoryCRUD.count(db)
    return success_response(
        {
            "categories": [serialize_category(c) for c in categories],
            "pagination": build_pagination(query.page, query.limit, total),
        },
        "Categories retrieved successfully",
    )


@router.get("/{category_id}")
def get_category(category_id: UUID4, db: Session = Depends(get_db)):
    category = _get_category_or_404(db, category_id)
    ancestors = CategoryCRUD.ancestors(db, category.id)
    return success_response(serialize_category(category, ancestors), "Category retrieved successfully")


@router.delete("/{category_id}")
def delete_category(category_id: UUID4, db: Session = Depends(get_db)):
    category = _get_category_or_404(db, category_id)
    CategoryCRUD.delete(db, category.id)
    db.commit()
    return success_response(None, "Category deleted successfully")
