from __future__ import annotations

from typing import Callable, Generator, TypeVar

from fastapi import Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session

from catalogdb.db.session import SessionLocal
from catalogdb.errors import ForbiddenError, UnauthorizedError
from catalogdb.services.book_service import BookService

from .auth import ADMIN_ROLE, Principal, decode_token

bearer_scheme = HTTPBearer(auto_error=False)

QueryModel = TypeVar("QueryModel", bound=BaseModel)


def get_db() -> Generator[Session, None, None]:
    with SessionLocal() as session:
        yield session


def get_book_service(db: Session = Depends(get_db)) -> BookService:
    return BookService(db)


def get_current_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> Principal:
    if credentials is None:
        raise UnauthorizedError("No authorization token provided")
    return decode_token(credentials.credentials)


def require_role(*roles: str):
    def dependency(principal: Principal = Depends(get_current_principal)) -> Principal:
        if not principal.role or principal.role not in roles:
            raise ForbiddenError(f"Access denied. Required role: {' or '.join(roles)}")
        return principal

    return dependency


require_admin = require_role(ADMIN_ROLE)


def query_model(model: type[QueryModel]) -> Callable[[Request], QueryModel]:
    """Dependency parsing the whole query string into ``model`` (camelCase keys)."""

    def dependency(request: Request) -> QueryModel:
        try:
            return model.model_validate(dict(request.query_params))
        except ValidationError as exc:
            raise RequestValidationError(
                [{**err, "loc": ("query", *err["loc"])} for err in exc.errors()]
            ) from None

    return dependency
