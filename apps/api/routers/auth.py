from fastapi import APIRouter

from catalogdb.errors import UnauthorizedError

from ..core.auth import ADMIN_ROLE, create_token, verify_password
from ..core.config import settings
from ..core.responses import success_response
from ..schemas.auth import LoginRequest, TokenResponse

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login")
def login(payload: LoginRequest):
    password_hash = settings.ADMIN_PASSWORD_HASH
    if (
        not password_hash
        or payload.email.lower() != settings.ADMIN_EMAIL.lower()
        or not verify_password(payload.password, password_hash)
    ):
        raise UnauthorizedError("Invalid credentials")
    token = create_token(payload.email, email=payload.email, role=ADMIN_ROLE)
    return success_response(TokenResponse(accessToken=token).model_dump(), "Logged in successfully")
