from pydantic import BaseModel

from catalogdb.schemas import Email


class LoginRequest(BaseModel):
    email: Email
    password: str


class TokenResponse(BaseModel):
    accessToken: str
    tokenType: str = "bearer"
