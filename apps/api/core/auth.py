from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt

from catalogdb.errors import UnauthorizedError

from .config import settings

ALGORITHM = "HS256"
ADMIN_ROLE = "admin"


@dataclass(frozen=True)
class Principal:
    id: str
    email: str | None
    role: str | None


def create_token(subject: str, email: str | None = None, role: str | None = None) -> str:
    payload = {
        "sub": str(subject),
        "email": email,
        "role": role,
        "exp": datetime.now(timezone.utc) + timedelta(minutes=settings.JWT_EXPIRE_MINUTES),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=ALGORITHM)


def decode_token(token: str) -> Principal:
    """Decode and validate a JWT. Raises UnauthorizedError on any failure."""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError("Token has expired") from None
    except jwt.PyJWTError:
        raise UnauthorizedError("Invalid token") from None
    subject = payload.get("sub") or payload.get("id")
    if not subject:
        raise UnauthorizedError("Invalid token")
    return Principal(id=str(subject), email=payload.get("email"), role=payload.get("role"))


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode(), hashed.encode())
    except ValueError:
        # Malformed hash in configuration.
        return False
