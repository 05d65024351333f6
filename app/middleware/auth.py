"""JWT authentication for protected routes."""
from fastapi import Request
from jose import jwt, JWTError
from pydantic import BaseModel
from typing import Optional
from dotenv import load_dotenv
import logging
import os

from app.errors import InvalidToken, MissingToken

load_dotenv()

logger = logging.getLogger(__name__)

TOKEN_HEADER = "x-auth-token"
JWT_ALGORITHM = "HS256"
JWT_EXPIRES_SECONDS = int(os.environ.get("JWT_EXPIRES_SECONDS", "360000"))  # 100 hours

ENVIRONMENT = os.environ.get("ENVIRONMENT", "development")
DEV_JWT_SECRET = "dev-only-change-me"

_configured_secret = os.environ.get("JWT_SECRET")
JWT_SECRET = _configured_secret or DEV_JWT_SECRET


def check_jwt_config(
    environment: str = ENVIRONMENT,
    configured_secret: Optional[str] = _configured_secret,
) -> None:
    """
    Called once at startup.

    Raises:
        RuntimeError: If JWT_SECRET is missing in production
    """
    if configured_secret:
        return
    if environment == "production":
        raise RuntimeError("JWT_SECRET must be set in production")
    logger.warning("JWT_SECRET not set, using the development secret")


class CurrentUser(BaseModel):
    """Caller identity extracted from a verified token."""
    user_id: str


def extract_token(request: Request) -> Optional[str]:
    """
    Read the raw token from the request.

    The x-auth-token header carries the bare token; an
    "Authorization: Bearer <token>" header is accepted as well.
    """
    token = request.headers.get(TOKEN_HEADER)
    if token:
        return token.strip()

    auth_header = request.headers.get("authorization")
    if auth_header and auth_header.lower().startswith("bearer "):
        return auth_header[7:].strip() or None
    return None


def authorize(raw_token: Optional[str]) -> str:
    """
    Verify a raw token and return the user id bound to it.

    Raises:
        MissingToken: If no token was presented
        InvalidToken: If the signature, structure or expiry check fails
    """
    if not raw_token:
        raise MissingToken()

    try:
        payload = jwt.decode(raw_token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired token")
        raise InvalidToken()
    except JWTError:
        logger.info("Rejected malformed or forged token")
        raise InvalidToken()

    user_id = payload.get("sub")
    if not user_id:
        raise InvalidToken()
    return user_id


async def get_current_user(request: Request) -> CurrentUser:
    """Dependency guarding every protected route."""
    return CurrentUser(user_id=authorize(extract_token(request)))
