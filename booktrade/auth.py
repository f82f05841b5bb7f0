"""Bearer-token identity issued by the upstream auth service.

Tokens are HS256 JWTs whose payload carries at least ``id``. The payload is
trusted as is; no session lookup happens here.
"""

import logging
from typing import Any

import jwt
from fastapi import Depends, Request

from booktrade.config import Settings, get_settings
from booktrade.errors import BookTradeError

logger = logging.getLogger(__name__)


class Unauthenticated(BookTradeError):
    status_code = 401


def decode_token(token: str, secret: str) -> dict[str, Any]:
    try:
        payload = jwt.decode(token, secret, algorithms=["HS256"])
    except jwt.PyJWTError as e:
        logger.info(f"Rejected token: {e}")
        raise Unauthenticated("Invalid or expired token") from e
    if "id" not in payload:
        raise Unauthenticated("Token carries no user id")
    try:
        payload["id"] = int(payload["id"])
    except (TypeError, ValueError) as e:
        raise Unauthenticated("Token carries an invalid user id") from e
    return payload


def get_current_user(request: Request, settings: Settings = Depends(get_settings)) -> dict[str, Any]:
    """FastAPI dependency returning the decoded identity of the caller."""
    # Accepts "Bearer <token>" as well as a bare token
    token = request.headers.get("Authorization", "").strip()
    if token.lower().startswith("bearer "):
        token = token[len("bearer "):].strip()
    if not token:
        raise Unauthenticated("Authentication required")
    return decode_token(token, settings.jwt_secret)
