"""
Actor identification.

Sign-in and sessions belong to the surrounding console. Here the bearer token
is the acting user's id, which is all the data-scope engine needs to know who
is asking.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, Request, status
from sqlalchemy.orm import Session

from campus_hub.models.security import User
from campus_hub.security.config import AuthConfig

logger = logging.getLogger(__name__)


def bearer_user_id(request: Request, auth: AuthConfig) -> int | None:
    """Return the user id carried by the bearer token, or None without a header."""

    raw = request.headers.get(auth.authorization_header)
    if not raw:
        return None

    scheme, _, token = raw.partition(" ")
    token = token.strip()
    try:
        if scheme != auth.bearer_prefix or not token:
            raise ValueError(raw)
        return int(token)
    except ValueError as exc:
        logger.warning("Rejected %s header path=%s", auth.authorization_header, request.url.path)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {auth.authorization_header}. Expected '{auth.bearer_prefix} <user id>'.",
        ) from exc


def load_actor(db: Session, user_id: int) -> User:
    # Roles and departments load lazily; the engine reads them through its own queries.
    user = db.get(User, user_id)
    if user is None or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or inactive user")
    return user
