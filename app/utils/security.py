"""
JWT helpers for the taller workflow backend.

Tokens are issued by the shop's external authentication service and signed
with a shared secret; this backend only verifies them.  ``create_access_token``
is kept for service-to-service calls and for minting tokens in tests.
All configuration is sourced from the application settings singleton so that
secrets are never hard-coded in source files.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from app.config import get_settings

logger = logging.getLogger(__name__)


def create_access_token(data: dict[str, Any]) -> str:
    """Create a signed JWT access token.

    The token payload is a copy of *data* augmented with ``exp`` and ``iat``
    claims; ``exp`` is computed from ``JWT_EXPIRATION_MINUTES`` in settings.

    Args:
        data: Claims to embed.  The workflow endpoints read ``sub`` (username)
              and ``rol`` (one of ``constants.ROLES``).

    Returns:
        A compact, URL-safe JWT string.

    Example::

        token = create_access_token({"sub": "mgarcia", "rol": "OPERATOR"})
    """
    settings = get_settings()
    ahora = datetime.now(timezone.utc)
    payload = data.copy()
    payload["exp"] = ahora + timedelta(minutes=settings.JWT_EXPIRATION_MINUTES)
    payload["iat"] = ahora

    return jwt.encode(
        payload,
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )


def verify_token(token: str) -> dict[str, Any]:
    """Decode and verify a JWT access token.

    Raises:
        ValueError: If the token is invalid, expired, or cannot be decoded.
                    FastAPI dependencies map this to HTTP 401.
    """
    settings = get_settings()
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
        )
        return payload
    except JWTError as exc:
        logger.debug("JWT verification failed: %s", exc)
        raise ValueError("Token inválido o expirado") from exc
