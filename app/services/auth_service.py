"""
Caller identity for the workflow endpoints.

Sessions are issued by the shop's external authentication service; this
backend never stores users.  The identity travels in the bearer JWT:

- ``sub`` — username, recorded as ``modificado_por`` / ``registrado_por``;
- ``rol`` — one of ``constants.ROLES``.

Provides:
- ``get_current_user`` — FastAPI dependency that validates the Bearer JWT.
- ``require_role`` — dependency factory enforcing role-based access control
  on top of ``get_current_user``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.utils.constants import ROLES
from app.utils.security import verify_token

logger = logging.getLogger(__name__)

# ``auto_error=False`` so a missing header yields our 401 instead of a 403.
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class UsuarioActual:
    """Authenticated caller as described by the token claims."""

    username: str
    rol: str
    nombre: str | None = None


# ---------------------------------------------------------------------------
# FastAPI dependency — current authenticated user
# ---------------------------------------------------------------------------


def get_current_user(
    credenciales: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> UsuarioActual:
    """Resolve the caller's identity from the ``Authorization: Bearer`` header.

    Raises:
        HTTPException 401: Missing, invalid or expired token, or a token
                           without ``sub`` or with an unknown ``rol``.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="No se pudo validar las credenciales",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credenciales is None:
        raise credentials_exception

    try:
        payload = verify_token(credenciales.credentials)
    except ValueError:
        raise credentials_exception

    username: str | None = payload.get("sub")
    rol: str | None = payload.get("rol")
    if not username or rol not in ROLES:
        logger.debug("get_current_user: claims incompletos sub=%r rol=%r", username, rol)
        raise credentials_exception

    return UsuarioActual(username=username, rol=rol, nombre=payload.get("nombre"))


# ---------------------------------------------------------------------------
# Role enforcement dependency factory
# ---------------------------------------------------------------------------


def require_role(*roles: str):
    """Return a FastAPI dependency that restricts access to the given roles.

    .. code-block:: python

        @router.put("/plantillas/{tipo}")
        def guardar(
            current_user: Annotated[UsuarioActual, Depends(require_role(*ROLES_PLANTILLA))],
        ):
            ...

    Raises:
        HTTPException 403: If the caller's role is not in *roles*.
    """
    allowed = frozenset(roles)

    def _check_role(
        current_user: Annotated[UsuarioActual, Depends(get_current_user)],
    ) -> UsuarioActual:
        if current_user.rol not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=(
                    f"Acceso denegado. Se requiere uno de los roles: "
                    f"{sorted(allowed)}"
                ),
            )
        return current_user

    return _check_role
