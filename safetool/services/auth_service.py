# safetool/services/auth_service.py
from __future__ import annotations

import logging

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from safetool.audit.hooks import build_entry
from safetool.core.security import create_access_token
from safetool.schemas.auth import LoginResponse

log = logging.getLogger(__name__)

DEFAULT_ROLE = "user"


def login(db: Session, username: str, password: str) -> LoginResponse:
    """
    Login de demostración: cualquier par usuario/contraseña no vacío recibe
    un JWT con rol `user`. No hay almacén de usuarios contra el cual validar.
    """
    if not (username or "").strip() or not (password or "").strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username and password must not be empty",
        )

    username = username.strip()
    token = create_access_token(sub=username, roles=[DEFAULT_ROLE])

    meta = db.info.get("request_meta") or {}
    db.add(build_entry(
        "login", meta, {"id": username, "username": username},
        resource_type="auth",
    ))
    db.commit()
    log.info("Login OK: %s", username)
    return LoginResponse(token=token, user=username)
