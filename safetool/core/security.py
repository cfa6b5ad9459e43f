# safetool/core/security.py
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Annotated, Iterable

from fastapi import Depends, HTTPException, Request, status
from fastapi.security.utils import get_authorization_scheme_param
from jose import jwt, JWTError, ExpiredSignatureError

from safetool.core.config import settings
from safetool.schemas.auth import UserPublic

# ───────────────────────────────────────────────────────────────────────────────
# JWT helpers
# ───────────────────────────────────────────────────────────────────────────────

def create_access_token(
    sub: str,
    roles: list[str],
) -> str:
    now = datetime.now(timezone.utc)
    exp = now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {
        "sub": sub,
        "name": sub,
        "roles": roles,
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
    }
    return jwt.encode(payload, settings.signing_key, algorithm=settings.JWT_ALGORITHM)

def decode_token(token: str) -> dict:
    return jwt.decode(token, settings.signing_key, algorithms=[settings.JWT_ALGORITHM])

# ───────────────────────────────────────────────────────────────────────────────
# Roles helpers
# ───────────────────────────────────────────────────────────────────────────────

def _normalize_role(name: str | None) -> str | None:
    if not name:
        return None
    return name.strip().lower() or None

def _merge_roles(*groups: Iterable[str]) -> list[str]:
    """
    Une, normaliza y deduplica roles.
    """
    seen = set()
    out: list[str] = []
    for g in groups:
        for r in (g or []):
            nr = _normalize_role(r)
            if not nr:
                continue
            if nr not in seen:
                seen.add(nr)
                out.append(nr)
    return out

# ───────────────────────────────────────────────────────────────────────────────
# Bearer extractor con errores detallados
# ───────────────────────────────────────────────────────────────────────────────

def _raise_401(msg: str, err: str | None = None, desc: str | None = None) -> None:
    hdr = 'Bearer'
    if err:
        if desc:
            hdr = f'Bearer error="{err}", error_description="{desc}"'
        else:
            hdr = f'Bearer error="{err}"'
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=msg,
        headers={"WWW-Authenticate": hdr},
    )

def bearer_token_required(request: Request) -> str:
    """
    Extrae y valida el esquema Bearer. Lanza 401 con motivo claro si falta.
    """
    authorization: str | None = request.headers.get("authorization")
    scheme, param = get_authorization_scheme_param(authorization)
    if not authorization or scheme.lower() != "bearer" or not param:
        _raise_401(
            "Falta token de autorización",
            "invalid_request",
            "Header Authorization: Bearer <token> es requerido",
        )
    return param.strip()

# ───────────────────────────────────────────────────────────────────────────────
# Current user
# ───────────────────────────────────────────────────────────────────────────────

def get_current_user(token: Annotated[str, Depends(bearer_token_required)]) -> UserPublic:
    # No hay tabla de usuarios: la identidad sale completa de los claims del token
    try:
        payload = decode_token(token)
    except ExpiredSignatureError:
        _raise_401("Token expirado", "invalid_token", "El claim 'exp' ya caducó")
    except JWTError as e:
        _raise_401("Token inválido", "invalid_token", str(e))

    sub: str | None = payload.get("sub")
    if not sub:
        _raise_401("Token inválido: falta 'sub'", "invalid_token", "El token no contiene el subject (sub)")

    return UserPublic(
        id=str(sub),
        username=payload.get("name") or sub,
        roles=_merge_roles(payload.get("roles") or []),
    )
