# safetool/dependencies/with_actor.py
from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from safetool.core.security import get_current_user
from safetool.dependencies.db import get_db
from safetool.schemas.auth import UserPublic


def with_actor(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[UserPublic, Depends(get_current_user)],
) -> Session:
    """Session con el usuario autenticado registrado para la auditoría."""
    db.info["actor"] = {
        "id": current_user.id,
        "username": current_user.username,
    }
    return db
