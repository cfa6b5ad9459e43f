# safetool/api/v1/auth.py
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from safetool.dependencies.db import get_db
from safetool.schemas.auth import LoginRequest, LoginResponse
from safetool.services import auth_service

router = APIRouter(prefix="/api/auth", tags=["Auth"])
DbDep = Annotated[Session, Depends(get_db)]

@router.post("/login", response_model=LoginResponse, summary="Login (emite JWT)")
def login(payload: LoginRequest, db: DbDep):
    return auth_service.login(db, payload.username, payload.password)
