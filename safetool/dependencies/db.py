# safetool/dependencies/db.py
from typing import Generator

from fastapi import Request
from sqlalchemy.orm import Session

from safetool.db.session import SessionLocal

def get_db(request: Request) -> Generator[Session, None, None]:
    db: Session = SessionLocal()
    try:
        # si el middleware no corrió, queda {}
        db.info["request_meta"] = getattr(request.state, "audit_meta", {}) or {}
        yield db
    finally:
        db.close()
