# safetool/db/session.py
from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session as SASession

from safetool.core.config import settings
from safetool.audit.context import current_request_meta  # <-- contextvar con metadatos de request

_IS_SQLITE = settings.DATABASE_URL.startswith("sqlite")

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,        # detecta conexiones muertas
    pool_recycle=1800,         # recicla conexiones viejas
    connect_args={"check_same_thread": False} if _IS_SQLITE else {},
)

class RequestAwareSession(SASession):
    """Session que hereda metadatos del request automáticamente (vía contextvar)."""
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.info["request_meta"] = current_request_meta.get({})

SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    class_=RequestAwareSession,  # <-- clave: cualquier Session ve request_meta
)

def init_db(bind=None) -> None:
    """Crea las tablas de los modelos registrados (idempotente)."""
    from safetool.db.base import Base
    from safetool.db.models import audit, electrical_drawing_link  # noqa: F401  registra tablas
    Base.metadata.create_all(bind=bind or engine)
