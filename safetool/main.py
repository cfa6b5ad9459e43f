# safetool/main.py
from __future__ import annotations

import asyncio
import json
import logging
from contextlib import asynccontextmanager
from hashlib import sha256
from uuid import uuid4

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.requests import ClientDisconnect
from starlette.responses import Response
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from safetool.core.config import settings
from safetool.db.session import engine, init_db
from safetool.audit import hooks  # noqa: F401  registra listeners al boot
from safetool.audit.context import current_request_meta

logger = logging.getLogger("uvicorn.error")
logger.setLevel(settings.LOG_LEVEL.upper())

# ───────────────────────────────────────────────────────────────────────────────
# OpenAPI tags
# ───────────────────────────────────────────────────────────────────────────────
tags_metadata = [
    {"name": "Health", "description": "Endpoints de verificación."},
    {"name": "Auth", "description": "Autenticación y sesión."},
    {"name": "ISO 13849", "description": "Cálculos ISO 13849-1 (DCavg regular, equipos en serie)."},
    {"name": "DCavg", "description": "DCavg mejorado con registro de pasos (Anexo K)."},
    {"name": "Planos eléctricos", "description": "Vínculos entre planos eléctricos y recursos del proyecto."},
]

@asynccontextmanager
async def lifespan(_app: FastAPI):
    init_db()
    yield

# ───────────────────────────────────────────────────────────────────────────────
# App & Middlewares
# ───────────────────────────────────────────────────────────────────────────────
app = FastAPI(title="API SafeTool", version="1.0.0", openapi_tags=tags_metadata, lifespan=lifespan)

# Respeta X-Forwarded-* si estás detrás de Nginx/ALB
app.add_middleware(ProxyHeadersMiddleware)

# CORS (incluye OPTIONS para preflight)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "Accept", "Origin", "X-Requested-With"],
)

# ====== Auditoría: captura body en métodos de escritura ======
MAX_BODY_LOG = 64 * 1024  # 64 KB
EXCLUDED_PATHS = {"/api/auth/login"}

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    try:
        body = await request.body()
        body_preview = body.decode("utf-8", errors="ignore")[:2000]
    except ClientDisconnect:
        body_preview = "<no-body-read>"

    logger.error("[422] %s %s\nBody: %s\nDetail: %s",
                 request.method, request.url.path, body_preview, exc.errors())
    return JSONResponse(status_code=422, content={"detail": jsonable_encoder(exc.errors())})

@app.middleware("http")
async def attach_request_meta(request: Request, call_next):
    xff = request.headers.get("x-forwarded-for")
    ip = xff.split(",")[0].strip() if xff else (request.client.host if request.client else None)

    meta = {
        "ip": ip,
        "user_agent": request.headers.get("user-agent"),
        "method": request.method,
        "path": request.url.path,
        "request_id": str(uuid4()),
        "status_code": 200,
    }

    capture_body = (
        request.method in {"POST", "PUT", "PATCH", "DELETE"} and
        request.url.path not in EXCLUDED_PATHS
    )

    body_json_str = None
    body_hash = None
    if capture_body:
        body_bytes = await request.body()
        if body_bytes:
            body_hash = sha256(body_bytes).hexdigest()
            sample = body_bytes[:MAX_BODY_LOG].decode("utf-8", errors="ignore")
            try:
                body_json_str = json.dumps(json.loads(sample), ensure_ascii=False)
            except ValueError:
                body_json_str = json.dumps({"_raw_preview": sample}, ensure_ascii=False)

    meta["request_body_json"] = body_json_str
    meta["request_body_sha256"] = body_hash

    request.state.audit_meta = meta
    current_request_meta.set(meta)

    try:
        resp = await call_next(request)
        meta["status_code"] = resp.status_code
        return resp
    except asyncio.CancelledError:
        meta["status_code"] = 499
        return Response(status_code=499, content=b"Client Closed Request")

# ───────────────────────────────────────────────────────────────────────────────
# Health
# ───────────────────────────────────────────────────────────────────────────────
@app.get("/", tags=["Health"])
def root():
    return {"status": "ok", "message": "API up"}

@app.get("/api/v1", tags=["Health"])
def api_v1_root():
    return {"status": "ok", "message": "API v1 up"}

@app.get("/api/v1/health/db", tags=["Health"])
def health_db():
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return {"status": "ok", "db": "connected"}
    except SQLAlchemyError:
        logger.exception("Health DB falló")
        raise HTTPException(status_code=503, detail="DB unavailable")

# ───────────────────────────────────────────────────────────────────────────────
# Routers (importa SOLO routers; no módulos/servicios)
# ───────────────────────────────────────────────────────────────────────────────
from safetool.api.v1.auth import router as auth_router
from safetool.api.v1.dcavg import router as dcavg_router, iso13849_router
from safetool.api.v1.electrical_drawing import router as electrical_drawing_router

# Montaje
app.include_router(auth_router)
app.include_router(iso13849_router)
app.include_router(dcavg_router)
app.include_router(electrical_drawing_router)
