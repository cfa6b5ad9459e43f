# safetool/audit/hooks.py
import json
import re
from typing import Any

from fastapi.encoders import jsonable_encoder
from sqlalchemy import event, inspect
from sqlalchemy.orm import Session

from safetool.db.models.audit import AuditLog

ACTION_MAP = {
    "create": "crear",
    "update": "actualizar",
    "delete": "eliminar",
    "login": "ingreso",
}

# /.../xxxxxxxx-xxxx-xxxx-xxxx-xxxxxxxxxxxx o números al final de la ruta
UUID_OR_ID_RE = re.compile(r"/([0-9a-fA-F-]{8,}|[0-9]+)(?:$|[/?#])")

def _to_json_safe(value: Any) -> str:
    try:
        return json.dumps(jsonable_encoder(value), ensure_ascii=False)
    except (TypeError, ValueError):
        return json.dumps(str(value), ensure_ascii=False)

def _id_from_path(meta: dict) -> str | None:
    path = (meta or {}).get("path") or ""
    m = UUID_OR_ID_RE.search(path)
    return m.group(1) if m else None

def _compute_resource_id(obj, meta: dict) -> str | None:
    # 1) Identity / PK declaradas
    state = inspect(obj)
    if state.identity:
        return "|".join("NULL" if v is None else str(v) for v in state.identity)
    pk_vals = [getattr(obj, col.key, None) for col in state.mapper.primary_key]
    if any(v is not None for v in pk_vals):
        return "|".join("NULL" if v is None else str(v) for v in pk_vals)
    # 2) Fallback desde la URL
    return _id_from_path(meta)

def build_entry(action: str, meta: dict, actor: dict, **fields) -> AuditLog:
    """Arma un registro de auditoría con los metadatos del request."""
    rbj = meta.get("request_body_json")
    if isinstance(rbj, (dict, list)):
        rbj = _to_json_safe(rbj)
    return AuditLog(
        action=ACTION_MAP.get(action, action),
        http_method=meta.get("method"),
        path=meta.get("path"),
        status_code=meta.get("status_code"),
        actor_id=actor.get("id"),
        actor_username=actor.get("username"),
        request_id=meta.get("request_id"),
        ip=meta.get("ip"),
        user_agent=meta.get("user_agent"),
        request_body_sha256=meta.get("request_body_sha256"),
        request_body_json=rbj,
        **fields,
    )

@event.listens_for(Session, "after_flush")
def audit_after_flush(session: Session, flush_context):
    meta = session.info.get("request_meta") or {}
    actor = session.info.get("actor") or {}

    def log(action: str, obj, changes: dict | None):
        if isinstance(obj, AuditLog):
            return
        session.add(
            build_entry(
                action, meta, actor,
                resource_type=obj.__class__.__name__,
                resource_id=_compute_resource_id(obj, meta),
                changes_json=_to_json_safe(changes) if changes else None,
            )
        )

    # crear
    for obj in session.new:
        log("create", obj, None)

    # eliminar
    for obj in session.deleted:
        log("delete", obj, None)

    # actualizar
    for obj in session.dirty:
        state = inspect(obj)
        if not state.modified:
            continue
        changes: dict[str, Any] = {}
        for attr in state.mapper.column_attrs:
            hist = state.attrs[attr.key].history
            if not hist.has_changes():
                continue
            old = hist.deleted[0] if hist.deleted else None
            new = hist.added[0] if hist.added else getattr(obj, attr.key)
            if old != new:
                changes[attr.key] = {"anterior": old, "nuevo": new}
        if changes:
            log("update", obj, changes)
