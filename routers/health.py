# routers/health.py
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import inspect, text

from ai import TextGenerator
from alembic.config import Config
from alembic.script import ScriptDirectory
from db import Base, engine
from deps.ai import get_text_generator

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/db")
def health_db():
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
            existing = set(inspect(conn).get_table_names())
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"db_error: {type(e).__name__}: {e}")
    missing = sorted(set(Base.metadata.tables) - existing)
    return {"ok": not missing, "missing_tables": missing}


def _alembic_heads() -> list[str]:
    cfg = Config("alembic.ini")
    script = ScriptDirectory.from_config(cfg)
    return list(script.get_heads())


@router.get("/migrations")
def health_migrations():
    heads: list[str] = []
    db_ver = None
    try:
        heads = _alembic_heads()
    except Exception:
        # no alembic.ini in the working directory; report as unsynced
        pass

    try:
        with engine.connect() as conn:
            if "alembic_version" in inspect(conn).get_table_names():
                db_ver = conn.execute(
                    text("SELECT version_num FROM alembic_version")
                ).scalar_one_or_none()
    except Exception as e:
        return {
            "ok": False,
            "error": f"db_connect_failed: {e}",
            "code_heads": heads,
            "db_version": db_ver,
        }

    synced = (db_ver in heads) if heads else False
    return {"ok": synced, "synced": synced, "db_version": db_ver, "code_heads": heads}


@router.get("/ai")
def health_ai(generator: Optional[TextGenerator] = Depends(get_text_generator)):
    """Reports configuration only; never spends a completion."""
    if generator is None:
        return {"ok": False, "configured": False, "model": None}
    configured = bool(getattr(generator, "configured", True))
    return {"ok": configured, "configured": configured, "model": getattr(generator, "model", None)}
