from __future__ import annotations
from typing import Any, Dict, Optional
from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Integer,
    MetaData,
    String,
    Table,
    create_engine,
    text,
)
from sqlalchemy.engine import Engine
from pdv.core.config import settings

# -----------------------------------------------------------------------------
# 1) Tabelas: documentos schema-less por coleção + contadores atômicos
# -----------------------------------------------------------------------------

metadata = MetaData()

documents = Table(
    "documents",
    metadata,
    Column("collection", String(64), primary_key=True),
    Column("id", String(64), primary_key=True),
    Column("data", JSON, nullable=False),
    Column("created_at", DateTime, nullable=False),
    Column("updated_at", DateTime, nullable=True),
)

counters = Table(
    "counters",
    metadata,
    Column("name", String(64), primary_key=True),
    Column("value", Integer, nullable=False),
)

# -----------------------------------------------------------------------------
# 2) Engine
# -----------------------------------------------------------------------------

_engine: Optional[Engine] = None

def make_engine(url: str) -> Engine:
    connect_args: Dict[str, Any] = {}
    if url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(
        url,
        pool_pre_ping=True,
        connect_args=connect_args,
        future=True,
    )
    init_db(engine)
    return engine

def init_db(engine: Engine) -> None:
    metadata.create_all(engine)

def get_engine() -> Engine:
    global _engine
    if _engine is None:
        _engine = make_engine(settings.DATABASE_URL)
    return _engine

# -----------------------------------------------------------------------------
# 3) Healthcheck (pronto para /healthz e /readyz)
# -----------------------------------------------------------------------------

def health_check(engine: Optional[Engine] = None) -> Dict[str, Any]:
    eng = engine or get_engine()
    with eng.connect() as conn:
        conn.execute(text("SELECT 1"))
        return {
            "ok": True,
            "database": eng.url.database,
            "dialect": eng.dialect.name,
        }
