# storefront/db.py
from __future__ import annotations

import logging
from typing import Iterator

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from storefront import config

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def enable_sqlite_foreign_keys(engine: Engine) -> None:
    # SQLite no aplica las FOREIGN KEY si no se pide en cada conexión
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_conn, conn_record):  # noqa: ARG001
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def _build_engine(url: str) -> Engine:
    kwargs = {"echo": config.DB_ECHO, "future": True}
    if url.startswith("sqlite"):
        # SQLite: una sola conexión por hilo, sin tamaño de pool
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        kwargs.update(
            pool_size=config.DB_POOL_SIZE,
            max_overflow=config.DB_MAX_OVERFLOW,
            pool_timeout=config.DB_POOL_TIMEOUT,
            pool_recycle=config.DB_POOL_RECYCLE,
            pool_pre_ping=True,
        )
    engine = create_engine(url, **kwargs)
    if url.startswith("sqlite"):
        enable_sqlite_foreign_keys(engine)
    return engine


engine: Engine = _build_engine(config.DATABASE_URL)

SessionLocal = sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)


def get_db() -> Iterator[Session]:
    """Sesión por petición; al cerrarse la conexión vuelve al pool."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind: Engine | None = None) -> None:
    # Registrar todos los modelos antes de crear tablas
    import storefront.models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


def ping(db: Session) -> bool:
    try:
        db.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as exc:
        logger.warning("Fallo en el ping a la BD: %s", exc)
        return False
