from datetime import datetime, timezone
from threading import Lock

from fastapi import HTTPException, status
from sqlalchemy import create_engine, inspect, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from materials_api.core import config
from materials_api.core.errors import DATABASE_UNAVAILABLE_MESSAGE


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


engine = create_engine(config.DATABASE_URL, **_engine_options(config.DATABASE_URL))

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_materials_schema_checked = False


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def ensure_materials_schema() -> None:
    """Add the owner listing index to an existing materials table once per process."""
    global _materials_schema_checked

    if _materials_schema_checked:
        return

    with _schema_lock:
        if _materials_schema_checked:
            return

        inspector = inspect(engine)

        if 'materials' not in inspector.get_table_names():
            _materials_schema_checked = True
            return

        with engine.begin() as connection:
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_materials_user_created ON materials(user_id, created_at)')
            )

        _materials_schema_checked = True


def ensure_database_ready() -> None:
    try:
        ensure_materials_schema()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_MESSAGE,
        ) from exc


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def commit_or_rollback(db: Session) -> None:
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
