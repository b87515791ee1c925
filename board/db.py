from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from sqlalchemy.pool import StaticPool

from .config import settings


# ---------- Declarative Base ----------
class Base(DeclarativeBase):
    pass


# ---------- Engine / Session ----------
DATABASE_URL = settings.DATABASE_URL

# Поддержка SQLite и PostgreSQL
if DATABASE_URL.startswith("sqlite"):
    engine_kwargs = {"connect_args": {"check_same_thread": False}, "future": True}
    # in-memory база живёт, пока жив единственный коннект
    if DATABASE_URL in ("sqlite://", "sqlite:///:memory:"):
        engine_kwargs["poolclass"] = StaticPool
    engine = create_engine(DATABASE_URL, **engine_kwargs)
else:
    engine = create_engine(
        DATABASE_URL,
        pool_pre_ping=True,
        future=True,
    )

SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    expire_on_commit=False,
    future=True,
)


def init_db() -> None:
    # регистрация моделей в метаданных
    from .models import ad, category, user  # noqa: F401

    Base.metadata.create_all(bind=engine)


# ---------- Dependency ----------
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
