# models/db.py
"""
SQLAlchemy setup for user accounts, the only data this backend persists.
Generated itineraries are never stored server-side.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import Column, DateTime, Integer, String, create_engine, func
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from config.settings import settings

Base = declarative_base()

_engine = None
_SessionLocal = None


def create_db_engine(url: str):
    """Engine for ``url``; in-memory SQLite shares one connection across threads."""
    kwargs = {"pool_pre_ping": True}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


def get_engine(url: Optional[str] = None):
    global _engine, _SessionLocal
    if _engine is None:
        _engine = create_db_engine(url or settings.APP_DB_URL)
        _SessionLocal = sessionmaker(bind=_engine, autoflush=False, autocommit=False)
    return _engine


def get_session_factory():
    if _SessionLocal is None:
        get_engine()
    return _SessionLocal


def init_db(engine=None):
    engine = engine or get_engine()
    Base.metadata.create_all(bind=engine)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    name = Column(String(256), nullable=True)
    email = Column(String(320), nullable=False, unique=True, index=True)
    password_hash = Column(String(128), nullable=True)  # null for OAuth-only accounts
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def to_public_dict(self) -> dict:
        return {"id": str(self.id), "email": self.email, "name": self.name}
