"""
Database engine, session factory and the `get_db` route dependency.

The URL comes from config.DATABASE_URL. SQLite connections are shared across
FastAPI's threadpool, so same-thread checking is turned off for them. Tables
are created at import for local runs; deployed databases are migrated with
alembic.
"""

from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session

from . import config
from .models import Base

_connect_args = {"check_same_thread": False} if config.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(config.DATABASE_URL, connect_args=_connect_args, pool_pre_ping=True)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base.metadata.create_all(bind=engine)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
