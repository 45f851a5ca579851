"""
Database connection and session management.

The engine and session factory are built once by the application factory
and kept on ``app.state``; request handlers receive sessions through the
``get_db`` dependency.
"""
from __future__ import annotations

from typing import Any, Generator

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, URL, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from subs_app.config import Settings


def database_url_for_driver(database_url: str) -> URL:
    """Pin bare postgresql:// URLs to the psycopg2 driver."""
    url = make_url(database_url)
    if url.drivername == "postgresql":
        url = url.set(drivername="postgresql+psycopg2")
    return url


def build_engine(settings: Settings) -> Engine:
    """
    Create a pooled engine from settings.
    """
    return create_engine(
        database_url_for_driver(settings.database_url),
        pool_pre_ping=True,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=settings.db_pool_timeout,
        pool_recycle=settings.db_pool_recycle,
        connect_args={"connect_timeout": settings.db_connect_timeout},
        echo=settings.db_echo,
    )


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Dependency for getting a database session.
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def init_db(engine: Engine) -> None:
    """
    Initialize database by registering models and creating tables.
    Safe to call multiple times.
    """
    from subs_app.models import Base

    Base.metadata.create_all(bind=engine)


def check_database_connection(engine: Engine) -> bool:
    """
    Return True when the database connection is healthy.
    """
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError:
        return False


def database_health(engine: Engine) -> dict[str, Any]:
    """
    Return structured database health details.
    """
    try:
        with engine.connect() as connection:
            if engine.dialect.name != "postgresql":
                connection.execute(text("SELECT 1"))
                return {"ok": True, "dialect": engine.dialect.name}

            result = connection.execute(
                text(
                    "SELECT current_database() AS database_name, "
                    "current_user AS database_user, "
                    "version() AS server_version"
                )
            ).mappings().one()

        return {
            "ok": True,
            "dialect": engine.dialect.name,
            "database": str(result["database_name"]),
            "user": str(result["database_user"]),
            "server_version": str(result["server_version"]),
        }
    except SQLAlchemyError as exc:
        return {
            "ok": False,
            "error": str(exc),
        }
