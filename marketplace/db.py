# marketplace/db.py
"""Database engine and session utilities.

The engine and session factory are built once by the application factory and
kept on ``app.state``; request handlers get a fresh session per request through
the ``get_db`` dependency.
"""
from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base

Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_engine(database_url: str, pool_size: int = 5, max_overflow: int = 10):
    if database_url.startswith("sqlite"):
        engine = create_engine(database_url, connect_args={"check_same_thread": False})
        # cascades on products -> images/favorites rely on FK enforcement
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine
    # tuned pool settings for cloud DB
    return create_engine(
        database_url,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_pre_ping=True
    )


def make_session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
