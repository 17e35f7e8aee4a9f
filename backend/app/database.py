import logging

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, declarative_base, sessionmaker

logger = logging.getLogger(__name__)

Base = declarative_base()


def _normalize_database_url(url: str) -> str:
    # Allow simpler `.env` values like `mysql://...` and upgrade to the driver form.
    return url.replace("mysql://", "mysql+pymysql://", 1) if url.startswith("mysql://") else url


class Database:
    """
    Engine + session factory, built once at startup and shared by every request.

    SQLAlchemy pools the underlying connections; the handle is never closed per request.
    """

    def __init__(self, url: str):
        self.url = _normalize_database_url((url or "").strip())
        engine_kwargs = {"pool_pre_ping": True}
        if self.url.startswith("sqlite"):
            # Needed for SQLite when used with FastAPI/uvicorn (multiple threads).
            engine_kwargs["connect_args"] = {"check_same_thread": False, "timeout": 30}

        self.engine = create_engine(self.url, **engine_kwargs)

        if self.url.startswith("sqlite"):
            @event.listens_for(self.engine, "connect")
            def _set_sqlite_pragmas(dbapi_connection, connection_record):  # noqa: ANN001
                try:
                    cursor = dbapi_connection.cursor()
                    cursor.execute("PRAGMA foreign_keys=ON;")
                    cursor.execute("PRAGMA busy_timeout=30000;")
                    cursor.close()
                except Exception as e:
                    logger.warning("Failed to set SQLite pragmas: %s", e)

        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def create_all(self) -> None:
        # Import models so they register with SQLAlchemy metadata before create_all.
        from . import models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def session(self) -> Session:
        return self.SessionLocal()

    def dispose(self) -> None:
        self.engine.dispose()


def get_db(request: Request):
    db = request.app.state.db.session()
    try:
        yield db
    finally:
        db.close()
