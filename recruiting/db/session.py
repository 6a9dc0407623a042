from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from recruiting.core.config import settings

Base = declarative_base()


def _enable_sqlite_savepoints(engine: Engine) -> None:
    # pysqlite defers BEGIN and breaks SAVEPOINT; take over transaction control
    @event.listens_for(engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")


def make_engine(database_url: str, **kwargs) -> Engine:
    if database_url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
        engine = create_engine(database_url, **kwargs)
        _enable_sqlite_savepoints(engine)
        return engine
    return create_engine(database_url, pool_pre_ping=True, **kwargs)


engine = make_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind: Engine = None) -> None:
    """Create all tables (models must be imported first)."""
    import recruiting.models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
