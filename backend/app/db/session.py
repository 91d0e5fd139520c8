from __future__ import annotations

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from backend.app.core.config import DATABASE_URL, SQL_ECHO


def make_engine(url: str = DATABASE_URL, *, echo: bool = SQL_ECHO) -> Engine:
    """
    Crée l'engine du ledger.

    SQLite (tests, dev local) :
    - check_same_thread désactivé (threadpool FastAPI)
    - BEGIN IMMEDIATE : un seul écrivain à la fois, SAVEPOINT fonctionnels
    """
    connect_args = {}
    is_sqlite = url.startswith("sqlite")
    if is_sqlite:
        connect_args = {"check_same_thread": False, "timeout": 30}

    engine = create_engine(url, connect_args=connect_args, pool_pre_ping=True, echo=echo)

    if is_sqlite:
        @event.listens_for(engine, "connect")
        def _disable_pysqlite_transactions(dbapi_connection, connection_record):
            # on laisse SQLAlchemy émettre lui-même le BEGIN
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        @event.listens_for(engine, "begin")
        def _begin_immediate(conn):
            conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


engine = make_engine()
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
