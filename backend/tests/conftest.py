import os

# avant tout import backend.* : l'engine applicatif ne doit jamais viser Postgres en test
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from backend.app.api.deps import get_db
from backend.app.db.base import Base
from backend.app.db.models.models_v1 import Setting, StockRecord, Warehouse
from backend.app.db.session import make_engine
from backend.app.main import app


@pytest.fixture(scope="function")
def engine(tmp_path):
    """
    Base SQLite fichier, neuve pour chaque test.

    Fichier (pas :memory:) pour que plusieurs connexions / threads
    voient la même base.
    """
    eng = make_engine(f"sqlite+pysqlite:///{tmp_path / 'ledger.db'}", echo=False)
    Base.metadata.create_all(bind=eng)
    try:
        yield eng
    finally:
        eng.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    # expire_on_commit=False : relire un attribut après commit ne rouvre pas
    # de transaction (BEGIN IMMEDIATE bloquerait les autres connexions)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


@pytest.fixture(scope="function")
def db_session(session_factory) -> Session:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_warehouse(db_session):
    counter = {"n": 0}

    def _make(code: str | None = None, *, is_active: bool = True) -> Warehouse:
        counter["n"] += 1
        code = code or f"WH-{counter['n']}"
        wh = Warehouse(code=code, name=f"Warehouse {code}", is_active=is_active)
        db_session.add(wh)
        db_session.commit()
        return wh

    return _make


@pytest.fixture
def w1(make_warehouse) -> Warehouse:
    return make_warehouse("W1")


@pytest.fixture
def w2(make_warehouse) -> Warehouse:
    return make_warehouse("W2")


@pytest.fixture
def put_stock(db_session):
    """Pose une ligne de stock telle quelle (hors ledger), pour l'arrange."""

    def _put(warehouse_id: int, item_id: int, quantity: int, reserved: int = 0) -> StockRecord:
        sl = StockRecord(
            warehouse_id=warehouse_id,
            item_id=item_id,
            quantity=quantity,
            reserved_quantity=reserved,
        )
        db_session.add(sl)
        db_session.commit()
        return sl

    return _put


@pytest.fixture
def put_setting(db_session):
    def _put(key: str, value: str | None) -> Setting:
        setting = Setting(key=key, value=value)
        db_session.add(setting)
        db_session.commit()
        return setting

    return _put


@pytest.fixture
def client(session_factory):
    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()
