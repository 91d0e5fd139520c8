from __future__ import annotations

from sqlalchemy import select

from backend.app.core.config import DEFAULT_LOW_STOCK_THRESHOLD, LOW_STOCK_THRESHOLD_KEY
from backend.app.db.session import SessionLocal
from backend.app.db.models.models_v1 import Setting, Warehouse


def run_seed():
    db = SessionLocal()
    try:
        # 1) Entrepôt principal
        wh = db.scalar(select(Warehouse).where(Warehouse.code == "MAIN"))
        if not wh:
            wh = Warehouse(code="MAIN", name="Main warehouse", is_active=True)
            db.add(wh)
            db.commit()

        # 2) Seuil de stock bas (modifiable ensuite en base)
        setting = db.get(Setting, LOW_STOCK_THRESHOLD_KEY)
        if not setting:
            setting = Setting(
                key=LOW_STOCK_THRESHOLD_KEY,
                value=str(DEFAULT_LOW_STOCK_THRESHOLD),
                description="Available quantity under which a stock record is reported as low",
            )
            db.add(setting)
            db.commit()

        print(f"SEED OK: warehouse={wh.code}, {LOW_STOCK_THRESHOLD_KEY}={setting.value}")
    finally:
        db.close()


if __name__ == "__main__":
    run_seed()
