"""
Stock ledger core.

Seul module qui écrit les quantités des StockRecord.

Règles :
    available = quantity - reserved_quantity >= 0
    chaque mutation acceptée => exactement un StockMovement
        (quantity_after - quantity_before == quantity_delta)

Concurrence :
- stock_out est un UPDATE conditionnel unique
  (WHERE quantity - reserved_quantity >= :qty) ; le rowcount tranche.
  Deux sorties concurrentes ne peuvent pas survendre.
- stock_in est un incrément atomique ; la première entrée crée la ligne
  dans un SAVEPOINT.
- adjust_stock verrouille la ligne (FOR UPDATE).
- lock_stock_records verrouille plusieurs lignes par warehouse_id croissant
  (transferts dans les deux sens sans interblocage).

Aucune fonction ne commit : la transaction appartient à l'appelant.
"""

from __future__ import annotations

import logging

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backend.app.db import immutability  # noqa: F401  (listeners append-only)
from backend.app.db.models.core_types import MovementType
from backend.app.db.models.models_v1 import StockMovement, StockRecord, utcnow
from backend.services.exceptions import (
    InsufficientStock,
    InvalidQuantity,
    StockRecordNotFound,
)
from backend.services.warehouses import require_active_warehouse

logger = logging.getLogger(__name__)

DEFAULT_LOG_LIMIT = 100
MAX_LOG_LIMIT = 1000

# borne des colonnes Integer (int4 sous PostgreSQL)
MAX_QUANTITY = 2**31 - 1


# ---------- Helpers ----------
def check_quantity(quantity: object, *, allow_zero: bool = False) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidQuantity(quantity, "must be an integer")
    if allow_zero and quantity < 0:
        raise InvalidQuantity(quantity, "must be zero or positive")
    if not allow_zero and quantity <= 0:
        raise InvalidQuantity(quantity)
    if quantity > MAX_QUANTITY:
        raise InvalidQuantity(quantity, f"must not exceed {MAX_QUANTITY}")
    return quantity


def _pair(warehouse_id: int, item_id: int):
    return (
        StockRecord.warehouse_id == warehouse_id,
        StockRecord.item_id == item_id,
    )


def _load_stock_record(
    db: Session,
    warehouse_id: int,
    item_id: int,
    *,
    for_update: bool = False,
) -> StockRecord | None:
    # populate_existing : les UPDATE ci-dessous passent à côté de l'identity map
    stmt = (
        select(StockRecord)
        .where(*_pair(warehouse_id, item_id))
        .execution_options(populate_existing=True)
    )
    if for_update:
        stmt = stmt.with_for_update()
    return db.execute(stmt).scalar_one_or_none()


def _increment(db: Session, warehouse_id: int, item_id: int, quantity: int) -> StockRecord | None:
    # aucune ligne touchée : ligne absente, ou quantité qui dépasserait MAX_QUANTITY
    res = db.execute(
        update(StockRecord)
        .where(*_pair(warehouse_id, item_id))
        .where(StockRecord.quantity <= MAX_QUANTITY - quantity)
        .values(quantity=StockRecord.quantity + quantity, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    if res.rowcount == 0:
        return None
    return _load_stock_record(db, warehouse_id, item_id)


def lock_stock_records(db: Session, item_id: int, warehouse_ids) -> dict[int, StockRecord]:
    """
    Verrouille (FOR UPDATE) les lignes existantes d'un article dans
    plusieurs entrepôts, toujours par warehouse_id croissant.

    Deux opérations qui touchent les mêmes lignes les prennent dans le même
    ordre, quel que soit leur sens : pas d'interblocage.
    """
    stmt = (
        select(StockRecord)
        .where(StockRecord.item_id == item_id)
        .where(StockRecord.warehouse_id.in_(sorted(set(warehouse_ids))))
        .order_by(StockRecord.warehouse_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return {sl.warehouse_id: sl for sl in db.execute(stmt).scalars()}


def log_movement(
    db: Session,
    *,
    warehouse_id: int,
    item_id: int,
    movement_type: MovementType,
    quantity_before: int,
    quantity_after: int,
    note: str | None,
    created_by: int | None,
) -> StockMovement:
    mv = StockMovement(
        warehouse_id=warehouse_id,
        item_id=item_id,
        movement_type=movement_type,
        quantity_delta=quantity_after - quantity_before,
        quantity_before=quantity_before,
        quantity_after=quantity_after,
        note=note,
        created_by=created_by,
    )
    db.add(mv)
    db.flush()
    logger.info(
        "stock %s warehouse=%s item=%s delta=%+d before=%d after=%d",
        movement_type.value,
        warehouse_id,
        item_id,
        mv.quantity_delta,
        quantity_before,
        quantity_after,
    )
    return mv


# ---------- Reads ----------
def get_stock_record(db: Session, warehouse_id: int, item_id: int) -> StockRecord | None:
    return _load_stock_record(db, warehouse_id, item_id)


def get_stock_by_item(db: Session, item_id: int) -> list[StockRecord]:
    """Toutes les lignes d'un article, tous entrepôts confondus."""
    stmt = (
        select(StockRecord)
        .where(StockRecord.item_id == item_id)
        .order_by(StockRecord.warehouse_id)
        .execution_options(populate_existing=True)
    )
    return list(db.execute(stmt).scalars().all())


def get_movements(
    db: Session,
    *,
    warehouse_id: int | None = None,
    item_id: int | None = None,
    limit: int = DEFAULT_LOG_LIMIT,
) -> list[StockMovement]:
    """
    Journal des mouvements, du plus récent au plus ancien.

    L'id suit l'ordre d'écriture (mutations sérialisées par couple
    entrepôt/article), il sert donc d'ordre canonique.
    """
    limit = max(1, min(int(limit), MAX_LOG_LIMIT))
    stmt = select(StockMovement).order_by(StockMovement.id.desc()).limit(limit)

    if warehouse_id is not None:
        stmt = stmt.where(StockMovement.warehouse_id == warehouse_id)

    if item_id is not None:
        stmt = stmt.where(StockMovement.item_id == item_id)

    return list(db.execute(stmt).scalars().all())


# ---------- Mutations ----------
def stock_in(
    db: Session,
    *,
    warehouse_id: int,
    item_id: int,
    quantity: int,
    note: str | None = None,
    created_by: int | None = None,
) -> StockRecord:
    """
    Entrée de stock. Crée la ligne (reserved=0) au premier passage.

    Non idempotent : deux appels identiques cumulent.
    """
    check_quantity(quantity)
    require_active_warehouse(db, warehouse_id)

    sl = _increment(db, warehouse_id, item_id, quantity)
    if sl is None and _load_stock_record(db, warehouse_id, item_id) is None:
        try:
            with db.begin_nested():
                db.add(
                    StockRecord(
                        warehouse_id=warehouse_id,
                        item_id=item_id,
                        quantity=quantity,
                        reserved_quantity=0,
                    )
                )
        except IntegrityError:
            # création concurrente de la même ligne : on incrémente la sienne
            if _load_stock_record(db, warehouse_id, item_id) is None:
                raise
            sl = _increment(db, warehouse_id, item_id, quantity)
        else:
            sl = _load_stock_record(db, warehouse_id, item_id)

    if sl is None:
        current = _load_stock_record(db, warehouse_id, item_id)
        logger.warning(
            "stock in refused warehouse=%s item=%s requested=%d on_hand=%d",
            warehouse_id,
            item_id,
            quantity,
            current.quantity,
        )
        raise InvalidQuantity(
            quantity,
            f"on-hand quantity would exceed {MAX_QUANTITY} (currently {current.quantity})",
        )

    log_movement(
        db,
        warehouse_id=warehouse_id,
        item_id=item_id,
        movement_type=MovementType.stock_in,
        quantity_before=sl.quantity - quantity,
        quantity_after=sl.quantity,
        note=note,
        created_by=created_by,
    )
    return sl


def stock_out(
    db: Session,
    *,
    warehouse_id: int,
    item_id: int,
    quantity: int,
    note: str | None = None,
    created_by: int | None = None,
) -> StockRecord:
    """
    Sortie de stock, limitée au disponible (quantity - reserved).

    Le réservé n'est jamais touché : il ne peut pas être survendu.
    """
    check_quantity(quantity)
    require_active_warehouse(db, warehouse_id)

    res = db.execute(
        update(StockRecord)
        .where(*_pair(warehouse_id, item_id))
        .where(StockRecord.available_quantity >= quantity)
        .values(quantity=StockRecord.quantity - quantity, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    if res.rowcount != 1:
        current = _load_stock_record(db, warehouse_id, item_id)
        available = current.available_quantity if current is not None else 0
        logger.warning(
            "stock out refused warehouse=%s item=%s requested=%d available=%d",
            warehouse_id,
            item_id,
            quantity,
            available,
        )
        raise InsufficientStock(warehouse_id, item_id, quantity, available)

    sl = _load_stock_record(db, warehouse_id, item_id)
    log_movement(
        db,
        warehouse_id=warehouse_id,
        item_id=item_id,
        movement_type=MovementType.stock_out,
        quantity_before=sl.quantity + quantity,
        quantity_after=sl.quantity,
        note=note,
        created_by=created_by,
    )
    return sl


def adjust_stock(
    db: Session,
    *,
    warehouse_id: int,
    item_id: int,
    new_quantity: int,
    note: str | None = None,
    created_by: int | None = None,
) -> StockRecord:
    """
    Fixe la quantité en valeur absolue (inventaire, correction).

    La ligne doit exister : un ajustement ne crée jamais de ligne.
    Le delta journalisé peut être négatif.
    """
    check_quantity(new_quantity, allow_zero=True)
    require_active_warehouse(db, warehouse_id)

    sl = _load_stock_record(db, warehouse_id, item_id, for_update=True)
    if sl is None:
        raise StockRecordNotFound(warehouse_id, item_id)

    if new_quantity < sl.reserved_quantity:
        raise InvalidQuantity(
            new_quantity,
            f"below reserved quantity ({sl.reserved_quantity})",
        )

    quantity_before = sl.quantity
    sl.quantity = new_quantity
    sl.updated_at = utcnow()
    db.flush()

    log_movement(
        db,
        warehouse_id=warehouse_id,
        item_id=item_id,
        movement_type=MovementType.adjustment,
        quantity_before=quantity_before,
        quantity_after=new_quantity,
        note=note,
        created_by=created_by,
    )
    return sl
