"""
Transfer orchestrator.

Ce module enchaîne sortie source + entrée destination + écriture de
corrélation, mais ne contient AUCUNE logique de calcul de stock.

Toute la logique stock est centralisée dans :
    backend.services.inventory

Les trois écritures vivent dans un même SAVEPOINT : si l'entrée à
destination échoue après la sortie, le SAVEPOINT est annulé et la source
retrouve sa quantité. Un transfert n'est jamais appliqué à moitié.
"""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from backend.app.db.models.core_types import MovementType
from backend.services import inventory
from backend.services.exceptions import (
    InsufficientStock,
    InsufficientStockForTransfer,
    InvalidTransfer,
)
from backend.services.warehouses import require_active_warehouse

logger = logging.getLogger(__name__)


def transfer_stock(
    db: Session,
    *,
    from_warehouse_id: int,
    to_warehouse_id: int,
    item_id: int,
    quantity: int,
    note: str | None = None,
    created_by: int | None = None,
) -> bool:
    """
    1. les deux entrepôts sont actifs
    2. verrou des deux lignes (ordre warehouse_id), la source a assez de disponible
    3. sortie source
    4. entrée destination
    5. mouvement "transfer" côté source (effet net)
    """
    inventory.check_quantity(quantity)
    if from_warehouse_id == to_warehouse_id:
        raise InvalidTransfer("from_warehouse_id and to_warehouse_id must differ")

    require_active_warehouse(db, from_warehouse_id)
    require_active_warehouse(db, to_warehouse_id)

    # verrous source + destination dans un ordre fixe, avant toute écriture
    locked = inventory.lock_stock_records(db, item_id, [from_warehouse_id, to_warehouse_id])
    src = locked.get(from_warehouse_id)
    available = src.available_quantity if src is not None else 0
    if available < quantity:
        logger.warning(
            "transfer refused from=%s to=%s item=%s requested=%d available=%d",
            from_warehouse_id,
            to_warehouse_id,
            item_id,
            quantity,
            available,
        )
        raise InsufficientStockForTransfer(from_warehouse_id, item_id, quantity, available)

    try:
        with db.begin_nested():
            out = inventory.stock_out(
                db,
                warehouse_id=from_warehouse_id,
                item_id=item_id,
                quantity=quantity,
                note=f"Transfer to warehouse {to_warehouse_id}",
                created_by=created_by,
            )
            inventory.stock_in(
                db,
                warehouse_id=to_warehouse_id,
                item_id=item_id,
                quantity=quantity,
                note=f"Transfer from warehouse {from_warehouse_id}",
                created_by=created_by,
            )
            inventory.log_movement(
                db,
                warehouse_id=from_warehouse_id,
                item_id=item_id,
                movement_type=MovementType.transfer,
                quantity_before=out.quantity + quantity,
                quantity_after=out.quantity,
                note=note,
                created_by=created_by,
            )
    except InsufficientStock as exc:
        # disponible consommé entre le contrôle et la sortie
        raise InsufficientStockForTransfer(
            from_warehouse_id, item_id, quantity, exc.available
        ) from exc
    except Exception:
        logger.error(
            "transfer rolled back from=%s to=%s item=%s quantity=%d",
            from_warehouse_id,
            to_warehouse_id,
            item_id,
            quantity,
        )
        raise

    logger.info(
        "transfer from=%s to=%s item=%s quantity=%d",
        from_warehouse_id,
        to_warehouse_id,
        item_id,
        quantity,
    )
    return True
