"""
Low-stock reporter (lecture seule).

Le prédicat porte toujours sur le disponible (quantity - reserved_quantity) :
un filtre sur le seul on-hand raterait les lignes très réservées.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.app.core.config import DEFAULT_LOW_STOCK_THRESHOLD, LOW_STOCK_THRESHOLD_KEY
from backend.app.db.models.models_v1 import Setting, StockRecord
from backend.services.exceptions import InvalidQuantity

logger = logging.getLogger(__name__)


def list_low_stock(db: Session, threshold: int) -> list[StockRecord]:
    """Lignes dont le disponible est strictement sous le seuil."""
    if isinstance(threshold, bool) or not isinstance(threshold, int) or threshold < 0:
        raise InvalidQuantity(threshold, "threshold must be a non-negative integer")

    stmt = (
        select(StockRecord)
        .where(StockRecord.available_quantity < threshold)
        .order_by(StockRecord.warehouse_id, StockRecord.item_id)
        .execution_options(populate_existing=True)
    )
    return list(db.execute(stmt).scalars().all())


def get_low_stock_threshold(db: Session, fallback: int = DEFAULT_LOW_STOCK_THRESHOLD) -> int:
    """
    Seuil configuré (settings.LOW_STOCK_THRESHOLD), sinon ``fallback``.

    La config est indicative : aucune erreur ne remonte à l'appelant.
    Les replis anormaux (valeur invalide, base injoignable) sont loggés.
    """
    try:
        # SAVEPOINT : une requête en échec ne doit pas casser la transaction de l'appelant
        with db.begin_nested():
            setting = db.execute(
                select(Setting).where(Setting.key == LOW_STOCK_THRESHOLD_KEY).limit(1)
            ).scalar_one_or_none()
    except SQLAlchemyError:
        logger.warning(
            "low stock threshold lookup failed, using fallback=%d",
            fallback,
            exc_info=True,
        )
        return fallback

    if setting is None or setting.value is None:
        return fallback

    try:
        parsed = int(setting.value.strip())
    except ValueError:
        logger.warning(
            "malformed %s=%r, using fallback=%d",
            LOW_STOCK_THRESHOLD_KEY,
            setting.value,
            fallback,
        )
        return fallback

    if parsed <= 0:
        logger.warning(
            "non-positive %s=%d, using fallback=%d",
            LOW_STOCK_THRESHOLD_KEY,
            parsed,
            fallback,
        )
        return fallback

    return parsed
