"""
Le journal des mouvements est append-only.

Listeners ORM : tout UPDATE ou DELETE d'un StockMovement passant par la
Session est refusé avant l'envoi du SQL. Enregistrés à l'import de ce module
(importé par backend.services.inventory).
"""

from __future__ import annotations

import logging

from sqlalchemy import event

from backend.app.db.models.models_v1 import StockMovement
from backend.services.exceptions import MovementLogImmutableError

logger = logging.getLogger(__name__)


def _refuse(action: str):
    def listener(mapper, connection, target):
        logger.error("Refused %s on stock movement id=%s", action, target.id)
        raise MovementLogImmutableError(target.id, action)

    return listener


_before_update = _refuse("update")
_before_delete = _refuse("delete")


def register_immutability_listeners() -> None:
    if not event.contains(StockMovement, "before_update", _before_update):
        event.listen(StockMovement, "before_update", _before_update)
    if not event.contains(StockMovement, "before_delete", _before_delete):
        event.listen(StockMovement, "before_delete", _before_delete)


register_immutability_listeners()
