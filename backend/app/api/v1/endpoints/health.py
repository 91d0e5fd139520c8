from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter

router = APIRouter()


@router.get("/health")
def health():
    return {
        "status": "healthy",
        "service": "stock-ledger",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
