"""Storage health endpoint."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from .ledger.ledger_errors import LedgerUnavailableError
from .ledger.ledger_service import Ledger


def build_health_router(ledger: Ledger) -> APIRouter:
    router = APIRouter(prefix="/api/db", tags=["health"])

    @router.get("/health")
    def db_health():
        try:
            ledger.ping()
        except LedgerUnavailableError as exc:
            return JSONResponse(status_code=500, content={"ok": False, "error": str(exc)})
        return {"ok": True}

    return router
