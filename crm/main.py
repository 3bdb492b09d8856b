"""
Real Estate CRM: Record Gateway (FastAPI)
- Proxies list/create/complete calls to Airtable and reshapes the payloads
- Every failure leaves as {"error": "..."} with a status code; nothing crashes
- Dashboard endpoint computes the statistics server-side from one snapshot
"""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from crm.config import settings
from crm.errors import CrmError
from crm.gateway import RecordGateway, get_gateway
from crm.routes import activities_router, contacts_router, properties_router
from crm.runtime import get_logger, log_core_env

logger = get_logger("main")

app = FastAPI(title="Real Estate CRM", version="1.0.0")
app.include_router(properties_router)  # → /api/properties/...
app.include_router(contacts_router)    # → /api/contacts
app.include_router(activities_router)  # → /api/activities/...


@app.on_event("startup")
def _startup() -> None:
    log_core_env(settings())


# ─────────────────────────── Error handlers ───────────────────────────
@app.exception_handler(CrmError)
async def _crm_error(request: Request, exc: CrmError):
    logger.error("Error handling %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(exc.to_payload(), status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def _bad_request(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    detail = errors[0].get("msg", "Invalid request body") if errors else "Invalid request body"
    logger.error("Invalid body for %s %s: %s", request.method, request.url.path, detail)
    return JSONResponse({"error": f"Invalid request body: {detail}"}, status_code=400)


@app.exception_handler(Exception)
async def _unexpected(request: Request, exc: Exception):
    logger.exception("Unhandled error for %s %s", request.method, request.url.path)
    return JSONResponse({"error": "Internal server error"}, status_code=500)


# ─────────────────────────── Dashboard & config ───────────────────────────
@app.get("/api/dashboard")
def dashboard(gateway: RecordGateway = Depends(get_gateway)):
    return gateway.dashboard().to_dict()


@app.get("/api/config")
def public_config():
    """Values safe to hand to a browser; never the token."""
    return {"airtableBaseId": settings().public_base_id}


# ─────────────────────────── Health ───────────────────────────
@app.get("/health")
def health():
    s = settings()
    return {
        "ok": True,
        "service": "crm-gateway",
        "airtable_configured": s.configured,
        "in_memory": s.force_in_memory,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": app.version,
    }


@app.get("/ping")
def ping():
    return {"ok": True, "pong": True, "time": datetime.now(timezone.utc).isoformat()}


if __name__ == "__main__":
    import uvicorn

    from crm.config import env_int

    uvicorn.run(app, host="0.0.0.0", port=env_int("PORT", 8000))
