"""
Merchant Dashboard - FastAPI Backend

Serves:
- GET /health            : liveness
- GET /healthz           : readiness (config + Supabase)
- /api/auth/*            : signup, login, logout, session
- /api/offers/*          : offer management and tier scaling
- /api/dashboard/stats   : dashboard overview
- /api/billing/*         : billing metrics and actions
- /api/profile/*         : merchant profile and logo
"""

import logging
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from .config import get_settings
from .offers.routes import router as offers_router
from .routes import auth_router, billing_router, dashboard_router, profile_router
from .security import RATE_LIMIT_EXCEEDED, limiter, security_auditor
from .supabase_client import get_client
from .webhooks import WebhookRegistry

# --- Env / Config ---
settings = get_settings()

# --- App ---
logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
logger = logging.getLogger("merchant_app")

config_problems = settings.validate()
for problem in config_problems:
    logger.warning(f"Configuration problem: {problem}")

app = FastAPI(
    title="Merchant Dashboard API",
    version="1.0.0",
    docs_url=None if settings.is_prod else "/docs",
    redoc_url=None,
    openapi_url="/openapi.json",
)

def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    security_auditor.log_event(
        RATE_LIMIT_EXCEEDED,
        ip=request.client.host if request.client else None,
        details={"path": request.url.path, "limit": str(exc.detail)},
    )
    return _rate_limit_exceeded_handler(request, exc)


# Add rate limit exceeded handler
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_handler)

cors_origins = settings.cors_origins()
logger.info(f"Environment: {settings.env}")
logger.info(f"CORS origins: {cors_origins}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(offers_router)
app.include_router(dashboard_router)
app.include_router(billing_router)
app.include_router(profile_router)


@app.get("/health")
async def health():
    """Returns 200 OK if the application is running."""
    return {"status": "ok"}


@app.get("/healthz", response_class=JSONResponse)
async def healthz() -> JSONResponse:
    """Readiness check: configuration and Supabase connectivity."""
    current = get_settings()
    problems = current.validate()
    checks: Dict[str, Any] = {
        "config_valid": not problems,
        "jwt_secret_configured": bool(current.supabase_jwt_secret),
        "webhooks": [w.name for w in WebhookRegistry.from_settings(current).enabled_webhooks()],
    }
    if problems:
        checks["config_problems"] = problems

    client = get_client()
    if client is None:
        checks["supabase_connected"] = False
    else:
        try:
            client.table("offers").select("id").limit(1).execute()
            checks["supabase_connected"] = True
        except Exception as e:
            logger.error(f"Supabase health check failed: {e}")
            checks["supabase_connected"] = False
            checks["error"] = str(e)

    status_overall = "ok" if checks["config_valid"] and checks["supabase_connected"] else "degraded"
    payload = {
        "status": status_overall,
        "version": app.version,
        "checks": checks,
    }
    return JSONResponse(payload, status_code=200 if status_overall == "ok" else 503)


if __name__ == "__main__":
    try:
        import uvicorn
    except Exception as exc:
        logger.error("Uvicorn is required to run directly: %s", exc)
        raise
    uvicorn.run(
        "merchant_app.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=False,
        log_level=settings.log_level.lower()
    )
