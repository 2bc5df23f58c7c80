# app/main.py
"""
FastAPI application entry point.
Includes admin API-key middleware, error handlers, and all routers.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from app.routers import drivers, admin, health
from app.database import create_tables
from app.config import settings
from app.exceptions import QueueError
from app.services.sms_service import is_sms_configured
from app.utils.logger import get_logger
import time

logger = get_logger(__name__)

API_PREFIX = "/api/v1"
ADMIN_PREFIX = f"{API_PREFIX}/admin"

app = FastAPI(
    title="Driver Queue API",
    description="Driver registration queue with SMS call-up.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS (allow the operator dashboard to call the API) ─────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],   # Restrict to dashboard origin in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── API Key Middleware ───────────────────────────────────────────────────────
class APIKeyMiddleware(BaseHTTPMiddleware):
    """
    Lightweight API key auth for operator endpoints (/api/v1/admin/*).
    Driver registration and health stay open.
    Set API_KEY in .env. Leave empty to disable auth.
    """
    async def dispatch(self, request: Request, call_next):
        if not settings.API_KEY or not request.url.path.startswith(ADMIN_PREFIX):
            return await call_next(request)

        api_key = request.headers.get("X-API-Key") or request.query_params.get("api_key")
        if api_key != settings.API_KEY:
            logger.warning(f"Rejected admin request {request.method} {request.url.path}: bad API key")
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"detail": "Invalid or missing API key"},
            )
        return await call_next(request)


app.add_middleware(APIKeyMiddleware)


# ── Request Timing Middleware ────────────────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 2)
    logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
    return response


# ── Exception Handlers ───────────────────────────────────────────────────────
@app.exception_handler(QueueError)
async def queue_error_handler(request: Request, exc: QueueError):
    logger.info(f"{request.method} {request.url.path} → {exc.status_code} {exc.code}: {exc.message}")
    content = {"detail": exc.message, "code": exc.code}
    if exc.details is not None:
        content["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(drivers.router, prefix=API_PREFIX, tags=["🚚 Drivers"])
app.include_router(admin.router,   prefix=API_PREFIX, tags=["📋 Admin Queue"])
app.include_router(health.router,  prefix=API_PREFIX, tags=["💚 Health"])


# ── Startup ───────────────────────────────────────────────────────────────────
@app.on_event("startup")
async def startup():
    logger.info("🚀 Driver Queue starting up...")
    create_tables()
    logger.info("✅ Database tables ready")
    if is_sms_configured():
        logger.info(f"📱 SMS sender: {settings.TWILIO_PHONE_NUMBER}")
    else:
        logger.warning("📱 Twilio not configured — drivers will be called without SMS")
    if not settings.API_KEY:
        logger.warning("🔓 API_KEY not set — admin endpoints are unauthenticated")
    logger.info(f"🌐 Listening on http://{settings.BACKEND_IP}:{settings.BACKEND_PORT}")
    logger.info("📖 API docs at /docs")


@app.on_event("shutdown")
async def shutdown():
    logger.info("🛑 Driver Queue shutting down...")
