"""FastAPI backend for the Aura Store: security audit, publishing and catalog feed."""

import logging
import time
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from aura.config import get_settings

logger = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO)

settings = get_settings()

app = FastAPI(
    title="Aura Store API",
    description="App marketplace backend: AI security audit and AltStore catalog feed.",
    version="0.1.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
)


# ---------------------------------------------------------------------------
# Basic in-memory rate limiter (per IP) for mutating routes; audits cost a model call
# ---------------------------------------------------------------------------
RATE_LIMIT_WINDOW = settings.rate_limit_window  # seconds
RATE_LIMIT_MAX = settings.rate_limit_max  # max requests per window
_rate_store: dict[str, list[float]] = {}
_last_sweep = 0.0


def _sweep_rate_store(now: float) -> None:
    """Forget clients with no request inside the window. Runs at most once per window."""
    global _last_sweep
    if now - _last_sweep < RATE_LIMIT_WINDOW:
        return
    _last_sweep = now
    for ip in [ip for ip, hits in _rate_store.items() if not hits or now - hits[-1] >= RATE_LIMIT_WINDOW]:
        del _rate_store[ip]


@app.middleware("http")
async def rate_limit_middleware(request: Request, call_next):
    """Simple sliding-window rate limiter for non-GET routes."""
    if request.method in ("GET", "HEAD", "OPTIONS"):
        return await call_next(request)

    client_ip = request.client.host if request.client else "unknown"
    now = time.time()
    _sweep_rate_store(now)
    # Prune old entries
    recent = [t for t in _rate_store.get(client_ip, []) if now - t < RATE_LIMIT_WINDOW]
    _rate_store[client_ip] = recent
    if len(recent) >= RATE_LIMIT_MAX:
        return Response(
            content='{"detail":"Rate limit exceeded. Try again later."}',
            status_code=429,
            media_type="application/json",
        )
    recent.append(now)
    return await call_next(request)


# ---------------------------------------------------------------------------
# CORS: added last so it is the outermost middleware and 429s carry CORS headers.
# ---------------------------------------------------------------------------
cors_origins = settings.cors_origin_list
cors_origin_regex = settings.cors_origin_regex
logger.info("CORS configured for origins: %s", cors_origins)
if cors_origin_regex:
    logger.info("CORS origin regex: %s", cors_origin_regex)

provider_name, api_key, model = settings.llm_credentials()
if api_key:
    logger.info("Security audit: provider=%s model=%s", provider_name, model)
else:
    logger.warning(
        "Security audit: provider=%s has no API key; audits will report configuration_missing",
        provider_name,
    )
logger.info(
    "Store: %s",
    "Postgres (AURA_DATABASE_URL)" if settings.aura_database_url else f"files under {settings.store_dir}",
)

cors_kw: dict = {
    "allow_origins": cors_origins,
    "allow_credentials": True,
    "allow_methods": ["*"],
    "allow_headers": ["*"],
}
if cors_origin_regex:
    cors_kw["allow_origin_regex"] = cors_origin_regex
app.add_middleware(CORSMiddleware, **cors_kw)


# ---------------------------------------------------------------------------
# Health & root
# ---------------------------------------------------------------------------
class HealthResponse(BaseModel):
    status: str
    data_dir: str


@app.get("/health", response_model=HealthResponse)
@app.get("/api/health", response_model=HealthResponse)
async def health():
    """Health check endpoint."""
    return HealthResponse(status="ok", data_dir=str(settings.data_dir))


@app.get("/api/")
async def root():
    """API root."""
    return {"message": "Aura Store API", "version": app.version}


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------
from backend.routes import apps, audit, catalog, downloads  # noqa: E402

app.include_router(apps.router, prefix="/api", tags=["apps"])
app.include_router(audit.router, prefix="/api", tags=["audit"])
app.include_router(catalog.router, prefix="/api", tags=["catalog"])
app.include_router(downloads.router, prefix="/api", tags=["downloads"])
