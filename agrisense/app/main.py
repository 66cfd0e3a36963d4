import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from agrisense.app.config import settings
from agrisense.app.di import shutdown_singletons
from agrisense.app.http import init_http, close_http
from agrisense.app.routers import advisory, sms
from agrisense.app.utils.cache import init_cache, close_cache

logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
log = logging.getLogger("agrisense.api")


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Initialize cache and HTTP client on startup; cancel advisories on shutdown."""
    await init_cache(settings.CACHE_TTL_SEC)
    await init_http()
    log.info("HTTP client initialized")
    try:
        yield
    finally:
        shutdown_singletons()
        await close_http()
        await close_cache()
        log.info("HTTP client closed")


app = FastAPI(title="AgriSense", version="1.0.0", lifespan=lifespan)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(advisory.router)
app.include_router(sms.router)


@app.get("/")
async def root():
    return {"ok": True, "service": "AgriSense", "version": app.version}

@app.get("/health")
async def health():
    return {
        "ok": True,
        "advisory_delay_sec": settings.ADVISORY_DELAY_SEC,
        "notify_permission": settings.NOTIFY_PERMISSION,
        "search_reverse_fail_open": settings.SEARCH_REVERSE_FAIL_OPEN,
        "sms_configured": bool(settings.TWILIO_ACCOUNT_SID and settings.TWILIO_AUTH_TOKEN),
    }


def run():
    import uvicorn
    uvicorn.run("agrisense.app.main:app", host="0.0.0.0", port=8000)
