from fastapi import FastAPI, Request
import logging, os, time
from fastapi.middleware.cors import CORSMiddleware

from .exceptions import register_exception_handlers
from .logging_config import configure_logging
from .services.vault_service import get_settings
from .startup import register_startup

configure_logging(get_settings().log_level)
logger = logging.getLogger("backend.app")

# Routers
from .routers.health import router as health_router
from .routers.models import router as models_router
from .routers.scans import router as scans_router
from .routers.files import router as files_router
from .routers.events import router as events_router

app = FastAPI(
    title="MedVault API",
    version="0.1.0",
    description="Model and scan artifact store with access metadata and change events",
)

# CORS for dev (Vite @ 5173) + optional env override
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:8080",
        "http://127.0.0.1:8080",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
extra = [o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()]
if extra:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=extra,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

register_exception_handlers(app)
register_startup(app)

# Robust request logging (won't crash on exceptions)
@app.middleware("http")
async def log_requests(request: Request, call_next):
    t0 = time.time()
    try:
        return await call_next(request)
    except Exception as e:
        dt = (time.time() - t0) * 1000
        logger.error("%s %s -> ERR in %.1fms: %s: %s", request.method, request.url.path, dt, type(e).__name__, e)
        raise

# Routers
app.include_router(health_router, prefix="/api/v1", tags=["health"])
app.include_router(models_router, prefix="/api/v1", tags=["models"])
app.include_router(scans_router,  prefix="/api/v1", tags=["scans"])
app.include_router(files_router,  prefix="/api/v1", tags=["files"])
app.include_router(events_router, prefix="/api/v1", tags=["events"])

@app.get("/healthz")
def healthz():
    return {"ok": True}
