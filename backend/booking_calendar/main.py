# backend/booking_calendar/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .config import settings
from .core.errors import register_error_handlers
from .database import create_tables
from .routers import availability as availability_router
from .routers import blocked as blocked_router
from .routers import settings as settings_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_tables()
    logger.info("tables ready (env=%s)", settings.APP_ENV)
    yield


app = FastAPI(title="Booking Calendar", lifespan=lifespan)

register_error_handlers(app)

# --- API Routers ---
# blocked/settings prima di availability: i loro path "/availability/me/..." sono statici
app.include_router(blocked_router.router)
app.include_router(settings_router.router)
app.include_router(availability_router.router)


# --- Maintenance middleware (blocca le scritture quando attivo) ---
WRITE_METHODS = ("POST", "PUT", "PATCH", "DELETE")

@app.middleware("http")
async def maintenance_gate(request: Request, call_next):
    """
    Se MAINTENANCE_MODE=True:
      - letture e /ping continuano a funzionare
      - ogni scrittura risponde 503, così nessun calendario cambia durante la manutenzione
    Nota: /evaluate è una POST ma non scrive, resta permessa.
    """
    if settings.MAINTENANCE_MODE:
        p = request.url.path
        if request.method in WRITE_METHODS and not p.endswith("/evaluate"):
            return JSONResponse(
                status_code=503,
                content={"detail": "Servizio in manutenzione", "code": "maintenance"},
            )

    return await call_next(request)


@app.get("/ping")
def ping():
    return {"ok": True}
