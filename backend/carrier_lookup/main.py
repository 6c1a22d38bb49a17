import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from carrier_lookup.config import settings
from carrier_lookup.middleware.exceptions import register_exception_handlers
from carrier_lookup.routers import auth, carriers, health, ports, service_import, services


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


configure_logging()

app = FastAPI(
    title="Carrier Lookup",
    description="Ocean carrier service directory: POL → POD lookup and reference data admin",
    version="0.1.0",
)

# ── Exception Handlers ───────────────────────────────────────
register_exception_handlers(app)

# ── Middleware ───────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routers ──────────────────────────────────────────────────
app.include_router(health.router)
app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(carriers.router, prefix="/api/carriers", tags=["carriers"])
app.include_router(ports.router, prefix="/api/ports", tags=["ports"])
# Upload routes first so /upload/* never reaches /{service_id}
app.include_router(service_import.router, prefix="/api/services/upload", tags=["service-import"])
app.include_router(services.router, prefix="/api/services", tags=["services"])
