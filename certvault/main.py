"""CertVault API — FastAPI application entry point for the local dashboard.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map VaultError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Vault opened and loaded on startup via lifespan; a failed load is not fatal

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Error handlers registered from api/error_handlers.py
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from certvault.api.error_handlers import register_error_handlers
from certvault.api.routes import certificates, health
from certvault.config import get_settings
from certvault.infrastructure.observability import setup_logging
from certvault.services.vault_controller import init_vault

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    vault = init_vault(settings)
    state = await vault.start()
    if state.load_error is not None:
        logger.warning("CertVault started with storage unavailable")
    logger.info("CertVault API started")
    yield
    await vault.store.close()
    logger.info("CertVault API shutting down")


app = FastAPI(
    title="CertVault API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(certificates.router)

register_error_handlers(app)
