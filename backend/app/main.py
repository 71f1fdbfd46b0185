"""FastAPI application - identity, storage and generation services for DraftIt."""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.app.api.routes.accounts import router as accounts_router
from backend.app.api.routes.documents import router as documents_router
from backend.app.api.routes.generate import router as generate_router
from backend.app.api.routes.health import router as health_router
from backend.app.api.routes.metrics import router as metrics_router
from backend.app.api.routes.profile import router as profile_router
from backend.app.api.routes.templates import router as templates_router
from backend.app.api.routes.usage_logs import router as usage_logs_router
from backend.app.config import get_settings

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = FastAPI(title="DraftIt API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[get_settings().ui_origin],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routes
app.include_router(health_router, tags=["health"])
app.include_router(metrics_router, tags=["metrics"])
app.include_router(templates_router)
app.include_router(accounts_router)
app.include_router(generate_router)
app.include_router(documents_router)
app.include_router(profile_router)
app.include_router(usage_logs_router)


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "DraftIt API", "version": "0.1.0"}
