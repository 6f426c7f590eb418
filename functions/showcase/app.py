"""
FastAPI application entry point for the showcase backend.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI

from showcase.auth import IdentityVerifier
from showcase.config import Settings, get_settings
from showcase.db import DbClient, InMemoryDbClient
from showcase.dependencies import build_db_client, build_identity_verifier
from showcase.errors import register_error_handlers
from showcase.routes import projects_router, users_router
from showcase.schemas import StatusResponse


def create_app(
    settings: Optional[Settings] = None,
    *,
    db: Optional[DbClient] = None,
    identity_verifier: Optional[IdentityVerifier] = None,
) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level)

    app = FastAPI(title="Project Showcase Backend (FastAPI)", version="0.1.0")
    app.state.settings = settings
    app.state.db = db if db is not None else build_db_client(settings)
    app.state.identity_verifier = (
        identity_verifier
        if identity_verifier is not None
        else build_identity_verifier(settings)
    )

    register_error_handlers(app)
    app.include_router(projects_router, prefix=settings.api_prefix)
    app.include_router(users_router, prefix=settings.api_prefix)

    @app.get("/", response_model=StatusResponse)
    def read_root():
        store = "memory" if isinstance(app.state.db, InMemoryDbClient) else "sql"
        return StatusResponse(message="Project showcase API is running", store=store)

    return app


app = create_app()
