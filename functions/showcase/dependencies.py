"""
Dependency wiring for the FastAPI app.

Clients are built once in create_app and kept on app.state; the request
dependencies below read them back so tests can hand in their own instances.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, Request

from showcase.auth import (
    FirebaseIdentityVerifier,
    IdentityVerifier,
    parse_bearer_token,
)
from showcase.config import Settings
from showcase.db import DbClient, InMemoryDbClient, PostgresDbClient
from showcase.errors import Unauthorized
from shared.types import Identity


def build_db_client(settings: Settings) -> DbClient:
    if settings.use_in_memory_backends or not settings.database_url:
        return InMemoryDbClient()
    return PostgresDbClient(settings.database_url)


def build_identity_verifier(settings: Settings) -> IdentityVerifier:
    return FirebaseIdentityVerifier(
        project_id=settings.firebase_project_id,
        credentials_path=settings.firebase_credentials_path,
    )


def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings


def get_db_client(request: Request) -> DbClient:
    return request.app.state.db


def get_identity_verifier(request: Request) -> IdentityVerifier:
    return request.app.state.identity_verifier


def get_optional_identity(
    authorization: Optional[str] = Header(None),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> Optional[Identity]:
    """The caller's identity, or None for anonymous or invalid credentials."""
    token = parse_bearer_token(authorization)
    if token is None:
        return None
    return verifier.verify(token)


def require_identity(
    identity: Optional[Identity] = Depends(get_optional_identity),
) -> Identity:
    if identity is None:
        raise Unauthorized()
    return identity
