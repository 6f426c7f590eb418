"""
Identity verification: exchanges a bearer token for the caller's identity.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Optional, Protocol

import firebase_admin
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials
from firebase_admin import exceptions as firebase_exceptions

from shared.types import Identity

logger = logging.getLogger(__name__)

FIREBASE_APP_NAME = "showcase"
_firebase_init_lock = threading.Lock()


class IdentityVerifier(Protocol):
    """Returns the verified identity for a token, or None when it is not valid."""

    def verify(self, token: str) -> Optional[Identity]:
        ...


def parse_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from an "Authorization: Bearer <token>" header value."""
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1]


class FirebaseIdentityVerifier:
    """
    Verifies Firebase ID tokens with firebase_admin.

    The Firebase app is created on first use so building the verifier has no
    side effects.
    """

    def __init__(
        self,
        project_id: Optional[str] = None,
        credentials_path: Optional[str] = None,
        app: Optional[firebase_admin.App] = None,
    ):
        self.project_id = project_id
        self.credentials_path = credentials_path
        self._app = app

    def _get_app(self) -> firebase_admin.App:
        if self._app is not None:
            return self._app
        # Concurrent first requests must not both create the named app.
        with _firebase_init_lock:
            if self._app is None:
                try:
                    self._app = firebase_admin.get_app(FIREBASE_APP_NAME)
                except ValueError:
                    credential = (
                        credentials.Certificate(self.credentials_path)
                        if self.credentials_path
                        else None
                    )
                    options = (
                        {"projectId": self.project_id} if self.project_id else None
                    )
                    self._app = firebase_admin.initialize_app(
                        credential, options, name=FIREBASE_APP_NAME
                    )
        return self._app

    def verify(self, token: str) -> Optional[Identity]:
        app = self._get_app()
        try:
            decoded = firebase_auth.verify_id_token(token, app=app)
        except (ValueError, firebase_exceptions.FirebaseError) as err:
            logger.warning("Firebase token failed: %s", err)
            return None
        return Identity(
            subject_id=decoded["uid"],
            email=decoded.get("email"),
            name=decoded.get("name"),
        )


@dataclass
class StaticIdentityVerifier:
    """Test double mapping known tokens to identities."""

    identities: dict = field(default_factory=dict)

    def add(self, token: str, identity: Identity) -> None:
        self.identities[token] = identity

    def verify(self, token: str) -> Optional[Identity]:
        identity = self.identities.get(token)
        if identity is None:
            logger.warning("Unknown token rejected")
        return identity
