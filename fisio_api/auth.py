"""Bearer-token authentication backed by Firebase Authentication.

Every route depends on ``check_auth``. The token itself is verified by a
``TokenVerifier``; the default one asks Firebase, and tests swap it through
``app.dependency_overrides[get_token_verifier]``.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

import firebase_admin
from fastapi import Depends, Request
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials

from fisio_api.config import (
    AUTH_REQUIRED,
    FIREBASE_CLIENT_EMAIL,
    FIREBASE_PRIVATE_KEY,
    FIREBASE_PROJECT_ID,
    FISIO_ID_FROM_TOKEN,
)
from fisio_api.errors import NO_AUTORIZADO, TOKEN_INVALIDO, Unauthorized

logger = logging.getLogger(__name__)

FIREBASE_APP_NAME = "fisio-api"
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"


class InvalidToken(Exception):
    pass


@dataclass
class VerifiedIdentity:
    uid: str
    claims: dict[str, Any] = field(default_factory=dict)


class TokenVerifier:
    async def verify(self, token: str) -> VerifiedIdentity:  # pragma: no cover - interface
        raise NotImplementedError


class FirebaseTokenVerifier(TokenVerifier):
    """Verifies Firebase ID tokens with a service-account credential.

    The Firebase app is created on first use, so a missing credential only
    shows up as rejected tokens, not as a failed startup.
    """

    def __init__(self, project_id: str, client_email: str, private_key: str) -> None:
        self.project_id = project_id
        self.client_email = client_email
        self.private_key = private_key

    def _get_app(self) -> firebase_admin.App:
        try:
            return firebase_admin.get_app(FIREBASE_APP_NAME)
        except ValueError:
            cred = credentials.Certificate({
                "type": "service_account",
                "project_id": self.project_id,
                "client_email": self.client_email,
                "private_key": self.private_key,
                "token_uri": GOOGLE_TOKEN_URI,
            })
            return firebase_admin.initialize_app(
                cred, {"projectId": self.project_id}, name=FIREBASE_APP_NAME
            )

    async def verify(self, token: str) -> VerifiedIdentity:
        try:
            app = self._get_app()
            # verify_id_token may fetch Google's public keys; keep it off the loop
            decoded = await asyncio.to_thread(firebase_auth.verify_id_token, token, app=app)
        except Exception as e:
            raise InvalidToken(str(e)) from e
        return VerifiedIdentity(uid=decoded["uid"], claims=dict(decoded))


_verifier: TokenVerifier | None = None


def get_token_verifier() -> TokenVerifier:
    global _verifier
    if _verifier is None:
        _verifier = FirebaseTokenVerifier(
            FIREBASE_PROJECT_ID, FIREBASE_CLIENT_EMAIL, FIREBASE_PRIVATE_KEY
        )
    return _verifier


def _bearer_token(request: Request) -> str | None:
    header = request.headers.get("authorization")
    if not header or not header.startswith("Bearer "):
        return None
    return header.split("Bearer ", 1)[1]


def lacks_credentials(request: Request) -> bool:
    """True when auth is on and the request carries no bearer token at all.

    Lets handlers that run before ``check_auth`` (body validation) answer
    401 first.
    """
    return AUTH_REQUIRED and _bearer_token(request) is None


async def check_auth(
    request: Request,
    verifier: TokenVerifier = Depends(get_token_verifier),
) -> VerifiedIdentity | None:
    """Reject the request unless it carries a valid ``Bearer`` token.

    On success the identity is stored on ``request.state.identity``.
    Does nothing when AUTH_REQUIRED is off.
    """
    if not AUTH_REQUIRED:
        return None

    token = _bearer_token(request)
    if token is None:
        raise Unauthorized(NO_AUTORIZADO)
    try:
        identity = await verifier.verify(token)
    except InvalidToken as e:
        logger.error("Token verification failed: %s", e)
        raise Unauthorized(TOKEN_INVALIDO) from None

    request.state.identity = identity
    return identity


def scoped_fisio_id(request: Request, supplied: str | None) -> str | None:
    """Return the fisio_id every query of this request is scoped to."""
    identity = getattr(request.state, "identity", None)
    if identity is None or not FISIO_ID_FROM_TOKEN:
        return supplied
    if supplied is not None and supplied != identity.uid:
        logger.warning(
            "Ignoring fisio_id %r sent by authenticated uid %r", supplied, identity.uid
        )
    return identity.uid
