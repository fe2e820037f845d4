"""
auth/verifier.py -- Bearer credential verification via the Firebase Admin SDK.

The web client signs users in with Firebase Authentication and sends the
resulting ID token as "Authorization: Bearer <token>". This module turns that
token into a verified email address. Signature, expiry, audience and issuer
checks are all done by firebase_admin.auth.verify_id_token().

Verification returns None on any failure -- the dependency layer turns that
into a 401, mirroring how a rejected token and a missing token look the same
to the caller.

Dev mode: when no service account is configured (DEBUG=true without
FB_SERVICE_KEY) the verifier has no Firebase app and rejects every token.

Layer rule: no imports from api/ or docstore/.
"""

from __future__ import annotations

import logging
from typing import Protocol

import firebase_admin
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials
from firebase_admin.exceptions import FirebaseError

logger = logging.getLogger("assetverse.auth")

_APP_NAME = "assetverse"


class IdentityVerifier(Protocol):
    """Anything that maps a bearer token to a verified email, or None."""

    def verify_id_token(self, token: str) -> str | None: ...

    def close(self) -> None: ...


class FirebaseVerifier:
    """Verifies Firebase ID tokens against one named firebase_admin app.

    A named app (rather than the SDK's default app) keeps this instance's
    lifetime explicit: the lifespan creates it on startup and close() deletes
    the app on shutdown.
    """

    def __init__(self, service_account_info: dict | None, app_name: str = _APP_NAME) -> None:
        self._app: firebase_admin.App | None = None
        if service_account_info is None:
            logger.warning("No service account configured -- all bearer tokens will be rejected")
            return
        cred = credentials.Certificate(service_account_info)
        self._app = firebase_admin.initialize_app(cred, name=app_name)
        logger.info("Firebase identity verifier ready (project=%s)", service_account_info.get("project_id"))

    @property
    def enabled(self) -> bool:
        return self._app is not None

    def verify_id_token(self, token: str) -> str | None:
        """Return the email claim of a valid ID token, or None.

        Tokens without an email claim (anonymous or phone sign-in) are
        rejected: every AssetVerse user record is keyed by email.
        """
        if self._app is None:
            return None
        try:
            claims = firebase_auth.verify_id_token(token, app=self._app)
        except (ValueError, FirebaseError) as exc:
            # Never log the token itself.
            logger.info("ID token rejected: %s", type(exc).__name__)
            return None
        email = claims.get("email")
        if not email:
            logger.info("ID token rejected: no email claim (uid=%s)", claims.get("uid"))
            return None
        return email

    def close(self) -> None:
        if self._app is not None:
            firebase_admin.delete_app(self._app)
            self._app = None
