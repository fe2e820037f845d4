"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

get_token_email() is the credential check: it reads the
"Authorization: Bearer <token>" header, asks the identity verifier on
app.state for the email behind the token, stores it on
request.state.token_email, and returns it. Missing, malformed, and rejected
credentials all raise HTTP 401.

verify_hr() and verify_employee() are the role checks. Each looks the caller
up in the users collection and raises HTTP 403 when there is no user record
or when the stored role equals the role the check is named for. That reads
inverted, and it is the behaviour the web client was built against; neither
check is attached to a route.

Layer rule: no imports from api/.
  auth/dependencies.py may import from fastapi (for HTTPException/Request)
  because this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import HTTPException, Request

from auth.verifier import IdentityVerifier
from docstore.store import DocumentStore


def _bearer_token(request: Request) -> str | None:
    auth_header = request.headers.get("Authorization", "")
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer":
        return None
    token = token.strip()
    return token or None


def get_token_email(request: Request) -> str:
    """Require a verified bearer token. Raises HTTP 401 otherwise.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(email: str = Depends(get_token_email)): ...
    """
    token = _bearer_token(request)
    email = None
    if token:
        verifier: IdentityVerifier = request.app.state.verifier
        email = verifier.verify_id_token(token)
    if email is None:
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Unauthorized Access!"},
        )
    request.state.token_email = email
    return email


def _require_role_other_than(request: Request, role: str, message: str) -> dict:
    email = get_token_email(request)
    store: DocumentStore = request.app.state.store
    user = store.users.find_one({"email": email})
    if user is None or user.get("role") == role:
        raise HTTPException(
            status_code=403,
            detail={"code": "forbidden", "message": message},
        )
    return user


def verify_hr(request: Request) -> dict:
    """Role check "HR-only". Raises 401 if unauthenticated, 403 for no user or role == "hr".

    Returns the caller's user document.
    """
    return _require_role_other_than(request, "hr", "Only HR actions")


def verify_employee(request: Request) -> dict:
    """Role check "Employee-only". Raises 401 if unauthenticated, 403 for no user or role == "employee"."""
    return _require_role_other_than(request, "employee", "Only employee actions")
