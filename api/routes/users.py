"""
api/routes/users.py -- User registration and profile routes.

Routes:
  POST  /users      -- register a user (public)
  GET   /user/role  -- role of the signed-in user (bearer token)
  PATCH /user       -- change the signed-in user's display name (bearer token)

Auth policy:
- POST  /users:     public -- the web client registers right after Firebase sign-up
- GET   /user/role: requires a verified bearer token (get_token_email)
- PATCH /user:      requires a verified bearer token (get_token_email)

Email uniqueness is a pre-insert lookup, not a store constraint. Two
concurrent registrations for the same email can both pass the lookup.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from api.limiter import limiter, read_limit, write_limit
from api.models import ErrorDetail, InsertAck, RoleResponse, UpdateAck, UserCreate, UserUpdate
from auth.dependencies import get_token_email
from docstore.store import DocumentStore

logger = logging.getLogger("assetverse.api")

router = APIRouter()


@router.post("/users", response_model=InsertAck, status_code=201)
@limiter.limit(write_limit)
def create_user(request: Request, body: UserCreate) -> InsertAck:
    """Register a user. Returns 409 if the email is already registered.

    Fields other than email are stored as sent; two payloads that differ only
    outside email still conflict.
    """
    store: DocumentStore = request.app.state.store
    if store.users.find_one({"email": body.email}) is not None:
        raise HTTPException(
            status_code=409,
            detail=ErrorDetail(
                code="user_exists",
                message="User already exists.",
            ).model_dump(),
        )
    result = store.users.insert_one(body.model_dump(exclude_unset=True))
    logger.info("Registered user %s", result.inserted_id)
    return InsertAck.from_result(result)


@router.get("/user/role", response_model=RoleResponse)
@limiter.limit(read_limit)
def get_user_role(request: Request, email: str = Depends(get_token_email)) -> RoleResponse:
    """Return the caller's role. An unregistered caller gets {"role": null}, not an error."""
    store: DocumentStore = request.app.state.store
    user = store.users.find_one({"email": email})
    return RoleResponse(role=user.get("role") if user else None)


@router.patch("/user", response_model=UpdateAck)
@limiter.limit(write_limit)
def update_user(request: Request, body: UserUpdate, email: str = Depends(get_token_email)) -> UpdateAck:
    """Set the caller's display name.

    A caller without a user record gets matchedCount 0 and status 200: the
    update is idempotent, not a lookup.
    """
    store: DocumentStore = request.app.state.store
    result = store.users.update_one({"email": email}, {"name": body.name})
    return UpdateAck.from_result(result)
