"""
api/routes/asset_requests.py -- Employee requests to borrow or return assets.

Routes (in registration order to avoid FastAPI path capture conflicts):
  POST /asset-requests          -- submit a request
  GET  /asset-requests          -- list requests, optional ?email= filter on hrEmail
  GET  /asset-requests/{email}  -- list requests addressed to one HR manager

Server-controlled fields:
  On create, requestDate is stamped with the current UTC time, approvalDate
  with null, and requestStatus with "pending". Whatever the client sent for
  these three fields is overwritten.

Requests live in the "requests" collection.
"""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Query, Request

from api.limiter import limiter, read_limit, write_limit
from api.models import AssetRequestCreate, InsertAck
from docstore.store import DocumentStore

_INITIAL_STATUS = "pending"

router = APIRouter()


@router.post("/asset-requests", response_model=InsertAck, status_code=201)
@limiter.limit(write_limit)
def create_asset_request(request: Request, body: AssetRequestCreate) -> InsertAck:
    store: DocumentStore = request.app.state.store
    document = body.model_dump(exclude_unset=True)
    document.update(
        requestDate=datetime.now(timezone.utc).isoformat(),
        approvalDate=None,
        requestStatus=_INITIAL_STATUS,
    )
    result = store.requests.insert_one(document)
    return InsertAck.from_result(result)


@router.get("/asset-requests", response_model=list[dict])
@limiter.limit(read_limit)
def list_asset_requests(
    request: Request,
    email: Optional[str] = Query(default=None, max_length=255),
) -> list[dict]:
    """Return requests whose hrEmail equals ?email=, or every request when it is absent or empty."""
    store: DocumentStore = request.app.state.store
    if not email:
        return store.requests.find()
    return store.requests.find({"hrEmail": email})


@router.get("/asset-requests/{email}", response_model=list[dict])
@limiter.limit(read_limit)
def list_asset_requests_for_hr(request: Request, email: str) -> list[dict]:
    """Return exactly the requests whose hrEmail equals the path segment. No match is []."""
    store: DocumentStore = request.app.state.store
    return store.requests.find({"hrEmail": email})
