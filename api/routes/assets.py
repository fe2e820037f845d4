"""
api/routes/assets.py -- Inventory asset routes.

Routes:
  GET    /assets             -- list every asset
  POST   /assets             -- create an asset (200, not 201: the web client checks for 200)
  PATCH  /assets/{asset_id}  -- merge fields into an asset
  DELETE /asset/{asset_id}   -- remove an asset (singular path segment is the published contract)

Auth policy:
- All four routes are public. auth.dependencies.verify_hr exists but is not
  attached here; see DESIGN.md for the open question.

Asset documents are schema-flexible: the client owns every field except _id.
"""

from fastapi import APIRouter, HTTPException, Request

from api.limiter import limiter, read_limit, write_limit
from api.models import AssetPayload, DeleteAck, ErrorDetail, InsertAck, UpdateAck
from docstore.store import DocumentStore


def _asset_not_found(asset_id: str) -> HTTPException:
    return HTTPException(
        status_code=404,
        detail=ErrorDetail(
            code="asset_not_found",
            message=f"Asset {asset_id[:50]} not found.",
        ).model_dump(),
    )


router = APIRouter()


@router.get("/assets", response_model=list[dict])
@limiter.limit(read_limit)
def list_assets(request: Request) -> list[dict]:
    """Return every asset document, unfiltered."""
    store: DocumentStore = request.app.state.store
    return store.assets.find()


@router.post("/assets", response_model=InsertAck)
@limiter.limit(write_limit)
def create_asset(request: Request, body: AssetPayload) -> InsertAck:
    store: DocumentStore = request.app.state.store
    result = store.assets.insert_one(body.model_dump())
    return InsertAck.from_result(result)


@router.patch("/assets/{asset_id}", response_model=UpdateAck)
@limiter.limit(write_limit)
def update_asset(request: Request, asset_id: str, body: AssetPayload) -> UpdateAck:
    """Merge the payload into the asset. Fields not in the payload are kept.

    Returns 404 when no asset has this id.
    """
    store: DocumentStore = request.app.state.store
    result = store.assets.update_one({"_id": asset_id}, body.model_dump())
    if result.matched_count == 0:
        raise _asset_not_found(asset_id)
    return UpdateAck.from_result(result)


@router.delete("/asset/{asset_id}", response_model=DeleteAck)
@limiter.limit(write_limit)
def delete_asset(request: Request, asset_id: str) -> DeleteAck:
    store: DocumentStore = request.app.state.store
    result = store.assets.delete_one({"_id": asset_id})
    if result.deleted_count == 0:
        raise _asset_not_found(asset_id)
    return DeleteAck.from_result(result)
