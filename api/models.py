"""
API request and response models for AssetVerse REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in docstore/models.py,
which own the store's internal result representation. Route handlers map
between the two.

Client documents are schema-flexible: request models declare the fields the
server relies on and keep every other field the client sends (extra="allow").
Acknowledgment models use camelCase field names because that is the shape
the web client reads.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from docstore.models import DeleteResult, InsertResult, UpdateResult

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class RoleEnum(str, Enum):
    hr = "hr"
    employee = "employee"


# ---------------------------------------------------------------------------
# Error envelope
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str]


# ---------------------------------------------------------------------------
# Acknowledgments
# ---------------------------------------------------------------------------


class InsertAck(BaseModel):
    model_config = ConfigDict(frozen=True)

    acknowledged: bool
    insertedId: str

    @classmethod
    def from_result(cls, result: InsertResult) -> "InsertAck":
        return cls(acknowledged=result.acknowledged, insertedId=result.inserted_id)


class UpdateAck(BaseModel):
    """Update acknowledgment. Updates never upsert, so the upsert fields are constant."""

    model_config = ConfigDict(frozen=True)

    acknowledged: bool
    matchedCount: int
    modifiedCount: int
    upsertedCount: int = 0
    upsertedId: Optional[str] = None

    @classmethod
    def from_result(cls, result: UpdateResult) -> "UpdateAck":
        return cls(
            acknowledged=result.acknowledged,
            matchedCount=result.matched_count,
            modifiedCount=result.modified_count,
        )


class DeleteAck(BaseModel):
    model_config = ConfigDict(frozen=True)

    acknowledged: bool
    deletedCount: int

    @classmethod
    def from_result(cls, result: DeleteResult) -> "DeleteAck":
        return cls(acknowledged=result.acknowledged, deletedCount=result.deleted_count)


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class UserCreate(BaseModel):
    """Request body for POST /users.

    email is the identifying key and is stored exactly as sent, padding
    included. Any other profile fields (photo URL, company name, date of
    birth) are stored as sent too.
    """

    model_config = ConfigDict(extra="allow", use_enum_values=True)

    email: str = Field(min_length=3, max_length=255)
    name: Optional[str] = Field(default=None, max_length=255)
    role: Optional[RoleEnum] = None


class UserUpdate(BaseModel):
    """Request body for PATCH /user. Only the display name can change."""

    name: str = Field(max_length=255)


class RoleResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Optional[str] = None


# ---------------------------------------------------------------------------
# Assets and asset requests
# ---------------------------------------------------------------------------


class AssetPayload(BaseModel):
    """Request body for POST /assets and PATCH /assets/{id}. Every field is client-defined."""

    model_config = ConfigDict(extra="allow")


class AssetRequestCreate(BaseModel):
    """Request body for POST /asset-requests.

    hrEmail routes the request to the HR manager who owns the asset. The
    server overwrites requestDate, approvalDate, and requestStatus.
    """

    model_config = ConfigDict(extra="allow")

    hrEmail: Optional[str] = Field(default=None, max_length=255)
