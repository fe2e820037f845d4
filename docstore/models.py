"""
docstore/models.py -- Acknowledgment dataclasses for document store writes.

Pure data containers with zero logic. Collection methods return them; the API
layer maps them onto the camelCase wire shapes the web client consumes
(see api/models.py).

Collection names are listed here so the store, the CLI, and the tests agree
on the exact spelling the web client's database uses.
"""

from dataclasses import dataclass

USERS = "users"
EMPLOYEE_AFFILIATIONS = "employeeAffiliations"
ASSETS = "assets"
REQUESTS = "requests"
ASSIGNED_ASSETS = "assignedAssets"
PACKAGES = "packages"
PAYMENTS = "payments"

COLLECTION_NAMES: tuple[str, ...] = (
    USERS,
    EMPLOYEE_AFFILIATIONS,
    ASSETS,
    REQUESTS,
    ASSIGNED_ASSETS,
    PACKAGES,
    PAYMENTS,
)


@dataclass(frozen=True)
class InsertResult:
    """Result of a single-document insert. inserted_id is the generated _id."""

    inserted_id: str
    acknowledged: bool = True


@dataclass(frozen=True)
class UpdateResult:
    """Result of a single-document update.

    matched_count is 0 or 1. modified_count is 0 when the merge left the
    document unchanged, even though a document matched.
    """

    matched_count: int
    modified_count: int
    acknowledged: bool = True


@dataclass(frozen=True)
class DeleteResult:
    deleted_count: int
    acknowledged: bool = True
