"""
docstore/errors.py -- Typed errors raised by the document store.

Route handlers never see SQLAlchemy exceptions. The store wraps them in
DocumentStoreError so api/main.py can map every persistence failure to a
single 500 response.
"""


class DocumentStoreError(Exception):
    """A store operation failed (connection lost, bad SQL, corrupt row)."""


class UnsupportedFilterError(DocumentStoreError):
    """A filter value has a type the store cannot compare in SQL."""


class InvalidDocumentError(DocumentStoreError):
    """A document cannot be written as strict JSON (NaN, Infinity, non-JSON types).

    Raised before any SQL runs, so nothing is stored. The API maps it to 422.
    """
