"""
api/routes/packages.py -- Subscription package catalogue.

Routes:
  GET /packages -- every package document, public, unpaginated

Packages are read-only over HTTP. They are loaded with `python main.py load
packages <file.json>`.
"""

from fastapi import APIRouter, Request

from api.limiter import limiter, read_limit
from docstore.store import DocumentStore

router = APIRouter()


@router.get("/packages", response_model=list[dict])
@limiter.limit(read_limit)
def list_packages(request: Request) -> list[dict]:
    store: DocumentStore = request.app.state.store
    return store.packages.find()
