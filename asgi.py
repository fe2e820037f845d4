"""
asgi.py -- ASGI entry point for AssetVerse.

Servers import `app` from here rather than from api/main.py so the module
path stays stable if the API package is reorganised.

Run with:  uvicorn asgi:app --reload
           python main.py serve
"""

from api.main import app

__all__ = ["app"]
