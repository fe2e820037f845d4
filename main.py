#!/usr/bin/env python3
"""
AssetVerse -- command-line entry point.

Usage:
  python main.py serve
  python main.py serve --port 8000 --reload
  python main.py load packages packages.json
  python main.py load assets seed_assets.json

Environment variables (see core/config.py):
  PORT            Default port for `serve` (3000).
  DATABASE_URL    Document store connection string.
  FB_SERVICE_KEY  Base64-encoded Firebase service-account JSON.
  DEBUG           Set to true to run without FB_SERVICE_KEY.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Optional

import uvicorn

from core.config import get_settings
from docstore.errors import InvalidDocumentError
from docstore.models import COLLECTION_NAMES
from docstore.store import DocumentStore


def _load_documents(path: str) -> Optional[list[dict]]:
    """Read a JSON array of objects from a file.

    Resolves symlinks and verifies the path is a regular file before reading.
    Returns None (after printing why) when the file cannot be used.
    """
    file_path = Path(path).resolve()
    if not file_path.is_file():
        print(f"  [!] '{path}' is not a readable file.")
        return None
    try:
        data = json.loads(file_path.read_text(encoding="utf-8"))
    except OSError as e:
        print(f"  [!] Could not read file '{path}': {e}")
        return None
    except json.JSONDecodeError as e:
        print(f"  [!] '{path}' is not valid JSON: {e}")
        return None
    if not isinstance(data, list) or not all(isinstance(doc, dict) for doc in data):
        print(f"  [!] '{path}' must contain a JSON array of objects.")
        return None
    return data


def load_collection(store: DocumentStore, collection: str, path: str) -> int:
    """Insert every document in the file into the collection. Returns a process exit code."""
    if collection not in COLLECTION_NAMES:
        print(f"  [!] Unknown collection '{collection}'. Choose from: {', '.join(COLLECTION_NAMES)}")
        return 2
    documents = _load_documents(path)
    if documents is None:
        return 1
    try:
        ids = store.collection(collection).insert_many(documents)
    except InvalidDocumentError as e:
        print(f"  [!] '{path}' holds a value that cannot be stored: {e}")
        return 1
    print(f"  Loaded {len(ids)} document(s) into '{collection}'.")
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="assetverse",
        description="AssetVerse API server and document store tools.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API.")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=None, help="Defaults to the PORT setting.")
    serve.add_argument("--reload", action="store_true", help="Restart on code changes (development).")

    load = sub.add_parser("load", help="Insert documents from a JSON array file.")
    load.add_argument("collection", help=f"One of: {', '.join(COLLECTION_NAMES)}")
    load.add_argument("file", help="Path to a JSON file holding an array of objects.")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    settings = get_settings()

    if args.command == "serve":
        port = args.port if args.port is not None else settings.port
        uvicorn.run("asgi:app", host=args.host, port=port, reload=args.reload)
        return 0

    store = DocumentStore(settings.database_url)
    try:
        return load_collection(store, args.collection, args.file)
    finally:
        store.close()


if __name__ == "__main__":
    sys.exit(main())
