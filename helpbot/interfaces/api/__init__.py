"""
API Interface - FastAPI REST API.

Serves single-shot and NDJSON-streamed chat plus knowledge base management.
"""

from .main import app, create_app

__all__ = ["app", "create_app"]
