"""
Interfaces - User-facing applications.

- api: FastAPI REST API with NDJSON streaming
- cli: Command-line interface
"""

__all__ = ["api", "cli"]
