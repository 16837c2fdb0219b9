"""
CLI Interface - Command-line tools for HelpBot.

Provides commands for:
- Crawling pages into the knowledge base
- Listing, searching, and deleting pages
- Asking questions (streamed or single-shot)
- Serving the API
"""

from .main import app, main

__all__ = ["app", "main"]
