"""
Health Routes - System health and status endpoints.
"""

from typing import Any

from fastapi import APIRouter

from helpbot import __version__

router = APIRouter()


@router.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "service": "helpbot"}


@router.get("/api")
async def api_info() -> dict[str, Any]:
    """API info endpoint."""
    return {
        "name": "HelpBot API",
        "version": __version__,
        "description": "Knowledge-base helpdesk assistant",
        "docs": "/docs",
    }
