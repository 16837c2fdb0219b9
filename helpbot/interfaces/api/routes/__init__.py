"""
API Routes.
"""

from . import chat, health, knowledge, models

__all__ = ["health", "chat", "knowledge", "models"]
