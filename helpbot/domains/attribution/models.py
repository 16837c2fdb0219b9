"""
Attribution Models - Data types for reference attribution.
"""

from __future__ import annotations

from pydantic import BaseModel


class Reference(BaseModel):
    """Source shown to the user under an answer."""

    title: str
    url: str

    model_config = {"frozen": True}
