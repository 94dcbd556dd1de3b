"""Local provider data models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class LocalHealthStatus(BaseModel):
    running: bool
    endpoint: str = ""
    error: Optional[str] = None


class LocalModel(BaseModel):
    id: str
    label: str = ""
    size: Optional[int] = None
    family: Optional[str] = None
