"""
Interfaces and protocols for dependency injection.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from licfile.common.entities import License
from licfile.common.models import ResourceDocument


class IResourceRenderer(Protocol):
    """Protocol for rendering a license into a resource document."""

    allowed_includes: frozenset[str]

    def render(self, lic: License, include: list[str]) -> ResourceDocument: ...


class IClock(Protocol):
    """Protocol for the current time."""

    def __call__(self) -> datetime: ...


class IRandomSource(Protocol):
    """Protocol for a cryptographically secure byte source."""

    def __call__(self, size: int, /) -> bytes: ...
