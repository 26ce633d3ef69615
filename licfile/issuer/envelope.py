"""
Envelope construction for license files.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from licfile.common.exceptions import InvalidTTLError
from licfile.common.models import Envelope, EnvelopeMeta

if TYPE_CHECKING:
    from licfile.common.models import ResourceDocument


def format_timestamp(moment: datetime) -> str:
    """Render a UTC ISO-8601 timestamp with millisecond precision."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class EnvelopeBuilder:
    """Wraps a rendered resource document with issue and expiry metadata."""

    def __init__(self, min_ttl: timedelta = timedelta(days=1)):
        self.min_ttl = min_ttl

    def normalize_ttl(self, ttl: timedelta | int | None) -> timedelta | None:
        """Coerce ttl to whole seconds and enforce the minimum."""
        if ttl is None:
            return None
        if isinstance(ttl, bool) or not isinstance(ttl, (int, timedelta)):
            msg = f"TTL must be a duration or a number of seconds, got {type(ttl).__name__}"
            raise InvalidTTLError(msg)

        seconds = ttl if isinstance(ttl, int) else int(ttl.total_seconds())
        try:
            normalized = timedelta(seconds=seconds)
        except OverflowError as err:
            msg = f"TTL of {seconds} seconds is out of range"
            raise InvalidTTLError(msg) from err
        if normalized < self.min_ttl:
            msg = (
                f"TTL must be greater than or equal to {int(self.min_ttl.total_seconds())} "
                f"seconds, got {seconds}"
            )
            raise InvalidTTLError(msg)
        return normalized

    def build(
        self,
        document: ResourceDocument,
        ttl: timedelta | int | None,
        now: datetime,
    ) -> Envelope:
        ttl = self.normalize_ttl(ttl)
        issued_at = now.replace(microsecond=now.microsecond // 1000 * 1000)

        try:
            expires_at = issued_at + ttl if ttl is not None else None
        except OverflowError as err:
            msg = f"TTL of {int(ttl.total_seconds())} seconds expires past year 9999"
            raise InvalidTTLError(msg) from err

        meta = EnvelopeMeta(
            iat=format_timestamp(issued_at),
            exp=format_timestamp(expires_at) if expires_at is not None else None,
            ttl=int(ttl.total_seconds()) if ttl is not None else None,
        )
        return Envelope(
            meta=meta,
            data=document.data.model_dump(),
            included=[resource.model_dump() for resource in document.included],
        )
