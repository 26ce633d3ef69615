"""
Pydantic models for license file documents, envelopes and certificates.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SigningScheme(str, Enum):
    """Policy-level signing scheme."""

    NONE = "NONE"
    ED25519 = "ED25519_SIGN"
    RSA_PKCS1_SIGN = "RSA_2048_PKCS1_SIGN"
    RSA_PKCS1_PSS_SIGN = "RSA_2048_PKCS1_PSS_SIGN"
    RSA_PKCS1_ENCRYPT = "RSA_2048_PKCS1_ENCRYPT"
    RSA_JWT_RS256 = "RSA_2048_JWT_RS256"

    @classmethod
    def resolve(cls, value: SigningScheme | str | None) -> SigningScheme:
        """Resolve a policy scheme name, member name or None to a member.

        V2 policy names sign identically to their V1 counterparts.
        """
        if value is None:
            return cls.NONE
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            msg = f"Unknown signing scheme: {value!r}"
            raise ValueError(msg)

        name = value.strip().upper().removesuffix("_V2")
        if name in cls.__members__:
            return cls[name]
        try:
            return cls(name)
        except ValueError:
            msg = f"Unknown signing scheme: {value}"
            raise ValueError(msg) from None


class LicenseFileStatus(str, Enum):
    VALID = "VALID"
    EXPIRED = "EXPIRED"


class ResourceObject(BaseModel):
    """JSON:API resource object."""

    model_config = ConfigDict(extra="allow")

    type: str
    id: str
    attributes: dict[str, Any] = Field(default_factory=dict)
    relationships: dict[str, Any] = Field(default_factory=dict)

    @property
    def identifier(self) -> dict[str, str]:
        return {"type": self.type, "id": self.id}


class ResourceDocument(BaseModel):
    data: ResourceObject
    included: list[ResourceObject] = Field(default_factory=list)


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, accepting a trailing Z for UTC."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    moment = datetime.fromisoformat(value)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


class EnvelopeMeta(BaseModel):
    model_config = ConfigDict(frozen=True)

    iat: str
    exp: str | None = None
    ttl: int | None = None

    @field_validator("iat", "exp")
    @classmethod
    def check_timestamp(cls, value: str | None) -> str | None:
        if value is not None:
            parse_timestamp(value)
        return value

    @property
    def issued_at(self) -> datetime:
        return parse_timestamp(self.iat)

    @property
    def expires_at(self) -> datetime | None:
        return parse_timestamp(self.exp) if self.exp is not None else None


class Envelope(BaseModel):
    """Metadata-wrapped resource document signed into a license file."""

    model_config = ConfigDict(frozen=True)

    meta: EnvelopeMeta
    data: dict[str, Any]
    included: list[dict[str, Any]] = Field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "meta": self.meta.model_dump(),
            "data": self.data,
        }
        if self.included:
            payload["included"] = self.included
        return payload

    def to_json(self) -> bytes:
        """Canonical JSON bytes used as the plaintext of a license file."""
        return json.dumps(self.to_dict(), separators=(",", ":")).encode()


class Certificate(BaseModel):
    enc: str
    sig: str
    alg: str


class VerificationResult(BaseModel):
    envelope: Envelope
    alg: str
    status: LicenseFileStatus

    @property
    def expired(self) -> bool:
        return self.status is LicenseFileStatus.EXPIRED
