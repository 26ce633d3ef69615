"""
Offline license file verification.
"""

from __future__ import annotations

import binascii
import json
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from licfile.common.certificate import decode_certificate
from licfile.common.crypto import CryptoUtils
from licfile.common.exceptions import (
    DecryptionError,
    InvalidSignatureError,
    MalformedPayloadError,
)
from licfile.common.logging_utils import get_logger
from licfile.common.models import Envelope, LicenseFileStatus, VerificationResult
from licfile.common.signing import parse_alg, signing_data

if TYPE_CHECKING:
    from licfile.common.entities import SigningIdentity
    from licfile.common.interfaces import IClock


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LicenseFileVerifier:
    """Verifies armored license files against an account's public keys."""

    def __init__(
        self,
        identity: SigningIdentity,
        secret: str | None = None,
        clock: IClock | None = None,
        log_level: int | None = None,
    ):
        self.identity = identity
        self.secret = secret
        self.clock = clock or utcnow
        self.logger = get_logger(__name__, log_level)

    def verify(self, text: str) -> VerificationResult:
        """Verify a license file and return its envelope.

        The signature is checked before anything is decrypted or parsed.
        An expired file still verifies; its status is EXPIRED.

        Raises:
            VerificationError: the file is malformed, forged or unreadable
            InvalidAccountError: the identity lacks the key for the file's alg
        """
        cert = decode_certificate(text)
        handler, encrypted = parse_alg(cert.alg)

        try:
            sig = CryptoUtils.b64decode(cert.sig)
        except (ValueError, binascii.Error) as err:
            msg = "License file signature is not valid base64"
            raise InvalidSignatureError(msg) from err
        # Only the canonical encoding of the signature bytes is accepted
        if CryptoUtils.b64encode(sig) != cert.sig:
            msg = "License file signature is not canonically encoded"
            raise InvalidSignatureError(msg)

        try:
            handler.verify(self.identity, sig, signing_data(cert.enc))
        except InvalidSignatureError:
            self.logger.info("Rejected license file with invalid %s signature", cert.alg)
            raise

        payload = self._decode_payload(cert.enc, encrypted=encrypted)
        try:
            envelope = Envelope.model_validate(payload)
        except ValidationError as err:
            msg = "License file payload is not a valid envelope"
            raise MalformedPayloadError(msg) from err

        status = LicenseFileStatus.VALID
        expires_at = envelope.meta.expires_at
        if expires_at is not None and expires_at < self._now():
            status = LicenseFileStatus.EXPIRED

        self.logger.debug(
            "Verified license file %s (alg=%s, status=%s)",
            envelope.data.get("id"),
            cert.alg,
            status.value,
        )
        return VerificationResult(envelope=envelope, alg=cert.alg, status=status)

    def _now(self) -> datetime:
        now = self.clock()
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        return now

    def _decode_payload(self, enc: str, *, encrypted: bool) -> Any:
        if encrypted:
            if not self.secret:
                msg = "License file is encrypted and no license key was supplied"
                raise DecryptionError(msg)
            return CryptoUtils.decrypt_json(enc, self.secret)

        try:
            return json.loads(CryptoUtils.b64decode(enc))
        except (ValueError, binascii.Error) as err:
            msg = "License file payload is not valid encoded JSON"
            raise MalformedPayloadError(msg) from err


def verify_license_file(
    text: str,
    identity: SigningIdentity,
    secret: str | None = None,
    now: datetime | None = None,
) -> VerificationResult:
    """Verify a license file in one call."""
    clock = (lambda: now) if now is not None else None
    return LicenseFileVerifier(identity, secret=secret, clock=clock).verify(text)
