"""
License checkout: issue signed, optionally encrypted, license files.
"""

from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any

from licfile.common.certificate import encode_certificate
from licfile.common.config import Config
from licfile.common.crypto import CryptoUtils
from licfile.common.exceptions import (
    InvalidAccountError,
    InvalidIncludeError,
    InvalidLicenseError,
)
from licfile.common.logging_utils import get_logger
from licfile.common.models import Certificate, Envelope, SigningScheme
from licfile.common.signing import SCHEMES, required_key, signing_data
from licfile.issuer.envelope import EnvelopeBuilder
from licfile.issuer.renderer import LicenseRenderer

if TYPE_CHECKING:
    from collections.abc import Iterable

    from licfile.common.entities import Account, License, SigningIdentity
    from licfile.common.interfaces import IClock, IRandomSource, IResourceRenderer

_DEFAULT: Any = object()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LicenseCheckoutService:
    """Issues armored license files for licenses owned by an account."""

    def __init__(  # noqa: PLR0913
        self,
        config: Config | None = None,
        renderer: IResourceRenderer | None = None,
        clock: IClock | None = None,
        random_bytes: IRandomSource | None = None,
        log_level: int | None = None,
    ):
        self.config = config or Config()
        self.renderer = renderer or LicenseRenderer()
        self.clock = clock or utcnow
        self.random_bytes = random_bytes or os.urandom
        self.envelope_builder = EnvelopeBuilder(min_ttl=self.config.MIN_TTL)
        self.logger = get_logger(
            __name__, log_level if log_level is not None else self.config.LOG_LEVEL
        )

    def _resolve_scheme(self, lic: License) -> SigningScheme:
        try:
            return lic.signing_scheme
        except ValueError as err:
            raise InvalidLicenseError(str(err)) from err

    def _validate_includes(self, include: list[str]) -> None:
        invalid = [name for name in include if name not in self.renderer.allowed_includes]
        if invalid:
            msg = f"Invalid includes: {', '.join(invalid)}"
            raise InvalidIncludeError(msg)

    def checkout(  # noqa: PLR0913
        self,
        account: Account | None,
        lic: License | None,
        *,
        include: Iterable[str] | None = None,
        ttl: timedelta | int | None = _DEFAULT,
        encrypt: bool = False,
    ) -> str:
        """Check out a license, returning the armored license file text.

        Args:
            account: Account whose signing identity signs the file
            lic: License being checked out
            include: Relationship names to embed as included resources
            ttl: Validity window; None issues a file that never expires
            encrypt: Encrypt the payload with the license key

        Raises:
            CheckoutError: request is invalid; raised before any signing
        """
        if account is None:
            msg = "Account must be present"
            raise InvalidAccountError(msg)
        if lic is None:
            msg = "License must be present"
            raise InvalidLicenseError(msg)

        include = list(include or [])
        self._validate_includes(include)
        if ttl is _DEFAULT:
            ttl = self.config.DEFAULT_TTL
        ttl = self.envelope_builder.normalize_ttl(ttl)

        scheme = self._resolve_scheme(lic)
        if getattr(account.identity, required_key(scheme)) is None:
            msg = f"Account {account.id} has no key for signing scheme {scheme.name}"
            raise InvalidAccountError(msg)
        if encrypt and not lic.key:
            msg = f"License {lic.id} has no key to encrypt with"
            raise InvalidLicenseError(msg)

        document = self.renderer.render(lic, include)
        envelope = self.envelope_builder.build(document, ttl, self.clock())
        cert = self.build_certificate(
            envelope,
            scheme,
            account.identity,
            secret=lic.key if encrypt else None,
        )

        self.logger.info(
            "Checked out license %s for account %s (alg=%s)", lic.id, account.id, cert.alg
        )
        return encode_certificate(cert, line_width=self.config.ARMOR_LINE_WIDTH)

    def build_certificate(
        self,
        envelope: Envelope,
        scheme: SigningScheme,
        identity: SigningIdentity,
        secret: str | None = None,
    ) -> Certificate:
        """Encode, optionally encrypt, and sign an envelope.

        The signature covers ``license/<enc>``, so a verifier can reject a
        tampered file before attempting decryption.
        """
        plaintext = envelope.to_json()
        if secret is not None:
            enc = CryptoUtils.encrypt(plaintext, secret, self.random_bytes)
        else:
            enc = CryptoUtils.b64encode(plaintext)

        handler = SCHEMES[scheme]
        sig = handler.sign(identity, signing_data(enc))
        self.logger.debug("Signed license file with %s", handler.algorithm)

        return Certificate(
            enc=enc,
            sig=CryptoUtils.b64encode(sig),
            alg=handler.alg(encrypted=secret is not None),
        )
