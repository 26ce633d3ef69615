"""
Signing schemes for license files.

Every scheme is a ``SchemeHandler`` with one sign/verify pair. ``SCHEMES`` maps
policy schemes to handlers and ``ALGORITHMS`` maps ``alg`` suffixes back to
them for verification.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding

from licfile.common.exceptions import (
    InvalidAccountError,
    InvalidSignatureError,
    UnsupportedAlgorithmError,
)
from licfile.common.models import SigningScheme

if TYPE_CHECKING:
    from licfile.common.entities import SigningIdentity

logger = logging.getLogger(__name__)

SIGNING_PREFIX = "license"

ENCODING_PLAIN = "base64"
ENCODING_ENCRYPTED = "aes-256-cbc"


def signing_data(enc: str) -> bytes:
    """Build the signing string ``license/<enc>``."""
    return f"{SIGNING_PREFIX}/{enc}".encode()


def _require(key: object, name: str) -> None:
    if key is None:
        msg = f"Account is missing its {name}"
        raise InvalidAccountError(msg)


def _sign_ed25519(identity: SigningIdentity, data: bytes) -> bytes:
    key = identity.ed25519_private_key
    _require(key, "Ed25519 private key")
    return key.sign(data)  # type: ignore[union-attr]


def _verify_ed25519(identity: SigningIdentity, sig: bytes, data: bytes) -> None:
    key = identity.ed25519_verify_key
    _require(key, "Ed25519 public key")
    key.verify(sig, data)  # type: ignore[union-attr]


def _sign_rsa_pss(identity: SigningIdentity, data: bytes) -> bytes:
    key = identity.rsa_private_key
    _require(key, "RSA private key")
    return key.sign(  # type: ignore[union-attr]
        data,
        padding.PSS(mgf=padding.MGF1(hashes.SHA256()), salt_length=padding.PSS.MAX_LENGTH),
        hashes.SHA256(),
    )


def _verify_rsa_pss(identity: SigningIdentity, sig: bytes, data: bytes) -> None:
    key = identity.rsa_verify_key
    _require(key, "RSA public key")
    key.verify(  # type: ignore[union-attr]
        sig,
        data,
        padding.PSS(mgf=padding.MGF1(hashes.SHA256()), salt_length=padding.PSS.AUTO),
        hashes.SHA256(),
    )


def _sign_rsa_pkcs1(identity: SigningIdentity, data: bytes) -> bytes:
    key = identity.rsa_private_key
    _require(key, "RSA private key")
    return key.sign(data, padding.PKCS1v15(), hashes.SHA256())  # type: ignore[union-attr]


def _verify_rsa_pkcs1(identity: SigningIdentity, sig: bytes, data: bytes) -> None:
    key = identity.rsa_verify_key
    _require(key, "RSA public key")
    key.verify(sig, data, padding.PKCS1v15(), hashes.SHA256())  # type: ignore[union-attr]


@dataclass(frozen=True)
class SchemeHandler:
    algorithm: str
    signer: Callable[[SigningIdentity, bytes], bytes]
    verifier: Callable[[SigningIdentity, bytes, bytes], None]

    def alg(self, *, encrypted: bool) -> str:
        encoding = ENCODING_ENCRYPTED if encrypted else ENCODING_PLAIN
        return f"{encoding}+{self.algorithm}"

    def sign(self, identity: SigningIdentity, data: bytes) -> bytes:
        return self.signer(identity, data)

    def verify(self, identity: SigningIdentity, sig: bytes, data: bytes) -> None:
        """Verify a signature, raising InvalidSignatureError on mismatch."""
        try:
            self.verifier(identity, sig, data)
        except InvalidSignature as err:
            msg = f"License file signature is invalid ({self.algorithm})"
            raise InvalidSignatureError(msg) from err


ED25519 = SchemeHandler("ed25519", _sign_ed25519, _verify_ed25519)
RSA_PSS_SHA256 = SchemeHandler("rsa-pss-sha256", _sign_rsa_pss, _verify_rsa_pss)
RSA_SHA256 = SchemeHandler("rsa-sha256", _sign_rsa_pkcs1, _verify_rsa_pkcs1)

SCHEMES: dict[SigningScheme, SchemeHandler] = {
    SigningScheme.NONE: ED25519,
    SigningScheme.ED25519: ED25519,
    SigningScheme.RSA_PKCS1_PSS_SIGN: RSA_PSS_SHA256,
    SigningScheme.RSA_PKCS1_SIGN: RSA_SHA256,
    SigningScheme.RSA_PKCS1_ENCRYPT: RSA_SHA256,
    SigningScheme.RSA_JWT_RS256: RSA_SHA256,
}

ALGORITHMS: dict[str, SchemeHandler] = {
    handler.algorithm: handler for handler in (ED25519, RSA_PSS_SHA256, RSA_SHA256)
}


def required_key(scheme: SigningScheme) -> str:
    """Name of the SigningIdentity attribute a scheme signs with."""
    if SCHEMES[scheme] is ED25519:
        return "ed25519_private_key"
    return "rsa_private_key"


def parse_alg(alg: str) -> tuple[SchemeHandler, bool]:
    """Map an ``alg`` label to its handler and whether it is encrypted."""
    encoding, sep, algorithm = alg.partition("+")
    handler = ALGORITHMS.get(algorithm)
    if not sep or encoding not in (ENCODING_PLAIN, ENCODING_ENCRYPTED) or handler is None:
        logger.debug("Unsupported license file algorithm %r", alg)
        msg = f"Unsupported license file algorithm: {alg}"
        raise UnsupportedAlgorithmError(msg)
    return handler, encoding == ENCODING_ENCRYPTED
