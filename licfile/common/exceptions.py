"""
Custom exceptions for license file checkout and verification.
"""

from __future__ import annotations


class LicenseFileError(Exception):
    """Base exception for license file failures."""

    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message)
        self.status_code = status_code


class CheckoutError(LicenseFileError):
    """Exception for rejected checkout requests."""

    def __init__(self, message: str) -> None:
        super().__init__(message, 422)


class InvalidAccountError(CheckoutError):
    """Account is missing or lacks the key material a scheme needs."""


class InvalidLicenseError(CheckoutError):
    """License is missing or lacks a required attribute."""


class InvalidIncludeError(CheckoutError):
    """Requested relationship cannot be included."""


class InvalidTTLError(CheckoutError):
    """Requested time-to-live is below the allowed minimum."""


class VerificationError(LicenseFileError):
    """Exception for license files that fail verification."""

    def __init__(self, message: str) -> None:
        super().__init__(message, 403)


class DecryptionError(VerificationError):
    """Encrypted payload could not be decrypted with the license key."""


class InvalidSignatureError(VerificationError):
    """Signature does not match the encoded payload."""


class MalformedCertificateError(VerificationError):
    """Armor, base64 or certificate object is malformed."""


class MalformedPayloadError(VerificationError):
    """Signed payload is not a valid envelope."""


class UnsupportedAlgorithmError(VerificationError):
    """Certificate alg is not a known encoding and signature pair."""
