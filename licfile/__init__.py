# Offline license files

from licfile.common.entities import Account, License, SigningIdentity
from licfile.common.exceptions import (
    CheckoutError,
    DecryptionError,
    InvalidAccountError,
    InvalidIncludeError,
    InvalidLicenseError,
    InvalidSignatureError,
    InvalidTTLError,
    LicenseFileError,
    MalformedCertificateError,
    MalformedPayloadError,
    UnsupportedAlgorithmError,
    VerificationError,
)
from licfile.common.models import (
    Envelope,
    LicenseFileStatus,
    SigningScheme,
    VerificationResult,
)
from licfile.issuer.checkout import LicenseCheckoutService
from licfile.verifier.verifier import LicenseFileVerifier, verify_license_file

__all__ = [
    "Account",
    "CheckoutError",
    "DecryptionError",
    "Envelope",
    "InvalidAccountError",
    "InvalidIncludeError",
    "InvalidLicenseError",
    "InvalidSignatureError",
    "InvalidTTLError",
    "License",
    "LicenseCheckoutService",
    "LicenseFileError",
    "LicenseFileStatus",
    "LicenseFileVerifier",
    "MalformedCertificateError",
    "MalformedPayloadError",
    "SigningIdentity",
    "SigningScheme",
    "UnsupportedAlgorithmError",
    "VerificationError",
    "VerificationResult",
    "verify_license_file",
]
