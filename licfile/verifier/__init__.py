"""
License file verification.
"""

from .verifier import LicenseFileVerifier, verify_license_file

__all__ = ["LicenseFileVerifier", "verify_license_file"]
