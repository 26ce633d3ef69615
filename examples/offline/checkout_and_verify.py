"""
Checkout and offline verification example.

This example issues an encrypted license file for a license signed with
RSA-PSS, then verifies it the way an offline application would: with only
the account's public key and the license key.
"""

import logging
import sys
from datetime import timedelta
from pathlib import Path

from cryptography.hazmat.primitives.asymmetric import rsa

# Add the project root to the path to import licfile
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from licfile import (
    Account,
    License,
    LicenseCheckoutService,
    LicenseFileVerifier,
    SigningIdentity,
    VerificationError,
)
from licfile.common.models import ResourceObject


def main() -> None:
    # Configure logging
    logging.basicConfig(level=logging.INFO)
    logger = logging.getLogger(__name__)

    rsa_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    account = Account(id="demo-account", identity=SigningIdentity(rsa_private_key=rsa_key))
    lic = License(
        id="demo-license",
        key="DEMO-1234-5678-9ABC",
        scheme="RSA_2048_PKCS1_PSS_SIGN_V2",
        attributes={"name": "Demo"},
        relationships={"product": ResourceObject(type="products", id="demo-product")},
    )

    service = LicenseCheckoutService(log_level=logging.INFO)
    text = service.checkout(
        account, lic, include=["product"], ttl=timedelta(days=30), encrypt=True
    )
    logger.info("License file:\n%s", text)

    # The verifier only ships with the public key
    verifier = LicenseFileVerifier(
        SigningIdentity(rsa_public_key=rsa_key.public_key()), secret=lic.key
    )
    try:
        result = verifier.verify(text)
    except VerificationError:
        logger.exception("License file rejected")
        sys.exit(1)

    logger.info("Status: %s, expires %s", result.status.value, result.envelope.meta.exp)


if __name__ == "__main__":
    main()
