from datetime import datetime, timezone

import pytest
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from licfile.common.entities import Account, License, SigningIdentity
from licfile.common.models import ResourceObject
from licfile.issuer.checkout import LicenseCheckoutService

FROZEN_NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture(scope="session")
def ed25519_key() -> Ed25519PrivateKey:
    return Ed25519PrivateKey.generate()


@pytest.fixture(scope="session")
def rsa_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def identity(ed25519_key, rsa_key) -> SigningIdentity:
    return SigningIdentity(ed25519_private_key=ed25519_key, rsa_private_key=rsa_key)


@pytest.fixture
def public_identity(ed25519_key, rsa_key) -> SigningIdentity:
    """Verifier-side identity holding only public keys."""
    return SigningIdentity(
        ed25519_public_key=ed25519_key.public_key(),
        rsa_public_key=rsa_key.public_key(),
    )


@pytest.fixture
def account(identity) -> Account:
    return Account(id="acct-1", identity=identity)


@pytest.fixture
def product() -> ResourceObject:
    return ResourceObject(type="products", id="prod-1", attributes={"name": "Widget"})


@pytest.fixture
def policy() -> ResourceObject:
    return ResourceObject(type="policies", id="pol-1", attributes={"duration": None})


@pytest.fixture
def license_factory(product, policy):
    def make(scheme=None, key="lic-key-0001"):
        return License(
            id="lic-1",
            key=key,
            scheme=scheme,
            attributes={"name": "Test License", "status": "ACTIVE"},
            relationships={
                "account": ResourceObject(type="accounts", id="acct-1"),
                "product": product,
                "policy": policy,
                "user": None,
            },
        )

    return make


@pytest.fixture
def lic(license_factory) -> License:
    return license_factory()


@pytest.fixture
def service() -> LicenseCheckoutService:
    return LicenseCheckoutService(clock=lambda: FROZEN_NOW)


@pytest.fixture
def now() -> datetime:
    return FROZEN_NOW
