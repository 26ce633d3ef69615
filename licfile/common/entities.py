"""Domain layer: accounts, licenses and their signing material.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Union

from licfile.common.models import ResourceObject, SigningScheme

if TYPE_CHECKING:
    from cryptography.hazmat.primitives.asymmetric.ed25519 import (
        Ed25519PrivateKey,
        Ed25519PublicKey,
    )
    from cryptography.hazmat.primitives.asymmetric.rsa import (
        RSAPrivateKey,
        RSAPublicKey,
    )

Related = Union[ResourceObject, list[ResourceObject], None]


@dataclass(frozen=True)
class SigningIdentity:
    """Key material owned by an account.

    Either half of a key pair may be supplied; public halves are derived from
    private halves when only those are present.
    """

    ed25519_private_key: Ed25519PrivateKey | None = None
    ed25519_public_key: Ed25519PublicKey | None = None
    rsa_private_key: RSAPrivateKey | None = None
    rsa_public_key: RSAPublicKey | None = None

    @property
    def ed25519_verify_key(self) -> Ed25519PublicKey | None:
        if self.ed25519_public_key is not None:
            return self.ed25519_public_key
        if self.ed25519_private_key is not None:
            return self.ed25519_private_key.public_key()
        return None

    @property
    def rsa_verify_key(self) -> RSAPublicKey | None:
        if self.rsa_public_key is not None:
            return self.rsa_public_key
        if self.rsa_private_key is not None:
            return self.rsa_private_key.public_key()
        return None


@dataclass(frozen=True)
class Account:
    id: str
    identity: SigningIdentity


@dataclass(frozen=True)
class License:
    """Domain entity representing a license to check out."""

    id: str
    key: str | None = None
    scheme: SigningScheme | str | None = None
    attributes: dict[str, Any] = field(default_factory=dict)
    relationships: dict[str, Related] = field(default_factory=dict)

    @property
    def signing_scheme(self) -> SigningScheme:
        return SigningScheme.resolve(self.scheme)
