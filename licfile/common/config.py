"""
Configuration settings for license file checkout and verification.
"""

from __future__ import annotations

import logging
import os
from datetime import timedelta
from pathlib import Path
from typing import cast

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey

from licfile.common.entities import SigningIdentity


class Config:
    """Central configuration class for all license file settings."""

    def __init__(self, keys_dir: Path | None = None) -> None:
        # Validity window
        self.DEFAULT_TTL: timedelta = timedelta(
            seconds=int(os.getenv("LICFILE_DEFAULT_TTL", "2629746"))
        )  # 1 month
        self.MIN_TTL: timedelta = timedelta(days=1)

        # Armor blob line width, 0 keeps the blob on one line
        width = int(os.getenv("LICFILE_ARMOR_LINE_WIDTH", "0"))
        self.ARMOR_LINE_WIDTH: int | None = width or None

        # Key files
        self.BASE_DIR: Path = Path(__file__).parent.parent
        self.KEYS_DIR: Path = keys_dir or Path(
            os.getenv("LICFILE_KEYS_DIR", str(self.BASE_DIR / "keys"))
        )
        self.ED25519_PRIVATE_KEY_PATH: Path = self.KEYS_DIR / "ed25519_private.pem"
        self.ED25519_PUBLIC_KEY_PATH: Path = self.KEYS_DIR / "ed25519_public.pem"
        self.RSA_PRIVATE_KEY_PATH: Path = self.KEYS_DIR / "rsa_private.pem"
        self.RSA_PUBLIC_KEY_PATH: Path = self.KEYS_DIR / "rsa_public.pem"

        # Logging
        self.LOG_LEVEL: int = getattr(
            logging, os.getenv("LICFILE_LOG_LEVEL", "INFO").upper(), logging.INFO
        )

    @staticmethod
    def _read(path: Path) -> bytes | None:
        try:
            with path.open("rb") as f:
                return f.read()
        except FileNotFoundError:
            return None

    def get_signing_identity(self) -> SigningIdentity:
        """Load whichever account keys exist in the keys directory."""
        keys: dict[str, object] = {}

        pem = self._read(self.ED25519_PRIVATE_KEY_PATH)
        if pem is not None:
            keys["ed25519_private_key"] = cast(
                "Ed25519PrivateKey", serialization.load_pem_private_key(pem, None)
            )
        pem = self._read(self.ED25519_PUBLIC_KEY_PATH)
        if pem is not None:
            keys["ed25519_public_key"] = cast(
                "Ed25519PublicKey", serialization.load_pem_public_key(pem)
            )
        pem = self._read(self.RSA_PRIVATE_KEY_PATH)
        if pem is not None:
            keys["rsa_private_key"] = cast(
                "RSAPrivateKey", serialization.load_pem_private_key(pem, None)
            )
        pem = self._read(self.RSA_PUBLIC_KEY_PATH)
        if pem is not None:
            keys["rsa_public_key"] = cast(
                "RSAPublicKey", serialization.load_pem_public_key(pem)
            )

        if not keys:
            msg = (
                f"No signing keys found in {self.KEYS_DIR}. Expected any of "
                f"{self.ED25519_PRIVATE_KEY_PATH.name}, {self.ED25519_PUBLIC_KEY_PATH.name}, "
                f"{self.RSA_PRIVATE_KEY_PATH.name}, {self.RSA_PUBLIC_KEY_PATH.name}."
            )
            raise ValueError(msg)

        return SigningIdentity(**keys)  # type: ignore[arg-type]
