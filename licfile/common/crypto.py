"""Common cryptographic utilities.
"""

from __future__ import annotations

import base64
import binascii
import json
import os
from typing import Any, Callable

from cryptography.hazmat.primitives import hashes, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from licfile.common.exceptions import DecryptionError

IV_SIZE = 16

RandomSource = Callable[[int], bytes]


class CryptoUtils:
    """Utility class for cryptographic operations."""

    @staticmethod
    def b64encode(data: bytes) -> str:
        return base64.b64encode(data).decode("ascii")

    @staticmethod
    def b64decode(data: str) -> bytes:
        """Strictly decode standard base64, rejecting stray characters."""
        return base64.b64decode(data.encode("ascii"), validate=True)

    @staticmethod
    def derive_key(secret: str) -> bytes:
        """Derive a 256-bit AES key from a license secret."""
        digest = hashes.Hash(hashes.SHA256())
        digest.update(secret.encode())
        return digest.finalize()

    @staticmethod
    def encrypt(
        plaintext: bytes, secret: str, random_bytes: RandomSource = os.urandom
    ) -> str:
        """Encrypt with AES-256-CBC, returning ``<ciphertext>.<iv>`` in base64."""
        iv = random_bytes(IV_SIZE)
        if len(iv) != IV_SIZE:
            msg = f"Random source returned {len(iv)} bytes, expected {IV_SIZE}"
            raise ValueError(msg)

        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        padded = padder.update(plaintext) + padder.finalize()

        encryptor = Cipher(
            algorithms.AES(CryptoUtils.derive_key(secret)), modes.CBC(iv)
        ).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()

        return f"{CryptoUtils.b64encode(ciphertext)}.{CryptoUtils.b64encode(iv)}"

    @staticmethod
    def decrypt(token: str, secret: str) -> bytes:
        """Reverse :meth:`encrypt`. Any failure raises DecryptionError."""
        ciphertext_b64, sep, iv_b64 = token.partition(".")
        if not sep or not ciphertext_b64 or not iv_b64:
            msg = "Encrypted payload is not in <ciphertext>.<iv> form"
            raise DecryptionError(msg)

        try:
            ciphertext = CryptoUtils.b64decode(ciphertext_b64)
            iv = CryptoUtils.b64decode(iv_b64)
            decryptor = Cipher(
                algorithms.AES(CryptoUtils.derive_key(secret)), modes.CBC(iv)
            ).decryptor()
            padded = decryptor.update(ciphertext) + decryptor.finalize()

            unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
            return unpadder.update(padded) + unpadder.finalize()
        except (ValueError, binascii.Error) as err:
            msg = "Encrypted payload could not be decrypted"
            raise DecryptionError(msg) from err

    @staticmethod
    def decrypt_json(token: str, secret: str) -> Any:
        """Decrypt and parse JSON, so a wrong key never yields a payload."""
        plaintext = CryptoUtils.decrypt(token, secret)
        try:
            return json.loads(plaintext)
        except ValueError as err:
            msg = "Decrypted payload is not valid JSON"
            raise DecryptionError(msg) from err
