import base64
import hashlib
import json
from datetime import timedelta

import pytest
from cryptography.hazmat.primitives import hashes, padding
from cryptography.hazmat.primitives.asymmetric import padding as asym_padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from licfile.common.config import Config
from licfile.common.entities import Account, SigningIdentity
from licfile.common.exceptions import (
    InvalidAccountError,
    InvalidIncludeError,
    InvalidLicenseError,
    InvalidTTLError,
)
from licfile.issuer.checkout import LicenseCheckoutService

HEADER = "-----BEGIN LICENSE FILE-----\n"
FOOTER = "-----END LICENSE FILE-----\n"


def unarmor(cert: str) -> dict:
    payload = cert.removeprefix(HEADER).removesuffix(FOOTER)
    return json.loads(base64.b64decode(payload))


def decode_enc(cert: str) -> dict:
    return json.loads(base64.b64decode(unarmor(cert)["enc"], validate=True))


def decrypt_enc(cert: str, key: str) -> dict:
    enc = unarmor(cert)["enc"]
    ciphertext, iv = (base64.b64decode(part) for part in enc.split("."))
    decryptor = Cipher(
        algorithms.AES(hashlib.sha256(key.encode()).digest()), modes.CBC(iv)
    ).decryptor()
    padded = decryptor.update(ciphertext) + decryptor.finalize()
    unpadder = padding.PKCS7(128).unpadder()
    return json.loads(unpadder.update(padded) + unpadder.finalize())


def test_returns_armored_certificate(service, account, lic) -> None:
    cert = service.checkout(account, lic)

    assert cert.startswith(HEADER)
    assert cert.endswith(FOOTER)
    assert cert.count("\n") == 3  # noqa: PLR2004
    assert set(unarmor(cert)) == {"enc", "sig", "alg"}


def test_returns_encoded_license(service, account, lic) -> None:
    data = decode_enc(service.checkout(account, lic))

    assert isinstance(data["meta"]["iat"], str)
    assert isinstance(data["meta"]["exp"], str)
    assert isinstance(data["meta"]["ttl"], int)
    assert data["data"]["type"] == "licenses"
    assert data["data"]["id"] == lic.id


def test_wraps_blob_when_configured(monkeypatch, account, lic, now) -> None:
    monkeypatch.setenv("LICFILE_ARMOR_LINE_WIDTH", "60")
    service = LicenseCheckoutService(config=Config(), clock=lambda: now)

    lines = service.checkout(account, lic).splitlines()

    assert lines[0] == HEADER.strip()
    assert lines[-1] == FOOTER.strip()
    assert all(len(line) <= 60 for line in lines[1:-1])  # noqa: PLR2004
    assert len(lines) > 3  # noqa: PLR2004


class TestInvalidRequests:
    def test_account_is_nil(self, service, lic) -> None:
        with pytest.raises(InvalidAccountError):
            service.checkout(None, lic)

    def test_license_is_nil(self, service, account) -> None:
        with pytest.raises(InvalidLicenseError):
            service.checkout(account, None)

    def test_include_is_invalid(self, service, account, lic) -> None:
        with pytest.raises(InvalidIncludeError, match="account"):
            service.checkout(account, lic, include=["account"])

    def test_ttl_is_too_short(self, service, account, lic) -> None:
        with pytest.raises(InvalidTTLError):
            service.checkout(account, lic, ttl=timedelta(minutes=1))

    def test_unknown_scheme(self, service, account, license_factory) -> None:
        with pytest.raises(InvalidLicenseError, match="Unknown signing scheme"):
            service.checkout(account, license_factory(scheme="DSA_1024_SIGN"))

    def test_ttl_expires_out_of_range(self, service, account, lic) -> None:
        with pytest.raises(InvalidTTLError):
            service.checkout(account, lic, ttl=timedelta(days=365 * 9000))

    @pytest.mark.parametrize("scheme", [256, 1.5, ["ED25519_SIGN"]])
    def test_scheme_is_not_a_name(self, service, account, license_factory, scheme) -> None:
        with pytest.raises(InvalidLicenseError, match="Unknown signing scheme"):
            service.checkout(account, license_factory(scheme=scheme))

    def test_account_missing_scheme_key(self, service, ed25519_key, license_factory) -> None:
        account = Account(id="acct-2", identity=SigningIdentity(ed25519_private_key=ed25519_key))
        with pytest.raises(InvalidAccountError, match="RSA_PKCS1_SIGN"):
            service.checkout(account, license_factory(scheme="RSA_2048_PKCS1_SIGN"))

    def test_encrypt_without_license_key(self, service, account, license_factory) -> None:
        with pytest.raises(InvalidLicenseError):
            service.checkout(account, license_factory(key=None), encrypt=True)

    def test_validation_happens_before_signing(self, account, lic, now) -> None:
        class Renderer:
            allowed_includes = frozenset({"product"})

            def render(self, lic, include):
                raise AssertionError("render must not be reached")

        service = LicenseCheckoutService(renderer=Renderer(), clock=lambda: now)
        with pytest.raises(InvalidTTLError):
            service.checkout(account, lic, ttl=60)
        with pytest.raises(InvalidIncludeError):
            service.checkout(account, lic, include=["policy"])


ED25519_SCHEMES = [None, "ED25519_SIGN"]
PSS_SCHEMES = ["RSA_2048_PKCS1_PSS_SIGN_V2", "RSA_2048_PKCS1_PSS_SIGN"]
PKCS1_SCHEMES = [
    "RSA_2048_PKCS1_SIGN_V2",
    "RSA_2048_PKCS1_SIGN",
    "RSA_2048_PKCS1_ENCRYPT",
    "RSA_2048_JWT_RS256",
]


@pytest.mark.parametrize("scheme", ED25519_SCHEMES)
@pytest.mark.parametrize(
    ("encrypt", "alg"), [(False, "base64+ed25519"), (True, "aes-256-cbc+ed25519")]
)
def test_ed25519_schemes(service, account, license_factory, ed25519_key, scheme, encrypt, alg) -> None:
    cert = unarmor(service.checkout(account, license_factory(scheme=scheme), encrypt=encrypt))

    assert cert["alg"] == alg
    ed25519_key.public_key().verify(
        base64.b64decode(cert["sig"], validate=True), f"license/{cert['enc']}".encode()
    )


@pytest.mark.parametrize("scheme", PSS_SCHEMES)
@pytest.mark.parametrize(
    ("encrypt", "alg"),
    [(False, "base64+rsa-pss-sha256"), (True, "aes-256-cbc+rsa-pss-sha256")],
)
def test_rsa_pss_schemes(service, account, license_factory, rsa_key, scheme, encrypt, alg) -> None:
    cert = unarmor(service.checkout(account, license_factory(scheme=scheme), encrypt=encrypt))

    assert cert["alg"] == alg
    rsa_key.public_key().verify(
        base64.b64decode(cert["sig"], validate=True),
        f"license/{cert['enc']}".encode(),
        asym_padding.PSS(
            mgf=asym_padding.MGF1(hashes.SHA256()), salt_length=asym_padding.PSS.AUTO
        ),
        hashes.SHA256(),
    )


@pytest.mark.parametrize("scheme", PKCS1_SCHEMES)
@pytest.mark.parametrize(
    ("encrypt", "alg"), [(False, "base64+rsa-sha256"), (True, "aes-256-cbc+rsa-sha256")]
)
def test_rsa_pkcs1_schemes(service, account, license_factory, rsa_key, scheme, encrypt, alg) -> None:
    cert = unarmor(service.checkout(account, license_factory(scheme=scheme), encrypt=encrypt))

    assert cert["alg"] == alg
    rsa_key.public_key().verify(
        base64.b64decode(cert["sig"], validate=True),
        f"license/{cert['enc']}".encode(),
        asym_padding.PKCS1v15(),
        hashes.SHA256(),
    )


def test_unconfigured_scheme_matches_ed25519(account, license_factory, now) -> None:
    service = LicenseCheckoutService(clock=lambda: now)
    default = service.checkout(account, license_factory(scheme=None))
    ed25519 = service.checkout(account, license_factory(scheme="ED25519_SIGN"))

    # Ed25519 signatures are deterministic
    assert default == ed25519


@pytest.mark.parametrize("scheme", [None, "NONE"])
@pytest.mark.parametrize(("encrypt", "alg"), [(False, "base64+ed25519"), (True, "aes-256-cbc+ed25519")])
def test_unconfigured_scheme_ignores_environment(monkeypatch, account, license_factory, now, scheme, encrypt, alg) -> None:
    monkeypatch.setenv("LICFILE_DEFAULT_SCHEME", "RSA_2048_PKCS1_PSS_SIGN")
    service = LicenseCheckoutService(config=Config(), clock=lambda: now)
    assert unarmor(service.checkout(account, license_factory(scheme=scheme), encrypt=encrypt))["alg"] == alg


def test_returns_encrypted_license(service, account, lic) -> None:
    cert = service.checkout(account, lic, encrypt=True)
    data = decrypt_enc(cert, lic.key)

    assert isinstance(data["meta"]["iat"], str)
    assert isinstance(data["meta"]["exp"], str)
    assert isinstance(data["meta"]["ttl"], int)
    assert data["data"]["type"] == "licenses"
    assert data["data"]["id"] == lic.id


def test_encryption_uses_injected_random_source(account, lic, now) -> None:
    service = LicenseCheckoutService(clock=lambda: now, random_bytes=lambda size: b"\x07" * size)
    first = service.checkout(account, lic, encrypt=True)
    second = service.checkout(account, lic, encrypt=True)

    assert first == second
    assert unarmor(first)["enc"].split(".")[1] == base64.b64encode(b"\x07" * 16).decode()


class TestIncludes:
    def test_empty_include_omits_included(self, service, account, lic) -> None:
        data = decode_enc(service.checkout(account, lic, include=[]))

        assert "included" not in data
        assert data["data"]["id"] == lic.id

    def test_includes_relationships(self, service, account, lic, product, policy) -> None:
        data = decode_enc(service.checkout(account, lic, include=["product", "policy"]))

        assert [(r["type"], r["id"]) for r in data["included"]] == [
            ("products", product.id),
            ("policies", policy.id),
        ]
        assert data["included"][0]["attributes"] == {"name": "Widget"}

    def test_include_with_no_related_resource(self, service, account, lic) -> None:
        data = decode_enc(service.checkout(account, lic, include=["user"]))
        assert "included" not in data


class TestTTL:
    def test_default_ttl(self, service, account, lic) -> None:
        meta = decode_enc(service.checkout(account, lic))["meta"]

        assert meta["iat"] == "2026-10-19T12:00:00.000Z"
        assert meta["exp"] == "2026-11-18T22:29:06.000Z"
        assert meta["ttl"] == 2629746  # noqa: PLR2004

    def test_custom_ttl(self, service, account, lic) -> None:
        meta = decode_enc(service.checkout(account, lic, ttl=timedelta(weeks=1)))["meta"]

        assert meta["iat"] == "2026-10-19T12:00:00.000Z"
        assert meta["exp"] == "2026-10-26T12:00:00.000Z"
        assert meta["ttl"] == 604800  # noqa: PLR2004

    def test_no_ttl(self, service, account, lic) -> None:
        meta = decode_enc(service.checkout(account, lic, ttl=None))["meta"]

        assert meta["iat"] == "2026-10-19T12:00:00.000Z"
        assert meta["exp"] is None
        assert meta["ttl"] is None
