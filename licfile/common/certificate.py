"""
Armored certificate encoding.
"""

from __future__ import annotations

import binascii
import json

from pydantic import ValidationError

from licfile.common.crypto import CryptoUtils
from licfile.common.exceptions import MalformedCertificateError
from licfile.common.models import Certificate

ARMOR_HEADER = "-----BEGIN LICENSE FILE-----"
ARMOR_FOOTER = "-----END LICENSE FILE-----"


def encode_certificate(cert: Certificate, line_width: int | None = None) -> str:
    """Serialize a certificate into armored license file text."""
    blob = CryptoUtils.b64encode(json.dumps(cert.model_dump()).encode())
    if line_width:
        lines = [blob[i : i + line_width] for i in range(0, len(blob), line_width)]
    else:
        lines = [blob]
    return "".join(f"{line}\n" for line in (ARMOR_HEADER, *lines, ARMOR_FOOTER))


def decode_certificate(text: str) -> Certificate:
    """Strip armor and parse the inner ``{enc, sig, alg}`` object."""
    text = text.strip()
    if not text.startswith(ARMOR_HEADER) or not text.endswith(ARMOR_FOOTER):
        msg = "License file is missing its armor header or footer"
        raise MalformedCertificateError(msg)

    blob = "".join(text[len(ARMOR_HEADER) : -len(ARMOR_FOOTER)].split())
    if not blob:
        msg = "License file is empty"
        raise MalformedCertificateError(msg)

    try:
        raw = CryptoUtils.b64decode(blob)
    except (ValueError, binascii.Error) as err:
        msg = "License file is not valid base64"
        raise MalformedCertificateError(msg) from err

    try:
        return Certificate.model_validate_json(raw)
    except ValidationError as err:
        msg = "License file does not contain a valid certificate"
        raise MalformedCertificateError(msg) from err
