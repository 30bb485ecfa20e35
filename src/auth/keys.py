"""PEM private key parsing for JWT signing."""

from __future__ import annotations

import base64
import binascii
import re
from pathlib import Path

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from auth.errors import KeyFormatError, KeyTypeError

_PEM_BLOCK = re.compile(
    r"-----BEGIN (?P<label>[A-Z0-9 ]+)-----(?P<body>.*?)-----END (?P=label)-----",
    re.DOTALL,
)

# PKCS#1, then PKCS#8.
_CONTAINERS = ("RSA PRIVATE KEY", "PRIVATE KEY")


def _armour(label: str, der: bytes) -> bytes:
    encoded = base64.b64encode(der).decode("ascii")
    body = "\n".join(encoded[i : i + 64] for i in range(0, len(encoded), 64))
    return f"-----BEGIN {label}-----\n{body}\n-----END {label}-----\n".encode("ascii")


def decode_pem_block(pem: str) -> tuple[str, bytes]:
    """Return the label and DER payload of the first PEM block in ``pem``.

    Raises:
        KeyFormatError: if no well-formed block is present.
    """

    match = _PEM_BLOCK.search(pem or "")
    if match is None:
        raise KeyFormatError("failed to decode PEM block")

    body = "".join(match.group("body").split())
    try:
        der = base64.b64decode(body, validate=True)
    except binascii.Error as exc:
        raise KeyFormatError("failed to decode PEM block") from exc
    if not der:
        raise KeyFormatError("failed to decode PEM block")
    return match.group("label"), der


def parse_private_key(pem: str) -> rsa.RSAPrivateKey:
    """Parse a PEM encoded RSA private key (PKCS#1 or PKCS#8).

    The block label is not trusted: the DER payload is read as PKCS#1 first and
    as PKCS#8 second, so mislabelled keys exported by some consoles still load.

    Raises:
        KeyFormatError: if the text holds no PEM block or the payload is unparseable.
        KeyTypeError: if the payload is a valid key of another algorithm.
    """

    _, der = decode_pem_block(pem)

    key = None
    last_error: Exception | None = None
    for container in _CONTAINERS:
        try:
            key = serialization.load_pem_private_key(_armour(container, der), password=None)
        except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
            last_error = exc
            continue
        break

    if key is None:
        raise KeyFormatError(f"failed to parse private key: {last_error}") from last_error
    if not isinstance(key, rsa.RSAPrivateKey):
        raise KeyTypeError("not an RSA private key")
    return key


def load_private_key_file(path: Path | str) -> rsa.RSAPrivateKey:
    key_path = Path(path)
    if not key_path.exists():
        raise KeyFormatError(f"Private key file not found: {key_path}")
    return parse_private_key(key_path.read_text(encoding="utf-8"))
