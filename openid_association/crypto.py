"""
openid_association/crypto.py - Cryptographic primitives for associations.

Uses Python `cryptography` library exclusively for MAC computation.
- HMAC-SHA1 / HMAC-SHA256 for message signatures
- Constant-time comparison for signature checks
- Base64 for secrets and signatures on the wire

All functions except random_bytes() are deterministic and have no
side effects.
"""

from __future__ import annotations

import base64
import binascii
import os

from cryptography.hazmat.primitives import constant_time, hashes, hmac

from .errors import FormatError


# ---------------------------------------------------------------------------
# HMAC
# ---------------------------------------------------------------------------

def _hmac(algorithm: hashes.HashAlgorithm, key: bytes, data: bytes) -> bytes:
    h = hmac.HMAC(key, algorithm)
    h.update(data)
    return h.finalize()


def hmac_sha1(key: bytes, data: bytes) -> bytes:
    """Raw 20-byte HMAC-SHA1 digest."""
    return _hmac(hashes.SHA1(), key, data)


def hmac_sha256(key: bytes, data: bytes) -> bytes:
    """Raw 32-byte HMAC-SHA256 digest."""
    return _hmac(hashes.SHA256(), key, data)


def const_eq(a: bytes, b: bytes) -> bool:
    """Compare two byte strings in time independent of their contents."""
    return constant_time.bytes_eq(a, b)


# ---------------------------------------------------------------------------
# Secrets
# ---------------------------------------------------------------------------

def random_bytes(n: int) -> bytes:
    """n bytes from the OS CSPRNG."""
    return os.urandom(n)


# ---------------------------------------------------------------------------
# Base64
# ---------------------------------------------------------------------------

def to_base64(data: bytes) -> str:
    """Standard base64 (with padding) as an ASCII str."""
    return base64.b64encode(data).decode("ascii")


def from_base64(text: str | bytes) -> bytes:
    """Strictly decode standard base64.

    Raises:
        FormatError: If the input contains characters outside the base64
                     alphabet or has bad padding.
    """
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as e:
        raise FormatError(f"Malformed base64 data: {text!r}") from e
