"""
openid_association/kvform.py - Key-Value Form encoding

OpenID's line-oriented KV form: an ordered sequence of (key, value)
string pairs, each written as ``key:value\\n`` and UTF-8 encoded.

    mode:error
    error:This is an example message

Keys may not contain ':' or '\\n' and values may not contain '\\n'; those
can never round-trip and are always rejected. Softer anomalies
(surrounding whitespace, non-string items, a missing final newline) are
errors in strict mode and logged warnings otherwise.

Reference: OpenID Authentication 2.0, Section 4.1.1
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterable, Mapping, Union

from .errors import EncodingError, FormatError
from .logger import get_logger

log = get_logger(__name__)

Pairs = list[tuple[str, str]]


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------

def seq_to_kv(seq: Iterable[tuple[Any, Any]], strict: bool = False) -> bytes:
    """Encode an ordered sequence of pairs to KV form bytes.

    Raises:
        EncodingError: If a key contains ':' or a newline, if a value
            contains a newline, or (strict only) if an item is not a
            string or has leading/trailing whitespace.
    """
    def err(msg: str) -> None:
        if strict:
            raise EncodingError(msg)
        log.warning("seq_to_kv: %s", msg)

    lines = []
    for k, v in seq:
        k = _coerce_text(k, "key", err)
        v = _coerce_text(v, "value", err)

        if "\n" in k:
            raise EncodingError(f"Key contains a newline: {k!r}")
        if ":" in k:
            raise EncodingError(f"Key contains a colon: {k!r}")
        if k.strip() != k:
            err(f"Key has whitespace at beginning or end: {k!r}")

        if "\n" in v:
            raise EncodingError(f"Value for key {k!r} contains a newline")
        if v.strip() != v:
            err(f"Value for key {k!r} has whitespace at beginning or end")

        lines.append(f"{k}:{v}\n")

    return "".join(lines).encode("utf-8")


def dict_to_kv(data: Mapping[str, Any], strict: bool = False) -> bytes:
    """Encode a mapping in key-sorted order."""
    return seq_to_kv(sorted(data.items()), strict=strict)


def _coerce_text(item: Any, what: str, err) -> str:
    if isinstance(item, Enum):
        item = item.value
    if isinstance(item, str):
        return item
    if isinstance(item, bytes):
        try:
            return item.decode("utf-8")
        except UnicodeDecodeError as e:
            raise EncodingError(f"{what} is not valid UTF-8: {item!r}") from e
    err(f"Converting {what} to string: {item!r}")
    return str(item)


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

def kv_to_seq(data: Union[bytes, str], strict: bool = False) -> Pairs:
    """Decode KV form into an ordered list of (key, value) pairs.

    Order and duplicates are preserved exactly as they appear.

    Raises:
        FormatError: If the input is not valid UTF-8, or (strict only) on
            a missing final newline, a line without ':', an empty key,
            or whitespace around a key or value.
    """
    def err(msg: str) -> None:
        if strict:
            raise FormatError(msg)
        log.warning("kv_to_seq: %s", msg)

    if isinstance(data, bytes):
        try:
            data = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise FormatError(f"KV data is not valid UTF-8: {e}") from e

    lines = data.split("\n")
    if lines[-1]:
        err("Does not end in a newline")
    else:
        del lines[-1]

    pairs: Pairs = []
    for line_num, line in enumerate(lines, start=1):
        if not line.strip():
            continue

        if ":" not in line:
            err(f"Line {line_num} does not contain a colon: {line!r}")
            continue

        k, v = line.split(":", 1)
        k_s = k.strip()
        if k_s != k:
            err(f"Key has whitespace in line {line_num}: {k!r}")
        if not k_s:
            err(f"Empty key in line {line_num}")

        v_s = v.strip()
        if v_s != v:
            err(f"Value has whitespace in line {line_num}: {v!r}")

        pairs.append((k_s, v_s))

    return pairs


def kv_to_dict(data: Union[bytes, str], strict: bool = False) -> dict[str, str]:
    """Decode KV form into a dict. Later duplicates win."""
    return dict(kv_to_seq(data, strict=strict))
