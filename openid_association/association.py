"""
openid_association/association.py - Shared-secret associations

An Association is the shared secret between a relying party and an
OpenID provider, plus the metadata needed to use it: an opaque handle,
the time it was issued, how long it lives, and which HMAC algorithm it
signs with.

Associations are immutable. A renewed or re-keyed context is a new
Association, created either fresh (from_expires_in) or from its
serialized form (deserialize).

Serialized form (KV form, fixed field order, version 2):

    version:2
    handle:{HMAC-SHA1}{4a1b...}
    secret:<base64>
    issued:1700000000
    lifetime:1209600
    assoc_type:HMAC-SHA1

Signing pipeline: message → make_pairs() → seq_to_kv() → HMAC
"""

import re
import time
from datetime import datetime, timezone
from enum import Enum
from typing import List, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .crypto import (
    const_eq,
    from_base64,
    hmac_sha1,
    hmac_sha256,
    random_bytes,
    to_base64,
)
from .errors import (
    FormatError,
    MissingFieldError,
    UnsupportedAlgorithmError,
    VersionError,
)
from .kvform import kv_to_seq, seq_to_kv
from .logger import get_logger
from .message import OPENID_NS, Message

log = get_logger(__name__)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

SERIALIZATION_VERSION = "2"

FIELD_ORDER = ("version", "handle", "secret", "issued", "lifetime", "assoc_type")

_INTEGER_RE = re.compile(r"-?[0-9]+")


class AssociationType(str, Enum):
    """Signing algorithms an association may use."""
    HMAC_SHA1 = "HMAC-SHA1"
    HMAC_SHA256 = "HMAC-SHA256"


_SIGNERS = {
    AssociationType.HMAC_SHA1: hmac_sha1,
    AssociationType.HMAC_SHA256: hmac_sha256,
}

# Secret length equals the digest length of the association's hash.
SECRET_SIZES = {
    AssociationType.HMAC_SHA1: 20,
    AssociationType.HMAC_SHA256: 32,
}


def _to_assoc_type(value: Union[str, AssociationType]) -> AssociationType:
    try:
        return AssociationType(value)
    except ValueError:
        raise UnsupportedAlgorithmError(
            f"Association has unknown type: {value!r}"
        ) from None


def generate_secret(assoc_type: Union[str, AssociationType]) -> bytes:
    """Fresh random secret of the right length for assoc_type."""
    return random_bytes(SECRET_SIZES[_to_assoc_type(assoc_type)])


# ---------------------------------------------------------------------------
# Association
# ---------------------------------------------------------------------------

class Association(BaseModel):
    """Shared secret plus metadata for signing messages with one counterpart.

    assoc_type fixes the HMAC hash used by every signing operation on the
    instance. All fields are read-only.
    """

    model_config = ConfigDict(frozen=True)

    handle: str = Field(
        ...,
        description="Opaque identifier chosen by the issuing party.",
    )
    secret: bytes = Field(
        ...,
        repr=False,
        description="Raw shared secret. Base64 on the wire, never raw.",
    )
    issued: datetime = Field(
        ...,
        description="UTC time the association was created.",
    )
    lifetime: int = Field(
        ...,
        description="Seconds the association is valid after issued.",
    )
    assoc_type: AssociationType = Field(
        ...,
        description="Signing algorithm tag.",
    )

    @field_validator("issued")
    @classmethod
    def issued_is_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_expires_in(
        cls,
        expires_in: int,
        handle: str,
        secret: bytes,
        assoc_type: Union[str, AssociationType],
    ) -> "Association":
        """Create an association issued now that lives expires_in seconds."""
        return cls(
            handle=handle,
            secret=secret,
            issued=datetime.now(timezone.utc),
            lifetime=expires_in,
            assoc_type=_to_assoc_type(assoc_type),
        )

    @classmethod
    def deserialize(cls, serialized: Union[bytes, str]) -> "Association":
        """Load an association written by serialize().

        Raises:
            FormatError:  Fields missing, extra or out of order; bad base64
                          secret; non-numeric issued or lifetime.
            VersionError: Version tag other than "2".
            UnsupportedAlgorithmError: Unknown assoc_type.
        """
        pairs = kv_to_seq(serialized)
        keys = tuple(k for k, _ in pairs)
        if keys != FIELD_ORDER:
            log.debug("Rejecting serialized association with fields %r", keys)
            raise FormatError(
                f"Unexpected fields in serialized association "
                f"(expected {list(FIELD_ORDER)!r}, got {list(keys)!r})"
            )

        version, handle, secret64, issued_s, lifetime_s, assoc_type = (
            v for _, v in pairs
        )
        if version != SERIALIZATION_VERSION:
            log.debug("Rejecting serialized association version %r", version)
            raise VersionError(
                f"Attempted to deserialize unsupported version ({version!r})"
            )

        return cls(
            handle=handle,
            secret=from_base64(secret64),
            issued=_parse_timestamp(issued_s),
            lifetime=_parse_int("lifetime", lifetime_s),
            assoc_type=_to_assoc_type(assoc_type),
        )

    # ------------------------------------------------------------------
    # Serialization and expiry
    # ------------------------------------------------------------------

    def serialize(self) -> bytes:
        """Serialize to the KV form shared across OpenID libraries.

        Raises:
            EncodingError: If handle (or any other value) cannot be written
                           losslessly, e.g. it contains a newline.
        """
        data = {
            "version": SERIALIZATION_VERSION,
            "handle": self.handle,
            "secret": to_base64(self.secret),
            "issued": str(int(self.issued.timestamp())),
            "lifetime": str(int(self.lifetime)),
            "assoc_type": self.assoc_type.value,
        }

        pairs = [(field, data[field]) for field in FIELD_ORDER]
        return seq_to_kv(pairs, strict=True)

    def expires_in(self, now: Union[None, int, float, datetime] = None) -> float:
        """Seconds until this association expires; negative once expired.

        now may be None (current time), epoch seconds, or a datetime
        (naive datetimes are taken as UTC).

        Raises:
            TypeError: If now is none of those.
        """
        if now is None:
            now_ts = time.time()
        elif isinstance(now, (int, float)) and not isinstance(now, bool):
            now_ts = float(now)
        elif isinstance(now, datetime):
            if now.tzinfo is None:
                now = now.replace(tzinfo=timezone.utc)
            now_ts = now.timestamp()
        else:
            raise TypeError(
                f"now must be None, epoch seconds or a datetime, got {type(now).__name__}"
            )
        # Plain seconds: issued + lifetime may lie beyond datetime.max.
        return self.issued.timestamp() + self.lifetime - now_ts

    def is_expired(self, now: Union[None, int, float, datetime] = None) -> bool:
        return self.expires_in(now) <= 0

    # ------------------------------------------------------------------
    # Signing
    # ------------------------------------------------------------------

    def sign(self, pairs: List[Tuple[str, str]]) -> bytes:
        """Raw HMAC digest over the KV form of pairs.

        Raises:
            UnsupportedAlgorithmError: If assoc_type has no signer.
        """
        kv = seq_to_kv(pairs)
        try:
            signer = _SIGNERS[self.assoc_type]
        except KeyError:
            raise UnsupportedAlgorithmError(
                f"Association has unknown type: {self.assoc_type!r}"
            ) from None
        return signer(self.secret, kv)

    def make_pairs(self, message: Message) -> List[Tuple[str, str]]:
        """Pairs covered by the message's signed list, in signed-list order.

        A field named in the signed list but missing from the message
        contributes an empty value.

        Raises:
            MissingFieldError: If the message has no signed list.
        """
        signed = message.get_arg(OPENID_NS, "signed")
        if signed is None:
            raise MissingFieldError("Missing signed list")

        data = message.get_args(OPENID_NS)
        pairs = []
        for field in signed.split(","):
            value = data.get(field)
            pairs.append((field, "" if value is None else value))
        return pairs

    def get_message_signature(self, message: Message) -> bytes:
        return self.sign(self.make_pairs(message))

    def check_message_signature(self, message: Message) -> bool:
        """Whether the message's sig matches the one computed here.

        A bytes sig is compared raw. A str sig is the base64 wire form and
        must equal the canonical encoding exactly.

        Raises:
            MissingFieldError: If the message has no sig.
        """
        message_sig = message.get_arg(OPENID_NS, "sig")
        if message_sig is None:
            raise MissingFieldError(f"{message!r} has no sig.")

        calculated_sig = self.get_message_signature(message)
        if isinstance(message_sig, str):
            return const_eq(
                to_base64(calculated_sig).encode("ascii"),
                message_sig.encode("utf-8"),
            )
        return const_eq(calculated_sig, message_sig)

    def sign_message(self, message: Message) -> Message:
        """Return a signed copy of message.

        Every OpenID-namespace argument is signed, along with the
        assoc_handle and the signed list itself. The input is not modified.

        Raises:
            FormatError: If message already carries sig or signed, or names
                         a different assoc_handle.
        """
        if message.has_key(OPENID_NS, "sig") or message.has_key(OPENID_NS, "signed"):
            raise FormatError("Message already has signed list or signature")

        extant_handle = message.get_arg(OPENID_NS, "assoc_handle")
        if extant_handle and extant_handle != self.handle:
            raise FormatError("Message has a different association handle")

        signed_message = message.copy()
        signed_message.set_arg(OPENID_NS, "assoc_handle", self.handle)

        signed_list = sorted(list(signed_message.get_args(OPENID_NS)) + ["signed"])
        signed_message.set_arg(OPENID_NS, "signed", ",".join(signed_list))

        sig = self.get_message_signature(signed_message)
        signed_message.set_arg(OPENID_NS, "sig", to_base64(sig))
        return signed_message


def _parse_int(field: str, text: str) -> int:
    if not _INTEGER_RE.fullmatch(text):
        raise FormatError(f"Non-numeric {field} in serialized association: {text!r}")
    return int(text)


def _parse_timestamp(text: str) -> datetime:
    try:
        return datetime.fromtimestamp(_parse_int("issued", text), timezone.utc)
    except (OverflowError, OSError) as e:
        raise FormatError(f"issued out of range in serialized association: {text!r}") from e
