"""
openid_association/negotiator.py - Association capability negotiation

Before an association exists, both parties agree on an
(assoc_type, session_type) pair: which HMAC algorithm the association
will sign with, and how its secret is carried (a Diffie-Hellman variant
or in the clear over TLS).

An AssociationNegotiator holds the ordered list of pairs one party will
accept. Order is the preference order: get_allowed_type() returns the
first pair. Duplicates are kept as given.

The two standard catalogs are immutable tuples. default_negotiator() and
encrypted_negotiator() hand out fresh mutable negotiators seeded from
them, so no caller can change what another sees.
"""

import copy
from enum import Enum
from typing import Iterable, List, Optional, Tuple, Union

from .association import AssociationType
from .errors import InvalidCapabilityError
from .logger import get_logger

log = get_logger(__name__)


class SessionType(str, Enum):
    """How the association secret is transmitted when it is established."""
    DH_SHA1 = "DH-SHA1"
    DH_SHA256 = "DH-SHA256"
    NO_ENCRYPTION = "no-encryption"


AllowedType = Tuple[AssociationType, SessionType]

_SESSION_TYPES = {
    AssociationType.HMAC_SHA1: (SessionType.DH_SHA1, SessionType.NO_ENCRYPTION),
    AssociationType.HMAC_SHA256: (SessionType.DH_SHA256, SessionType.NO_ENCRYPTION),
}


# ---------------------------------------------------------------------------
# Standard catalogs
# ---------------------------------------------------------------------------

DEFAULT_ALLOWED_TYPES: Tuple[AllowedType, ...] = (
    (AssociationType.HMAC_SHA1, SessionType.DH_SHA1),
    (AssociationType.HMAC_SHA1, SessionType.NO_ENCRYPTION),
    (AssociationType.HMAC_SHA256, SessionType.DH_SHA256),
    (AssociationType.HMAC_SHA256, SessionType.NO_ENCRYPTION),
)

# No unencrypted session types.
ENCRYPTED_ALLOWED_TYPES: Tuple[AllowedType, ...] = (
    (AssociationType.HMAC_SHA1, SessionType.DH_SHA1),
    (AssociationType.HMAC_SHA256, SessionType.DH_SHA256),
)


# ---------------------------------------------------------------------------
# Negotiator
# ---------------------------------------------------------------------------

class AssociationNegotiator:
    """Ordered set of acceptable (assoc_type, session_type) pairs.

    Args:
        allowed_types: Pairs in preference order. Every pair is validated
                       before any is accepted.

    Raises:
        InvalidCapabilityError: If any pair is not a valid combination.
    """

    def __init__(self, allowed_types: Iterable[Tuple[str, str]] = ()) -> None:
        self._allowed_types: List[AllowedType] = []
        self.allowed_types = allowed_types

    # ------------------------------------------------------------------
    # Valid combinations
    # ------------------------------------------------------------------

    @staticmethod
    def get_session_types(
        assoc_type: Union[str, AssociationType],
    ) -> Tuple[SessionType, ...]:
        """Session types that may carry a secret for assoc_type."""
        try:
            return _SESSION_TYPES[AssociationType(assoc_type)]
        except ValueError:
            raise InvalidCapabilityError(
                f"Unknown association type {assoc_type!r}"
            ) from None

    @staticmethod
    def check_session_type(
        assoc_type: Union[str, AssociationType],
        session_type: Union[str, SessionType],
    ) -> AllowedType:
        """Validate one pair and return it as enum values.

        Raises:
            InvalidCapabilityError: If session_type is not valid for
                                    assoc_type (or either is unknown).
        """
        session_types = AssociationNegotiator.get_session_types(assoc_type)
        if session_type not in session_types:
            log.debug("Rejecting pair (%r, %r)", assoc_type, session_type)
            raise InvalidCapabilityError(
                f"Session type {session_type!r} not valid for "
                f"association type {assoc_type!r}"
            )
        return AssociationType(assoc_type), SessionType(session_type)

    # ------------------------------------------------------------------
    # Allowed types
    # ------------------------------------------------------------------

    @property
    def allowed_types(self) -> List[AllowedType]:
        """Accepted pairs in preference order (copy)."""
        return list(self._allowed_types)

    @allowed_types.setter
    def allowed_types(self, allowed_types: Iterable[Tuple[str, str]]) -> None:
        # Validate everything before touching state: all or nothing.
        checked = [
            self.check_session_type(assoc_type, session_type)
            for assoc_type, session_type in allowed_types
        ]
        self._allowed_types = checked

    def add_allowed_type(
        self,
        assoc_type: Union[str, AssociationType],
        session_type: Union[None, str, SessionType] = None,
    ) -> None:
        """Append a pair, or every valid pair for assoc_type.

        No deduplication: re-adding a pair appends it again.
        """
        if session_type is None:
            session_types = self.get_session_types(assoc_type)
            assoc_type = AssociationType(assoc_type)
            self._allowed_types.extend((assoc_type, st) for st in session_types)
        else:
            self._allowed_types.append(
                self.check_session_type(assoc_type, session_type)
            )

    def is_allowed(
        self,
        assoc_type: Union[str, AssociationType],
        session_type: Union[str, SessionType],
    ) -> bool:
        """Whether this exact pair is acceptable."""
        return (assoc_type, session_type) in self._allowed_types

    def get_allowed_type(self) -> Optional[AllowedType]:
        """Most preferred pair, or None when nothing is allowed."""
        return self._allowed_types[0] if self._allowed_types else None

    def copy(self) -> "AssociationNegotiator":
        """Independent deep copy; changes to it never reach self."""
        return copy.deepcopy(self)

    def __repr__(self) -> str:
        pairs = [(a.value, s.value) for a, s in self._allowed_types]
        return f"<AssociationNegotiator {pairs!r}>"


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

def default_negotiator() -> AssociationNegotiator:
    """Fresh negotiator accepting both HMAC types, with or without DH."""
    return AssociationNegotiator(DEFAULT_ALLOWED_TYPES)


def encrypted_negotiator() -> AssociationNegotiator:
    """Fresh negotiator accepting only Diffie-Hellman session types."""
    return AssociationNegotiator(ENCRYPTED_ALLOWED_TYPES)
