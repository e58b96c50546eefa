"""
openid_association/message.py - Namespaced protocol message arguments.

A Message is the argument store a signature is computed over: values
keyed by (namespace URI, key). Only the OpenID 2.0 namespace has a wire
prefix here (``openid.``); other namespaces are reachable through
get_arg/set_arg but are not mapped to flat arguments.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Tuple

OPENID2_NS = "http://specs.openid.net/auth/2.0"
OPENID_NS = OPENID2_NS

_OPENID_PREFIX = "openid."


class Message:
    """Mutable map of (namespace, key) → value."""

    def __init__(self, args: Optional[Mapping[Tuple[str, str], Any]] = None) -> None:
        self._args: Dict[Tuple[str, str], Any] = dict(args or {})

    @classmethod
    def from_openid_args(cls, openid_args: Mapping[str, Any]) -> "Message":
        """Build from flat OpenID arguments (``{"openid.mode": ...}``).

        Arguments without the ``openid.`` prefix are ignored.
        """
        msg = cls()
        for name, value in openid_args.items():
            if name.startswith(_OPENID_PREFIX):
                msg.set_arg(OPENID_NS, name[len(_OPENID_PREFIX):], value)
        return msg

    def to_openid_args(self) -> Dict[str, Any]:
        """Flat ``openid.``-prefixed arguments for the OpenID namespace."""
        return {
            _OPENID_PREFIX + key: value
            for key, value in self.get_args(OPENID_NS).items()
        }

    # ------------------------------------------------------------------
    # Argument access
    # ------------------------------------------------------------------

    def get_arg(self, namespace: str, key: str, default: Any = None) -> Any:
        return self._args.get((namespace, key), default)

    def get_args(self, namespace: str) -> Dict[str, Any]:
        """All arguments in one namespace, in insertion order."""
        return {k: v for (ns, k), v in self._args.items() if ns == namespace}

    def set_arg(self, namespace: str, key: str, value: Any) -> None:
        self._args[(namespace, key)] = value

    def del_arg(self, namespace: str, key: str) -> None:
        del self._args[(namespace, key)]

    def has_key(self, namespace: str, key: str) -> bool:
        return (namespace, key) in self._args

    def copy(self) -> "Message":
        return Message(self._args)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Message):
            return NotImplemented
        return self._args == other._args

    def __repr__(self) -> str:
        return f"<Message {self._args!r}>"
