"""
openid_association/errors.py - Exception hierarchy.

Every failure in this package is fatal to the operation that raised it
and propagates to the caller unchanged. All errors are ValueErrors so
callers that already treat bad input as ValueError keep working.
"""


class AssociationError(ValueError):
    """Base class for all openid_association errors."""


class FormatError(AssociationError):
    """Input does not match the expected KV or association layout."""


class VersionError(FormatError):
    """Serialized association carries an unsupported version tag."""


class EncodingError(AssociationError):
    """A key or value cannot be represented losslessly in KV form."""


class MissingFieldError(AssociationError):
    """A required message field (``signed``, ``sig``) is absent."""


class UnsupportedAlgorithmError(AssociationError):
    """The association type has no known signing algorithm."""


class InvalidCapabilityError(AssociationError):
    """An (assoc_type, session_type) pair outside the valid combinations."""
