"""
openid_association - shared-secret associations for OpenID-style handshakes.

Wire representation, HMAC message signing and capability negotiation for
the secret a relying party and a provider share. How that secret is
acquired (Diffie-Hellman or otherwise) is up to the caller.
"""

__version__ = "0.1.0"

from .errors import (
    AssociationError,
    FormatError,
    VersionError,
    EncodingError,
    MissingFieldError,
    UnsupportedAlgorithmError,
    InvalidCapabilityError,
)
from .kvform import seq_to_kv, kv_to_seq, dict_to_kv, kv_to_dict
from .message import Message, OPENID_NS, OPENID2_NS
from .crypto import hmac_sha1, hmac_sha256, const_eq, to_base64, from_base64
from .association import (
    Association,
    AssociationType,
    FIELD_ORDER,
    SERIALIZATION_VERSION,
    SECRET_SIZES,
    generate_secret,
)
from .negotiator import (
    AssociationNegotiator,
    SessionType,
    DEFAULT_ALLOWED_TYPES,
    ENCRYPTED_ALLOWED_TYPES,
    default_negotiator,
    encrypted_negotiator,
)
from .logger import enable_json_logging, get_logger
