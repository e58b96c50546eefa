#!/usr/bin/env python3
"""
Association Handshake Demo

Walks through one relying party / provider exchange using the
openid_association primitives:

  1. Relying party picks an (assoc_type, session_type) pair
  2. Provider checks it against its own catalog and issues an association
  3. Both sides store the association in its serialized form
  4. Provider signs a positive assertion
  5. Relying party verifies it, then a tampered copy

The shared secret is simply generated here; a real deployment would
carry it with Diffie-Hellman (DH-SHA1 / DH-SHA256) or over TLS.

Run:
    python examples/demo_handshake.py
"""

import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from openid_association import (
    OPENID_NS,
    Association,
    Message,
    default_negotiator,
    encrypted_negotiator,
    generate_secret,
)


def main():
    print("=" * 72)
    print("  Association Handshake Demo")
    print("=" * 72)

    # --- 1. Negotiation ---
    rp = default_negotiator()
    provider = encrypted_negotiator()

    assoc_type, session_type = rp.get_allowed_type()
    print(f"\n  RP prefers:         {assoc_type.value} / {session_type.value}")
    if not provider.is_allowed(assoc_type, session_type):
        print("  Provider refuses; no association.")
        return
    print("  Provider accepts.")

    # --- 2. Issue ---
    secret = generate_secret(assoc_type)
    handle = f"{{{assoc_type.value}}}{{{secret[:4].hex()}}}"
    assoc = Association.from_expires_in(14 * 24 * 3600, handle, secret, assoc_type)
    print(f"  Handle:             {assoc.handle}")
    print(f"  Expires in:         {assoc.expires_in():.0f}s")

    # --- 3. Store ---
    blob = assoc.serialize()
    print("\n  Serialized:")
    for line in blob.decode("utf-8").splitlines():
        print(f"    {line}")
    rp_copy = Association.deserialize(blob)

    # --- 4. Sign ---
    assertion = Message.from_openid_args({
        "openid.ns": OPENID_NS,
        "openid.mode": "id_res",
        "openid.claimed_id": "https://example.com/user/zoe",
        "openid.return_to": "https://rp.example.org/return",
    })
    signed = assoc.sign_message(assertion)
    print(f"\n  Signed fields:      {signed.get_arg(OPENID_NS, 'signed')}")
    print(f"  sig:                {signed.get_arg(OPENID_NS, 'sig')}")

    # --- 5. Verify ---
    print(f"\n  RP check:           {rp_copy.check_message_signature(signed)}")
    tampered = signed.copy()
    tampered.set_arg(OPENID_NS, "claimed_id", "https://example.com/user/mallory")
    print(f"  Tampered check:     {rp_copy.check_message_signature(tampered)}")
    print("=" * 72)


if __name__ == "__main__":
    main()
