#!/usr/bin/env python3
"""
End-to-end signing workflow for attest-keylib.

This script demonstrates:
1. Key generation for every key type
2. Key id derivation and the public-only key view
3. Signing and verification
4. Tamper detection
"""

from attest_keylib import generate_key, sign_data, verify_signature
from attest_keylib.errors import InvalidSignatureError


def main():
    print("=== attest-keylib workflow ===\n")
    payload = b'{"_type":"link","name":"package"}'

    for key_type, scheme in [
        ("rsa", "rsassa-pss-sha256"),
        ("ecdsa", "ecdsa-sha2-nistp384"),
        ("ed25519", "ed25519"),
    ]:
        print(f"{key_type} ({scheme})")

        # Step 1: Generate key
        key = generate_key(key_type, scheme)
        public = key.public_only()
        print(f"  ✓ Key generated, key id {key.key_id}")

        # Step 2: Sign
        signature = sign_data(key, payload)
        print(f"  ✓ Signed, {len(signature.sig) // 2} signature bytes")

        # Step 3: Verify with the public key only
        verify_signature(public, signature, payload)
        print("  ✓ Signature verified with public key")

        # Step 4: Tampered payload must fail
        try:
            verify_signature(public, signature, payload + b" ")
        except InvalidSignatureError as e:
            print(f"  ✓ Tampered payload rejected ({e})")
        else:
            raise SystemExit("tampered payload verified")
        print()


if __name__ == "__main__":
    main()
