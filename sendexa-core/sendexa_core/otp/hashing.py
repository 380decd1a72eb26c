"""
Code Hashing
============
Only a digest of each code is stored. The digest is an HMAC-SHA256 keyed by
a per-issuance salt over the phone number and the code, so a stored record
cannot verify for any other phone.
"""

import hashlib
import hmac
import secrets

SALT_BYTES = 16


def new_salt() -> str:
    return secrets.token_hex(SALT_BYTES)


def hash_code(code: str, salt: str, phone: str) -> str:
    """Hex digest of ``code`` issued to ``phone`` under ``salt``."""
    message = f"{phone}\x00{code}".encode()
    return hmac.new(salt.encode(), message, hashlib.sha256).hexdigest()


def code_matches(code: str, salt: str, phone: str, code_hash: str) -> bool:
    # compare_digest keeps the comparison time independent of the input
    return hmac.compare_digest(hash_code(code, salt, phone), code_hash)
