"""
Roster hashing for ClubPass.

Member identity is stored as a one-way scrypt hash of the normalized
name and card number, salted with the club id:

    scrypt(lower(trim(name)) + trim(card_number), salt=club_id) -> hex

The scheme is deterministic, so verification recomputes the hash from the
submitted claim and compares it with the stored roster entries.
Parameters match the rosters already uploaded (N=2^14, r=8, p=1, 64 bytes);
changing any of them invalidates every existing roster.
"""

from typing import Dict

from cryptography.hazmat.primitives import constant_time
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

SCRYPT_N = 2 ** 14
SCRYPT_R = 8
SCRYPT_P = 1
MEMBER_HASH_LENGTH = 64  # bytes

# Trimmed from both fields, matching how existing roster blobs were written.
# Unlike str.strip(), U+FEFF is trimmed while \x1c-\x1f and U+0085 are kept.
TRIM_CHARACTERS = (
    "\t\n\x0b\x0c\r \xa0\u1680\u2000\u2001\u2002\u2003\u2004\u2005\u2006"
    "\u2007\u2008\u2009\u200a\u2028\u2029\u202f\u205f\u3000\ufeff"
)


def normalize_member_input(name: str, card_number: str) -> str:
    """
    Build the KDF input from a roster name and card number.

    Names match case-insensitively. The two parts are joined without a
    separator to stay compatible with existing roster blobs.
    """
    return f"{name.lower().strip(TRIM_CHARACTERS)}{card_number.strip(TRIM_CHARACTERS)}"


def derive_member_key(name: str, card_number: str, club_id: str) -> bytes:
    """Run scrypt over the normalized input with the club id as salt."""
    kdf = Scrypt(
        salt=club_id.encode('utf-8'),
        length=MEMBER_HASH_LENGTH,
        n=SCRYPT_N,
        r=SCRYPT_R,
        p=SCRYPT_P,
    )
    return kdf.derive(normalize_member_input(name, card_number).encode('utf-8'))


def hash_member_data(name: str, card_number: str, club_id: str) -> Dict[str, str]:
    """
    Hash one roster row.

    Returns:
        {"hash": "<128 hex chars>"}, the roster entry shape.
    """
    return {"hash": derive_member_key(name, card_number, club_id).hex()}


def hashes_match(candidate: bytes, stored_hex: str) -> bool:
    """
    Constant-time comparison of a freshly derived key with a stored hex hash.

    Entries that are not valid hex or whose length differs (older hashing
    revisions) never reach the comparator and simply don't match.
    """
    if not isinstance(stored_hex, str):
        return False
    try:
        stored = bytes.fromhex(stored_hex)
    except ValueError:
        return False

    if len(stored) != len(candidate):
        return False

    return constant_time.bytes_eq(stored, candidate)
