# backend/app/services/fingerprint.py
"""
Perceptual-hash fingerprint codec.

A fingerprint is a 64-bit difference hash: a 9x8 grayscale thumbnail gives
8 horizontal comparisons per row over 8 rows. Clients send it as 16 hex
characters; storage keeps the same bits in a signed BIGINT column.
"""
import re

from backend.app.core.errors import ValidationError

HASH_WIDTH = 9
HASH_HEIGHT = 8
HASH_BITS = 64
HEX_LENGTH = HASH_BITS // 4

_UINT64_MASK = (1 << HASH_BITS) - 1
_INT64_MIN = -(1 << (HASH_BITS - 1))
_INT64_MAX = (1 << (HASH_BITS - 1)) - 1

# int(x, 16) would also accept "0x", "+", "_" and surrounding whitespace
_HEX_RE = re.compile(r"[0-9a-fA-F]{%d}" % HEX_LENGTH)


def encode(fingerprint: str) -> int:
    """
    Reinterpret a 16-char hex fingerprint as a signed 64-bit integer.

    Hex digits are case-insensitive. Raises ValidationError for any other
    length or for non-hex characters.
    """
    if not isinstance(fingerprint, str) or len(fingerprint) != HEX_LENGTH:
        raise ValidationError(
            f"fingerprint must be exactly {HEX_LENGTH} hex characters ({HASH_BITS} bits)"
        )
    if not _HEX_RE.fullmatch(fingerprint):
        raise ValidationError(f"fingerprint {fingerprint!r} is not valid hexadecimal")

    unsigned = int(fingerprint, 16)
    if unsigned > _INT64_MAX:
        return unsigned - (1 << HASH_BITS)
    return unsigned


def decode(value: int) -> str:
    """Inverse of encode(); always returns lowercase hex."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError("fingerprint value must be an integer")
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise ValidationError("fingerprint value is outside the signed 64-bit range")
    return format(value & _UINT64_MASK, "0%dx" % HEX_LENGTH)
