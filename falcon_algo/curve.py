"""
Falcon Algorand SDK - edwards25519 membership oracle

Decides whether 32 bytes decode to a point on edwards25519, i.e. whether
they could be an ed25519 public key. Used only as a safety oracle.

Decoding follows the common (non-RFC-strict) rule: the top bit is the sign
of x, the remaining 255 bits are y reduced mod p, so non-canonical encodings
of valid points are accepted. A point exists iff x^2 = (y^2 - 1) / (d*y^2 + 1)
has a square root mod p.
"""

# Field prime 2^255 - 19
P = 2**255 - 19

# Curve constant d = -121665 / 121666
D = (-121665 * pow(121666, P - 2, P)) % P

ENCODED_POINT_SIZE = 32


def is_on_curve(encoded: bytes) -> bool:
    """
    Check whether encoded decodes to an edwards25519 point.

    Args:
        encoded: 32-byte point encoding

    Returns:
        True if a curve point with this encoding exists
    """
    if len(encoded) != ENCODED_POINT_SIZE:
        raise ValueError(f"point encoding must be {ENCODED_POINT_SIZE} bytes, got {len(encoded)}")

    y = (int.from_bytes(encoded, "little") & ((1 << 255) - 1)) % P
    yy = y * y % P
    u = (yy - 1) % P
    v = (D * yy + 1) % P

    x2 = u * pow(v, P - 2, P) % P
    if x2 == 0:
        return True
    # Euler's criterion
    return pow(x2, (P - 1) // 2, P) == 1
