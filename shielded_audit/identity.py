"""
Auditable identity: embedded-curve keypairs and hash commitments.

The embedded curve is BN254's short-Weierstrass companion
y^2 = x^3 - 17 over the BN254 scalar field, so a public key's coordinates are
native field elements of the commitment scheme.
"""

from typing import NamedTuple, Optional

from .custom_rlwe.polynomial import mod_pow
from .errors import KeyMaterialError
from .hashing import FieldHasher, default_hasher
from .params import BN254_P

CURVE_B = (-17) % BN254_P
GENERATOR_X = 1
GENERATOR_Y = 17631683881184975370165255887551781615748388533673675138860

# Noir's EmbeddedCurveScalar takes lo/hi 128-bit limbs
MAX_SCALAR_BITS = 128


class CurvePoint(NamedTuple):
    x: int
    y: int


GENERATOR = CurvePoint(GENERATOR_X, GENERATOR_Y)


class IdentityKeypair(NamedTuple):
    secret_key: int
    public_key: CurvePoint


def _inv(v):
    return mod_pow(v, BN254_P - 2, BN254_P)


def is_on_curve(point: Optional[CurvePoint]) -> bool:
    if point is None:
        return True
    x, y = point
    return (y * y - (x * x * x + CURVE_B)) % BN254_P == 0


def point_add(p1: Optional[CurvePoint], p2: Optional[CurvePoint]) -> Optional[CurvePoint]:
    """Affine addition; None is the point at infinity."""
    if p1 is None:
        return p2
    if p2 is None:
        return p1
    x1, y1 = p1
    x2, y2 = p2
    if x1 == x2:
        if (y1 + y2) % BN254_P == 0:
            return None
        lam = (3 * x1 * x1) * _inv(2 * y1) % BN254_P
    else:
        lam = (y2 - y1) * _inv(x2 - x1) % BN254_P
    x3 = (lam * lam - x1 - x2) % BN254_P
    y3 = (lam * (x1 - x3) - y1) % BN254_P
    return CurvePoint(x3, y3)


def scalar_mult(scalar: int, point: CurvePoint = GENERATOR) -> Optional[CurvePoint]:
    result = None
    addend = point
    while scalar > 0:
        if scalar & 1:
            result = point_add(result, addend)
        addend = point_add(addend, addend)
        scalar >>= 1
    return result


def generate_identity_keypair(seed: int) -> IdentityKeypair:
    """secret_key = seed mod 2^128, public_key = secret_key * G."""
    secret_key = seed % (1 << MAX_SCALAR_BITS)
    if secret_key == 0:
        raise KeyMaterialError("secret key reduces to zero")
    public_key = scalar_mult(secret_key)
    return IdentityKeypair(secret_key, public_key)


def identity_commitment(public_key: CurvePoint, hasher: Optional[FieldHasher] = None) -> int:
    """wa_commitment = Hash(owner_x, owner_y)"""
    hasher = hasher or default_hasher()
    return hasher.hash([public_key.x, public_key.y])


def value_commitment(
    public_key: CurvePoint,
    amount: int,
    randomness: int,
    hasher: Optional[FieldHasher] = None,
) -> int:
    """commitment = Hash(owner_x, owner_y, amount, randomness)"""
    hasher = hasher or default_hasher()
    return hasher.hash([public_key.x, public_key.y, amount, randomness])


def nullifier(secret_key: int, leaf_index: int, hasher: Optional[FieldHasher] = None) -> int:
    """nullifier = Hash(secret_key, leaf_index)"""
    hasher = hasher or default_hasher()
    return hasher.hash([secret_key, leaf_index])
