"""
Shamir secret reconstruction + RLWE decryption.

Each ring position of the auditor secret key is shared independently over
BN254. Reconstruction interpolates every position at x = 0 and maps the field
value back to a signed coefficient mod q.

Decrypt: (c0 + s*c1) mod q = Delta*msg + noise
Recover: msg[i] = round(noisy[i] / Delta) mod t
"""

import logging
from typing import NamedTuple

import numpy as np

from ..errors import ShareSetError
from ..params import BN254_P, MSG_SLOTS, N, PLAINTEXT_MOD, RLWE_Q
from .ciphertext import Ciphertext
from .keys import SecretShare
from .polynomial import PolynomialRing, centered_mod, mod_pow
from .rlwe_scheme import FIELD_BYTES, decode_bytes_to_field

logger = logging.getLogger(__name__)


class RecoveredIdentity(NamedTuple):
    owner_x: int
    owner_y: int


def lagrange_weights_at_zero(xs, prime=BN254_P):
    """Weights w_i with f(0) = sum(w_i * y_i) for the given x-coordinates."""
    if len(set(x % prime for x in xs)) != len(xs):
        raise ShareSetError("degenerate share set: duplicate x-coordinates")
    weights = []
    for i, xi in enumerate(xs):
        num = 1
        den = 1
        for j, xj in enumerate(xs):
            if i != j:
                num = (num * -xj) % prime
                den = (den * (xi - xj)) % prime
        weights.append(num * mod_pow(den, prime - 2, prime) % prime)
    return weights


def lagrange_interpolate_at_zero(points, prime=BN254_P):
    """Lagrange interpolation at x=0 to recover a shared field element."""
    weights = lagrange_weights_at_zero([x for x, _ in points], prime)
    return sum(w * y for w, (_, y) in zip(weights, points)) % prime


def _round_div(numerator, denominator):
    # round half away from zero
    magnitude = (2 * abs(numerator) + denominator) // (2 * denominator)
    return magnitude if numerator >= 0 else -magnitude


def _check_share_set(shares, n):
    if not shares:
        raise ShareSetError("insufficient shares: none supplied")
    threshold = shares[0].threshold
    if any(s.threshold != threshold for s in shares):
        raise ShareSetError("shares disagree on threshold")
    if len(shares) < threshold:
        raise ShareSetError(
            f"insufficient shares: {len(shares)} supplied, threshold is {threshold}"
        )
    for s in shares:
        if len(s.points) != n:
            raise ShareSetError(
                f"share {s.share_index} covers {len(s.points)} positions, expected {n}"
            )
    return threshold


def reconstruct_secret_key(shares, n=N, q=RLWE_Q, prime=BN254_P):
    """Secret ring (coefficients in [0, q)) from at least `threshold` shares."""
    shares = list(shares)
    threshold = _check_share_set(shares, n)

    weight_cache = {}
    secret = np.zeros(n, dtype=np.int64)
    for pos in range(n):
        points = [s.points[pos] for s in shares]
        xs = tuple(x for x, _ in points)
        if len(set(xs)) != len(xs):
            raise ShareSetError(f"degenerate share set: duplicate x-coordinate at position {pos}")
        used = points[:threshold]
        key = xs[:threshold]
        weights = weight_cache.get(key)
        if weights is None:
            weights = lagrange_weights_at_zero(key, prime)
            weight_cache[key] = weights
        value = sum(w * y for w, (_, y) in zip(weights, used)) % prime
        # field -> signed -> mod q
        secret[pos] = centered_mod(value, prime) % q

    logger.info("Reconstructed secret ring from %d of %d shares", threshold, len(shares))
    return secret


def decrypt_identity(c0, c1, secret_ring, n=N, q=RLWE_Q, t=PLAINTEXT_MOD,
                     msg_slots=MSG_SLOTS):
    delta = q // t
    ring = PolynomialRing(n, q)
    sk_c1 = ring.mul(secret_ring, c1)

    msg_recovered = []
    for i in range(msg_slots):
        noisy = (int(c0[i]) + int(sk_c1[i])) % q
        noisy_centered = centered_mod(noisy, q)
        msg_recovered.append(_round_div(noisy_centered, delta) % t)

    owner_x = decode_bytes_to_field(msg_recovered[:FIELD_BYTES])
    owner_y = decode_bytes_to_field(msg_recovered[FIELD_BYTES:2 * FIELD_BYTES])
    return RecoveredIdentity(owner_x, owner_y)


class ThresholdDecryptor:
    def __init__(self, N=N, q=RLWE_Q, t=PLAINTEXT_MOD, msg_slots=MSG_SLOTS, prime=BN254_P):
        self.N = N
        self.q = q
        self.t = t
        self.msg_slots = msg_slots
        self.prime = prime

    def load_shares(self, artifacts):
        return [SecretShare.from_artifact(a, self.N) for a in artifacts]

    def reconstruct(self, shares):
        return reconstruct_secret_key(shares, self.N, self.q, self.prime)

    def decrypt(self, ciphertext, secret_ring):
        if isinstance(ciphertext, dict):
            ciphertext = Ciphertext.from_record(ciphertext, self.N, self.q, self.msg_slots)
        ciphertext.validate(self.N, self.q, self.msg_slots)
        c0, c1 = ciphertext.get_components()
        return decrypt_identity(c0, c1, secret_ring, self.N, self.q, self.t, self.msg_slots)

    def decrypt_from_shares(self, ciphertext, shares):
        """Full flow: reconstruct the secret ring, decrypt, drop the ring."""
        return self.decrypt(ciphertext, self.reconstruct(shares))
