"""
Polynomial Ring Operations
Implements negacyclic arithmetic in R_q = Z_q[X]/(X^N + 1), together with the
exact-integer and matrix-row forms the audit circuit checks against.
"""

import secrets

import numpy as np


def mod_pow(base, exponent, modulus):
    """Binary exponentiation: base^exponent mod modulus."""
    if modulus <= 0:
        raise ValueError("modulus must be positive")
    if exponent < 0:
        raise ValueError("exponent must be non-negative")
    result = 1 % modulus
    base %= modulus
    while exponent > 0:
        if exponent & 1:
            result = (result * base) % modulus
        exponent >>= 1
        base = (base * base) % modulus
    return result


def centered_mod(value, modulus):
    """Reduce into [0, modulus), then shift into (-modulus/2, modulus/2]."""
    value %= modulus
    if value > modulus // 2:
        value -= modulus
    return value


def _big(values, n):
    # Object dtype keeps Python ints, so nothing overflows before reduction
    arr = np.asarray(values, dtype=object)
    if arr.shape != (n,):
        raise ValueError(f"expected {n} coefficients, got shape {arr.shape}")
    return arr


def negacyclic_mul_int(a, b, n):
    """Negacyclic product over the integers (no modular reduction).

    Terms of degree >= n wrap to degree - n with a sign flip (X^n = -1).
    """
    conv = np.convolve(_big(a, n), _big(b, n))
    result = conv[:n].copy()
    result[:n - 1] -= conv[n:]
    return result


def negacyclic_mul_mod_q(a, b, n, q):
    """Negacyclic product in Z_q[X]/(X^n + 1), coefficients in [0, q)."""
    a_big = _big(a, n) % q
    b_big = _big(b, n) % q
    return (negacyclic_mul_int(a_big, b_big, n) % q).astype(np.int64)


def negacyclic_matrix_row_mod_q(poly, k, n, q):
    """Row k of the negacyclic matrix of poly, coefficients mod q.

    row[j] = poly[k-j] if k-j >= 0 else (-poly[k-j+n]) % q, so that
    inner_product(row, x) % q == negacyclic_mul_mod_q(poly, x, n, q)[k].
    """
    if not 0 <= k < n:
        raise IndexError(f"row {k} out of range for n={n}")
    coeffs = (_big(poly, n) % q).astype(np.int64)
    j = np.arange(n)
    src = coeffs[(k - j) % n]
    return np.where(j <= k, src, (-src) % q)


def negacyclic_matrix_rows_mod_q(poly, count, n, q):
    """First `count` rows of the negacyclic matrix, as a (count, n) array."""
    if not 0 <= count <= n:
        raise ValueError(f"row count {count} out of range for n={n}")
    coeffs = (_big(poly, n) % q).astype(np.int64)
    k = np.arange(count)[:, None]
    j = np.arange(n)[None, :]
    src = coeffs[(k - j) % n]
    return np.where(j <= k, src, (-src) % q)


def inner_product(row, x):
    """Exact integer inner product."""
    return int(np.dot(np.asarray(row, dtype=object), np.asarray(x, dtype=object)))


class PolynomialRing:
    def __init__(self, N, q):
        self.N = N
        self.q = q
        if N <= 0 or N & (N - 1) != 0:
            raise ValueError("N must be a power of 2")
        if q <= 1 or q.bit_length() > 62:
            raise ValueError("q must fit in a signed 64-bit coefficient")

    def reduce(self, a):
        return (_big(a, self.N) % self.q).astype(np.int64)

    def add(self, a, b):
        return (a + b) % self.q

    def neg(self, a):
        return (-a) % self.q

    def mul(self, a, b):
        return negacyclic_mul_mod_q(a, b, self.N, self.q)

    def mul_int(self, a, b):
        return negacyclic_mul_int(a, b, self.N)

    def matrix_row(self, poly, k):
        return negacyclic_matrix_row_mod_q(poly, k, self.N, self.q)

    def matrix_rows(self, poly, count=None):
        if count is None:
            count = self.N
        return negacyclic_matrix_rows_mod_q(poly, count, self.N, self.q)

    def one(self):
        unit = np.zeros(self.N, dtype=np.int64)
        unit[0] = 1
        return unit

    def mod_center(self, a):
        result = np.asarray(a, dtype=object) % self.q
        half_q = self.q // 2
        mask = result > half_q
        result[mask] -= self.q
        return result

    def random_uniform(self, rng=None):
        if rng is None:
            return np.array([secrets.randbelow(self.q) for _ in range(self.N)], dtype=np.int64)
        return np.array([rng.randrange(self.q) for _ in range(self.N)], dtype=np.int64)

    def random_bounded(self, bound, size=None, rng=None):
        """Small signed values in [-bound, bound].

        Without an rng, one CSPRNG byte is drawn per value and reduced mod
        (2 * bound + 1); the slight bias toward low residues is kept.
        """
        if size is None:
            size = self.N
        if not 0 <= bound <= 127:
            raise ValueError("bound must be in [0, 127]")
        if rng is not None:
            return np.array([rng.randint(-bound, bound) for _ in range(size)], dtype=np.int64)
        raw = np.frombuffer(secrets.token_bytes(size), dtype=np.uint8).astype(np.int64)
        return raw % (2 * bound + 1) - bound
