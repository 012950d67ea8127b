"""
Tests for negacyclic ring arithmetic and the matrix-row form
"""

import random

import numpy as np
import pytest

from shielded_audit.custom_rlwe.polynomial import (
    PolynomialRing,
    centered_mod,
    inner_product,
    mod_pow,
    negacyclic_matrix_row_mod_q,
    negacyclic_matrix_rows_mod_q,
    negacyclic_mul_int,
    negacyclic_mul_mod_q,
)
from shielded_audit.params import N, RLWE_Q


@pytest.fixture(scope="module")
def ring():
    return PolynomialRing(N, RLWE_Q)


@pytest.fixture(scope="module")
def operands(ring):
    rng = random.Random(7)
    a = ring.random_uniform(rng)
    b = ring.random_uniform(rng)
    small = ring.random_bounded(3, rng=rng)
    return a, b, small


def test_mod_pow_matches_builtin():
    for base, exp, mod in [(3, 200, 1000003), (RLWE_Q - 1, RLWE_Q - 2, RLWE_Q), (5, 0, 7)]:
        assert mod_pow(base, exp, mod) == pow(base, exp, mod)
    assert mod_pow(10, 3, 1) == 0


def test_mod_pow_rejects_bad_arguments():
    with pytest.raises(ValueError):
        mod_pow(2, 3, 0)
    with pytest.raises(ValueError):
        mod_pow(2, -1, 7)


def test_centered_mod():
    assert centered_mod(3, 7) == 3
    assert centered_mod(4, 7) == -3
    assert centered_mod(-1, 10) == -1
    assert centered_mod(5, 10) == 5
    assert centered_mod(RLWE_Q - 2, RLWE_Q) == -2


def test_negacyclic_wraparound():
    """X^3 * X = X^4 = -1 in Z_17[X]/(X^4 + 1)"""
    a = [0, 0, 0, 1]
    b = [0, 1, 0, 0]
    assert list(negacyclic_mul_mod_q(a, b, 4, 17)) == [16, 0, 0, 0]
    assert list(negacyclic_mul_int(a, b, 4)) == [-1, 0, 0, 0]


def test_negacyclic_int_product_small():
    # (1 + 2X)(3 + 4X) = 3 + 10X + 8X^2 = -5 + 10X
    assert list(negacyclic_mul_int([1, 2], [3, 4], 2)) == [-5, 10]


def test_mul_commutative(ring, operands):
    a, b, _ = operands
    assert np.array_equal(ring.mul(a, b), ring.mul(b, a))


def test_mul_unit_identity(ring, operands):
    a, _, _ = operands
    assert np.array_equal(ring.mul(a, ring.one()), a % RLWE_Q)


def test_mul_int_reduces_to_mod_q(ring, operands):
    a, _, small = operands
    exact = ring.mul_int(a, small)
    reduced = ring.mul(a, ring.reduce(small))
    assert all(int(v) % RLWE_Q == int(w) for v, w in zip(exact, reduced))


def test_shape_mismatch_rejected():
    with pytest.raises(ValueError):
        negacyclic_mul_int([1, 2, 3], [1, 2], 2)


def test_matrix_row_matches_product_small():
    """Every row of a 16-dimensional ring, against a signed operand"""
    rng = random.Random(3)
    n, q = 16, 97
    poly = [rng.randrange(q) for _ in range(n)]
    x = [rng.randint(-3, 3) for _ in range(n)]
    product = negacyclic_mul_mod_q(poly, [v % q for v in x], n, q)
    for k in range(n):
        row = negacyclic_matrix_row_mod_q(poly, k, n, q)
        assert inner_product(row, x) % q == product[k]


def test_matrix_row_matches_product_full_ring(ring, operands):
    a, _, small = operands
    product = ring.mul(a, ring.reduce(small))
    for k in (0, 1, 63, 511, N - 1):
        assert inner_product(ring.matrix_row(a, k), small) % RLWE_Q == product[k]


def test_matrix_rows_stack_single_rows(ring, operands):
    a, _, _ = operands
    rows = ring.matrix_rows(a, 8)
    assert rows.shape == (8, N)
    for k in range(8):
        assert np.array_equal(rows[k], ring.matrix_row(a, k))
    assert ring.matrix_rows(a).shape == (N, N)


def test_matrix_row_bounds():
    with pytest.raises(IndexError):
        negacyclic_matrix_row_mod_q([1, 2, 3, 4], 4, 4, 17)
    with pytest.raises(ValueError):
        negacyclic_matrix_rows_mod_q([1, 2, 3, 4], 5, 4, 17)


def test_ring_rejects_bad_dimension():
    with pytest.raises(ValueError):
        PolynomialRing(1000, RLWE_Q)
    with pytest.raises(ValueError):
        PolynomialRing(16, 1 << 63)


def test_random_bounded_range(ring):
    csprng = ring.random_bounded(3)
    seeded = ring.random_bounded(3, size=64, rng=random.Random(1))
    assert csprng.shape == (N,)
    assert seeded.shape == (64,)
    for sample in (csprng, seeded):
        assert sample.min() >= -3
        assert sample.max() <= 3
    with pytest.raises(ValueError):
        ring.random_bounded(128)


def test_random_uniform_range(ring):
    sample = ring.random_uniform()
    assert sample.min() >= 0
    assert sample.max() < RLWE_Q
