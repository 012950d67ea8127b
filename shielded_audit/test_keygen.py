"""
Tests for auditor key generation and artifact output
"""

import json
import os
import random

import numpy as np
import pytest

from shielded_audit.custom_rlwe.keys import PublicKey, SecretShare
from shielded_audit.custom_rlwe.polynomial import PolynomialRing
from shielded_audit.custom_rlwe.threshold import lagrange_interpolate_at_zero
from shielded_audit.keygen import (
    generate_rlwe_keypair,
    main,
    shamir_share_field,
    write_key_artifacts,
)
from shielded_audit.params import BN254_P, N, RLWE_Q


def test_shamir_any_two_of_three():
    secret = 123456789
    shares = shamir_share_field(secret, 2, 3, random.Random(5))
    assert [x for x, _ in shares] == [1, 2, 3]
    for i in range(3):
        for j in range(i + 1, 3):
            assert lagrange_interpolate_at_zero([shares[i], shares[j]]) == secret


def test_shamir_negative_secret_maps_into_field():
    shares = shamir_share_field(-2, 2, 3, random.Random(6))
    assert lagrange_interpolate_at_zero(shares[:2]) == BN254_P - 2


def test_shamir_rejects_bad_threshold():
    with pytest.raises(ValueError):
        shamir_share_field(1, 4, 3)
    with pytest.raises(ValueError):
        shamir_share_field(1, 0, 3)


def test_public_key_relation(rlwe_keys):
    """b + a*s is a small error polynomial"""
    sk_signed, public_key, _ = rlwe_keys
    ring = PolynomialRing(N, RLWE_Q)
    b, a = public_key.get_components()
    error = ring.mod_center(ring.add(b, ring.mul(a, ring.reduce(sk_signed))))
    assert max(abs(int(v)) for v in error) <= 3
    assert sk_signed.min() >= -3
    assert sk_signed.max() <= 3


def test_keypair_is_reproducible_with_seed():
    sk1, pk1 = generate_rlwe_keypair(random.Random(11))
    sk2, pk2 = generate_rlwe_keypair(random.Random(11))
    assert np.array_equal(sk1, sk2)
    assert pk1 == pk2


def test_write_key_artifacts(tmp_path, rlwe_keys):
    _, public_key, shares = rlwe_keys
    pk_path, params_path, share_paths = write_key_artifacts(str(tmp_path), public_key, shares)

    with open(pk_path) as f:
        assert PublicKey.from_artifact(json.load(f)) == public_key
    with open(params_path) as f:
        params = json.load(f)
    assert params["N"] == N
    assert params["q"] == RLWE_Q
    assert params["threshold"] == 2
    assert [os.path.basename(p) for p in share_paths] == [
        "share_1.json", "share_2.json", "share_3.json"
    ]
    with open(share_paths[1]) as f:
        assert SecretShare.from_artifact(json.load(f)) == shares[1]


def test_main_writes_artifacts(tmp_path, capsys):
    main(["--out", str(tmp_path), "--seed", "1"])
    out = capsys.readouterr().out
    assert "Full reconstruction verified" in out
    assert (tmp_path / "rlwe_pk.json").exists()
    assert (tmp_path / "rlwe_sk_shares" / "share_3.json").exists()
