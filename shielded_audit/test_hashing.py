"""
Tests for the Poseidon field hash and the commitments built on it
"""

import pytest

from shielded_audit.hashing import PoseidonHasher, default_hasher
from shielded_audit.identity import (
    generate_identity_keypair,
    identity_commitment,
    nullifier,
    value_commitment,
)
from shielded_audit.merkle import ShieldedPoolMerkleTree
from shielded_audit.params import BN254_P

# circomlibjs poseidon([1, 2]) and poseidon([1, 2, 3, 4])
HASH2_1_2 = 0x115CC0F5E7D690413DF64C6B9662E9CF2A3617F2743245519E19607A4417189A
HASH4_1_2_3_4 = 0x299C867DB6C1FDD79DCEFA40E4510B9837E60EBB1CE0663DBAA525DF65250465
HASH2_0_0 = 0x2098F5FB9E239EAB3CEAC3F27B81E481DC3124D55FFED523A839EE8446B64864

# secret_key = 7
PK7_X = 0x0E602B9DD6A3E8D039A17F069ADD3F9C2A187A8F629A1DE60A33A8067B9B2842
PK7_Y = 0x14CC8E83DF1B5CBB163BD2C94005CB0707FE570DEF5A165242B1C1419CB014CB
PK7_IDENTITY_COMMITMENT = 0x10519F8BE457C4CE108BFAA741555926972D9F141824945D5D6488E2E8D844A7
PK7_VALUE_COMMITMENT = 0x0209BF9932E66C1D4F7DF70C1902C759108F61817E3D796B3BE1496420F9F686
NULLIFIER_7_3 = 0x08413FFB7BDDC81153B0701D29176741C77411F9CA3FFBDB19F4FCFBEABB5031


@pytest.fixture(scope="module")
def poseidon():
    return PoseidonHasher()


def test_circomlib_vectors(poseidon):
    assert poseidon.hash2(1, 2) == HASH2_1_2
    assert poseidon.hash4(1, 2, 3, 4) == HASH4_1_2_3_4
    assert poseidon.hash([0, 0]) == HASH2_0_0


def test_inputs_reduced_into_field(poseidon):
    assert poseidon.hash2(1 + BN254_P, 2) == HASH2_1_2


def test_input_count_rejected(poseidon):
    with pytest.raises(ValueError):
        poseidon.hash([])
    with pytest.raises(ValueError):
        poseidon.hash(list(range(17)))


def test_default_hasher_is_shared():
    assert default_hasher() is default_hasher()


def test_identity_golden_vectors():
    """secret_key=7: public key, commitments and nullifier under the default hash"""
    keypair = generate_identity_keypair(7)
    assert keypair.public_key == (PK7_X, PK7_Y)
    assert identity_commitment(keypair.public_key) == PK7_IDENTITY_COMMITMENT
    assert value_commitment(keypair.public_key, 1000000, 42) == PK7_VALUE_COMMITMENT
    assert nullifier(7, 3) == NULLIFIER_7_3


def test_default_tree_ladder():
    tree = ShieldedPoolMerkleTree(depth=2)
    assert tree.default_hashes[1] == HASH2_0_0
    assert tree.root() == tree.root_optimized()
