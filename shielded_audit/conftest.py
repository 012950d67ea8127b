"""
Shared fixtures for the audit core tests.
"""

import hashlib
import random

import pytest

from shielded_audit.custom_rlwe.rlwe_scheme import AuditEncryptor, PublicKeyCache
from shielded_audit.keygen import generate_rlwe_keypair, share_secret_ring
from shielded_audit.params import BN254_P

OWNER_X = 0x1D5AC1F31407018B7D413A4F52C8F74463B30E6AC2238220AD8B254DE4EAA3A2
OWNER_Y = 0x2C8F60CD0E5B1E7A0F6B3DDC95FBF6B1A1F1E2C6B5F3E80A4C9D2E3F4A5B6C7D


class Sha256FieldHasher:
    """Deterministic stand-in for Poseidon: SHA-256 of the 32-byte inputs, mod P."""

    def __init__(self):
        self.calls = 0

    def hash(self, inputs):
        self.calls += 1
        data = b"".join((int(v) % BN254_P).to_bytes(32, "big") for v in inputs)
        return int.from_bytes(hashlib.sha256(data).digest(), "big") % BN254_P


@pytest.fixture
def hasher():
    return Sha256FieldHasher()


@pytest.fixture(scope="session")
def owner():
    return OWNER_X, OWNER_Y


@pytest.fixture(scope="session")
def rlwe_keys():
    """(signed secret ring, PublicKey, 2-of-3 shares) from a fixed seed."""
    rng = random.Random(42)
    sk_signed, public_key = generate_rlwe_keypair(rng)
    shares = share_secret_ring(sk_signed, 2, 3, rng)
    return sk_signed, public_key, shares


@pytest.fixture(scope="session")
def encryptor(rlwe_keys):
    return AuditEncryptor(PublicKeyCache.preloaded(rlwe_keys[1]))


@pytest.fixture(scope="session")
def encryption(encryptor, owner):
    return encryptor.encrypt(*owner, rng=random.Random(999))
