"""
Field hash primitive used by commitments and the Merkle tree.

The permutation comes from `circomlibpy`, a port of circomlibjs' Poseidon over
BN254 (the instance Noir exposes as `poseidon::bn254::hash_N`). Its round
constants and matrices ship precomputed, so no parameters are generated at
runtime. This module only adapts it to the `Hash(inputs) -> field element`
shape the rest of the code consumes. Any object with a compatible `hash`
method can be injected instead.
"""

from typing import Protocol, Sequence

from circomlibpy.poseidon import PoseidonHash

from .params import BN254_P

# circomlib ships constants for state widths 2..17
MAX_INPUTS = 16


class FieldHasher(Protocol):
    def hash(self, inputs: Sequence[int]) -> int:
        ...


class PoseidonHasher:
    """circomlib Poseidon over BN254: t = len(inputs) + 1, 8 full rounds."""

    def __init__(self):
        self._poseidon = PoseidonHash()

    def hash(self, inputs: Sequence[int]) -> int:
        if not 1 <= len(inputs) <= MAX_INPUTS:
            raise ValueError(f"hash takes 1 to {MAX_INPUTS} inputs, got {len(inputs)}")
        state = [int(v) % BN254_P for v in inputs]
        return int(self._poseidon.hash(len(state), state)) % BN254_P

    def hash2(self, left: int, right: int) -> int:
        return self.hash([left, right])

    def hash4(self, v1: int, v2: int, v3: int, v4: int) -> int:
        return self.hash([v1, v2, v3, v4])


_default_hasher = None


def default_hasher() -> PoseidonHasher:
    global _default_hasher
    if _default_hasher is None:
        _default_hasher = PoseidonHasher()
    return _default_hasher
