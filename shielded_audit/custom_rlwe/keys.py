"""
Key material decoders.

Artifacts arrive as JSON-shaped dicts. They are validated (shape, numeral
format, ring dimension) here, before any arithmetic sees them.
"""

from typing import List, NamedTuple, Tuple, Union

import numpy as np
from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator

from ..errors import KeyMaterialError
from ..params import BN254_P, N, RLWE_Q

Numeral = Union[int, str]


def parse_numeral(value) -> int:
    """Arbitrary-precision integer from an int, decimal text or 0x-hex text."""
    if isinstance(value, bool):
        raise KeyMaterialError(f"invalid key material: boolean numeral {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            if text.lower().startswith(("0x", "-0x")):
                return int(text, 16)
            return int(text, 10)
        except ValueError:
            raise KeyMaterialError(f"invalid key material: malformed numeral {value!r}") from None
    raise KeyMaterialError(f"invalid key material: unsupported numeral type {type(value).__name__}")


def to_hex_q(v, q=RLWE_Q):
    return f"0x{v % q:08x}"


def to_hex_bn254(v):
    return f"0x{v % BN254_P:064x}"


class PublicKeyArtifact(BaseModel):
    a: List[Numeral]
    b: List[Numeral]


class PublicKey:
    """RLWE public key (b, a) with b = -(a*s) + e. Coefficients in [0, q)."""

    def __init__(self, b, a):
        self.b = np.array(b, dtype=np.int64)
        self.a = np.array(a, dtype=np.int64)
        self.b.setflags(write=False)
        self.a.setflags(write=False)

    def get_components(self):
        return self.b, self.a

    def __eq__(self, other):
        if not isinstance(other, PublicKey):
            return NotImplemented
        return np.array_equal(self.a, other.a) and np.array_equal(self.b, other.b)

    @classmethod
    def from_artifact(cls, data, n=N, q=RLWE_Q):
        try:
            artifact = PublicKeyArtifact.model_validate(data)
        except ValidationError as e:
            raise KeyMaterialError(f"invalid key material: {e}") from e
        if len(artifact.a) != n or len(artifact.b) != n:
            raise KeyMaterialError(
                f"invalid key material: expected {n} coefficients per polynomial, "
                f"got a={len(artifact.a)}, b={len(artifact.b)}"
            )
        a = [parse_numeral(v) % q for v in artifact.a]
        b = [parse_numeral(v) % q for v in artifact.b]
        return cls(b, a)

    def to_artifact(self, q=RLWE_Q):
        return {
            "a": [to_hex_q(int(v), q) for v in self.a],
            "b": [to_hex_q(int(v), q) for v in self.b],
        }


class ShareCoefficient(BaseModel):
    x: int
    y: Numeral


class ShareArtifact(BaseModel):
    share_index: int = Field(validation_alias=AliasChoices("share_index", "shareIndex"))
    threshold: int
    num_shares: int = Field(
        validation_alias=AliasChoices("num_shares", "totalShares", "total_shares")
    )
    coefficients: List[ShareCoefficient]

    @field_validator("threshold", "num_shares")
    @classmethod
    def _positive(cls, v):
        if v < 1:
            raise ValueError("must be >= 1")
        return v


class SecretShare(NamedTuple):
    share_index: int
    threshold: int
    num_shares: int
    points: Tuple[Tuple[int, int], ...]  # one (x, y) per ring position

    @classmethod
    def from_artifact(cls, data, n=N):
        try:
            artifact = ShareArtifact.model_validate(data)
        except ValidationError as e:
            raise KeyMaterialError(f"invalid share artifact: {e}") from e
        if len(artifact.coefficients) != n:
            raise KeyMaterialError(
                f"invalid share artifact: expected {n} coefficients, "
                f"got {len(artifact.coefficients)}"
            )
        points = tuple(
            (c.x, parse_numeral(c.y) % BN254_P) for c in artifact.coefficients
        )
        return cls(artifact.share_index, artifact.threshold, artifact.num_shares, points)

    def to_artifact(self):
        return {
            "share_index": self.share_index,
            "threshold": self.threshold,
            "num_shares": self.num_shares,
            "coefficients": [{"x": x, "y": to_hex_bn254(y)} for x, y in self.points],
        }
