"""
Ciphertext and encryption-witness containers.
"""

import numpy as np

from ..errors import EncodingError
from ..params import BN254_P, MSG_SLOTS, N, RLWE_Q
from .polynomial import centered_mod


def field_to_hex(v):
    """Fixed-width field representative: 0x + 64 hex digits."""
    return f"0x{int(v) % BN254_P:064x}"


def hex_to_field(text):
    try:
        return int(text, 16) % BN254_P
    except (TypeError, ValueError):
        raise EncodingError(f"malformed hex value {text!r}") from None


def _decode_array(record, key, length, bound, signed):
    # unsigned values lie in [0, bound), signed ones in (-bound, bound)
    values = record.get(key)
    if not isinstance(values, list) or len(values) != length:
        raise EncodingError(f"record field {key!r} must hold {length} values")
    decoded = [hex_to_field(v) for v in values]
    if signed:
        decoded = [centered_mod(v, BN254_P) for v in decoded]
    if any(abs(v) >= bound for v in decoded):
        raise EncodingError(f"record field {key!r} holds a value out of range")
    return decoded


class Ciphertext:
    """BFV-style pair: c0 carries the message slots, c1 the full ring."""

    def __init__(self, c0, c1):
        self.c0 = np.array(c0, dtype=np.int64)
        self.c1 = np.array(c1, dtype=np.int64)
        self.c0.setflags(write=False)
        self.c1.setflags(write=False)

    def get_components(self):
        return self.c0, self.c1

    def validate(self, n=N, q=RLWE_Q, msg_slots=MSG_SLOTS):
        if self.c0.shape != (msg_slots,) or self.c1.shape != (n,):
            raise EncodingError(
                f"ciphertext shape mismatch: c0={self.c0.shape}, c1={self.c1.shape}"
            )
        for name, arr in (("c0", self.c0), ("c1", self.c1)):
            if arr.min() < 0 or arr.max() >= q:
                raise EncodingError(f"{name} coefficients must lie in [0, {q})")
        return self

    def to_record(self):
        return {
            "c0": [field_to_hex(v) for v in self.c0],
            "c1": [field_to_hex(v) for v in self.c1],
        }

    @classmethod
    def from_record(cls, record, n=N, q=RLWE_Q, msg_slots=MSG_SLOTS):
        if not isinstance(record, dict):
            raise EncodingError("ciphertext record must be a mapping")
        return cls(
            _decode_array(record, "c0", msg_slots, q, signed=False),
            _decode_array(record, "c1", n, q, signed=False),
        )


class AuditEncryption:
    """One encryption call's full output: ciphertext, noise and quotient witnesses.

    r, e1, e2 are the signed noise samples; k0, k1 satisfy
    c0[i] + k0[i]*q == <B_ROW[i], r> + e1[i] + delta*msg[i] and
    c1[i] + k1[i]*q == <A_ROW[i], r> + e2[i] over the integers.
    """

    def __init__(self, ciphertext, r, e1, e2, k0, k1, msg=None):
        self.ciphertext = ciphertext
        self.r = np.array(r, dtype=np.int64)
        self.e1 = np.array(e1, dtype=np.int64)
        self.e2 = np.array(e2, dtype=np.int64)
        self.k0 = np.array(k0, dtype=np.int64)
        self.k1 = np.array(k1, dtype=np.int64)
        self.msg = None if msg is None else np.array(msg, dtype=np.int64)
        for arr in (self.r, self.e1, self.e2, self.k0, self.k1):
            arr.setflags(write=False)

    @property
    def c0(self):
        return self.ciphertext.c0

    @property
    def c1(self):
        return self.ciphertext.c1

    def to_record(self):
        return {
            **self.ciphertext.to_record(),
            "r": [field_to_hex(v) for v in self.r],
            "e1": [field_to_hex(v) for v in self.e1],
            "e2": [field_to_hex(v) for v in self.e2],
            "k0": [field_to_hex(v) for v in self.k0],
            "k1": [field_to_hex(v) for v in self.k1],
        }

    @classmethod
    def from_record(cls, record, n=N, q=RLWE_Q, msg_slots=MSG_SLOTS):
        return cls(
            Ciphertext.from_record(record, n, q, msg_slots),
            r=_decode_array(record, "r", n, q, signed=True),
            e1=_decode_array(record, "e1", msg_slots, q, signed=True),
            e2=_decode_array(record, "e2", n, q, signed=True),
            k0=_decode_array(record, "k0", msg_slots, q, signed=True),
            k1=_decode_array(record, "k1", n, q, signed=True),
        )
