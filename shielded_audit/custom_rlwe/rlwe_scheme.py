"""
RLWE Audit Encryption (BFV convention)

Public key: b = -(a*s) + e (mod q).
  c0 = (b*r + e1 + Delta*msg) mod q   (sparse, first MSG_SLOTS coefficients)
  c1 = (a*r + e2) mod q               (full ring)

The verification circuit cannot reduce mod q, so every reduced coefficient
comes with a quotient witness k such that, over the integers,
  c0[i] + k0[i]*q == <B_ROW[i], r> + e1[i] + Delta*msg[i]
  c1[i] + k1[i]*q == <A_ROW[i], r> + e2[i]
where B_ROW / A_ROW are rows of the negacyclic matrices of b and a.
"""

import logging
import operator
import time

import numpy as np

from ..errors import ArithmeticConsistencyError, EncodingError, KeyUnavailableError
from ..params import MSG_SLOTS, N, NOISE_BOUND, PLAINTEXT_MOD, RLWE_Q
from .ciphertext import AuditEncryption, Ciphertext
from .keys import PublicKey
from .polynomial import PolynomialRing

logger = logging.getLogger(__name__)

FIELD_BYTES = 32


def encode_field_to_bytes(value, num_bytes=FIELD_BYTES):
    """Encode a field element to byte slots (8-bit each), little-endian."""
    value = operator.index(value)
    if not 0 <= value < 1 << (8 * num_bytes):
        raise EncodingError(f"value does not fit in {num_bytes} bytes")
    return list(value.to_bytes(num_bytes, "little"))


def decode_bytes_to_field(slots):
    return int.from_bytes(bytes(int(s) & 0xFF for s in slots), "little")


def encode_identity(owner_x, owner_y):
    """owner_x (32 bytes) + owner_y (32 bytes) -> 64 byte slots."""
    return np.array(
        encode_field_to_bytes(owner_x) + encode_field_to_bytes(owner_y), dtype=np.int64
    )


class PublicKeyCache:
    """Write-once holder for the auditor public key.

    `loader` returns the raw artifact ({"a": [...], "b": [...]}). Concurrent
    first calls may each load; every load decodes to an equal key and the
    first stored one wins. A failed load stores nothing.
    """

    def __init__(self, loader, n=N, q=RLWE_Q):
        self._loader = loader
        self.n = n
        self.q = q
        self._key = None

    @classmethod
    def preloaded(cls, public_key):
        cache = cls(loader=None)
        cache._key = public_key
        return cache

    @property
    def loaded(self):
        return self._key is not None

    def get(self):
        key = self._key
        if key is not None:
            return key
        if self._loader is None:
            raise KeyUnavailableError("no public key loader configured")
        try:
            data = self._loader()
        except OSError as e:
            raise KeyUnavailableError(f"key unavailable: {e}") from e
        key = PublicKey.from_artifact(data, self.n, self.q)
        if self._key is None:
            self._key = key
            logger.info("Auditor public key cached (N=%d, q=%d)", self.n, self.q)
        return self._key


class AuditEncryptor:
    def __init__(self, key_cache, N=N, q=RLWE_Q, t=PLAINTEXT_MOD,
                 msg_slots=MSG_SLOTS, noise_bound=NOISE_BOUND):
        self.key_cache = key_cache
        self.N = N
        self.q = q
        self.t = t
        self.msg_slots = msg_slots
        self.noise_bound = noise_bound
        self.poly_ring = PolynomialRing(N, q)
        self.delta = q // t
        if msg_slots > N:
            raise ValueError("msg_slots cannot exceed N")

    @property
    def params(self):
        return {'N': self.N, 'q': self.q, 't': self.t, 'delta': self.delta,
                'msg_slots': self.msg_slots}

    def encode(self, owner_x, owner_y):
        msg = encode_identity(owner_x, owner_y)
        if len(msg) != self.msg_slots:
            raise EncodingError(f"encoded {len(msg)} slots, expected {self.msg_slots}")
        return msg

    def sample_noise(self, size, rng=None):
        return self.poly_ring.random_bounded(self.noise_bound, size=size, rng=rng)

    def encrypt(self, owner_x, owner_y, rng=None):
        """Encrypt an identity and compute the circuit witnesses.

        `rng` (a random.Random) only exists for reproducible tests; by default
        noise comes from the OS CSPRNG.
        """
        msg = self.encode(owner_x, owner_y)
        public_key = self.key_cache.get()
        b, a = public_key.get_components()

        start = time.perf_counter()
        r = self.sample_noise(self.N, rng)
        e1 = self.sample_noise(self.msg_slots, rng)
        e2 = self.sample_noise(self.N, rng)
        r_mod_q = self.poly_ring.reduce(r)

        # c0 = b*r + e1 + delta*m (first msg_slots coefficients)
        br = self.poly_ring.mul(b, r_mod_q)
        c0 = (br[:self.msg_slots] + e1 + self.delta * msg) % self.q

        # c1 = a*r + e2
        ar = self.poly_ring.mul(a, r_mod_q)
        c1 = (ar + e2) % self.q

        ciphertext = Ciphertext(c0, c1)
        k0, k1 = self.compute_quotients(public_key, ciphertext, r, e1, e2, msg)
        logger.debug("Audit encryption took %.3fs", time.perf_counter() - start)
        logger.info("Encrypted identity into %d + %d coefficients", self.msg_slots, self.N)
        return AuditEncryption(ciphertext, r, e1, e2, k0, k1, msg)

    def compute_quotients(self, public_key, ciphertext, r, e1, e2, msg):
        """Quotient witnesses from exact-integer matrix-row inner products."""
        b, a = public_key.get_components()
        c0, c1 = ciphertext.get_components()
        r_big = np.asarray(r, dtype=object)

        rows_b = self.poly_ring.matrix_rows(b, self.msg_slots).astype(object)
        full0 = rows_b.dot(r_big) + np.asarray(e1, dtype=object) \
            + self.delta * np.asarray(msg, dtype=object)
        k0 = self._exact_quotients(full0, c0, "c0")

        rows_a = self.poly_ring.matrix_rows(a).astype(object)
        full1 = rows_a.dot(r_big) + np.asarray(e2, dtype=object)
        k1 = self._exact_quotients(full1, c1, "c1")
        return k0, k1

    def _exact_quotients(self, full, reduced, label):
        quotients = []
        for i, (f, c) in enumerate(zip(full, reduced)):
            k, remainder = divmod(int(f) - int(c), self.q)
            if remainder != 0:
                raise ArithmeticConsistencyError(
                    f"{label}[{i}]: {f} - {c} is not a multiple of q={self.q}"
                )
            quotients.append(k)
        return np.array(quotients, dtype=np.int64)
