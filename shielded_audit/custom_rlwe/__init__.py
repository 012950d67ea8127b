from .ciphertext import AuditEncryption, Ciphertext
from .keys import PublicKey, SecretShare
from .polynomial import (
    PolynomialRing,
    centered_mod,
    inner_product,
    mod_pow,
    negacyclic_matrix_row_mod_q,
    negacyclic_matrix_rows_mod_q,
    negacyclic_mul_int,
    negacyclic_mul_mod_q,
)
from .rlwe_scheme import AuditEncryptor, PublicKeyCache, encode_identity
from .threshold import (
    RecoveredIdentity,
    ThresholdDecryptor,
    decrypt_identity,
    lagrange_interpolate_at_zero,
    reconstruct_secret_key,
)
