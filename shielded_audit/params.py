"""
Audit Scheme Parameters
Ciphertext modulus q = 167772161 (40 * 2^22 + 1, NTT-friendly prime).
All RLWE operations are mod q; commitments and Shamir shares live in BN254.
"""

N = 1024
RLWE_Q = 167772161
PLAINTEXT_MOD = 256  # 8-bit slots
DELTA = RLWE_Q // PLAINTEXT_MOD  # 655360
MSG_SLOTS = 64  # owner_x (32 bytes) + owner_y (32 bytes)
NOISE_BOUND = 3

# BN254 scalar field; also the base field of the embedded curve
BN254_P = 21888242871839275222246405745257275088548364400416034343698204186575808495617

# Shamir defaults
THRESHOLD = 2
NUM_SHARES = 3

TREE_DEPTH = 16

# Circuit public-input packing: 7 values per Field, 32 bits each (q < 2^32)
PACK_WIDTH = 7
PACK_BITS = 32
