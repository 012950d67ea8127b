"""
Shielded Audit Core
Auditable identity commitments, RLWE audit encryption and threshold decryption.
"""

__version__ = "0.1.0"
