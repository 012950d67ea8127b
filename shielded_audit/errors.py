"""Exception taxonomy for the audit core."""


class AuditCoreError(Exception):
    """Base class for every error raised by shielded_audit."""


class KeyMaterialError(AuditCoreError, ValueError):
    """Malformed public key or share artifact."""

    retryable = False


class KeyUnavailableError(KeyMaterialError):
    """The key artifact could not be retrieved. Callers may retry."""

    retryable = True


class ArithmeticConsistencyError(AuditCoreError, ArithmeticError):
    """A quotient witness did not divide exactly. Always an internal bug."""


class ShareSetError(AuditCoreError, ValueError):
    """Insufficient or degenerate set of secret shares."""


class EncodingError(AuditCoreError, ValueError):
    """Input does not fit its fixed byte width."""


class MerkleTreeFullError(AuditCoreError):
    """All 2^depth leaf slots are taken."""
