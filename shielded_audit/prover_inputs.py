"""
Audit Prover.toml rendering.

Every field element is written as a quoted, 0x-prefixed 64-hex-digit string;
zero is written as "0". Signed witnesses (noise, quotients) are written as
their BN254 representative.
"""

from .params import BN254_P, PACK_BITS, PACK_WIDTH


def format_field(v):
    """Format for Prover.toml (BN254 field element)."""
    v = int(v) % BN254_P
    if v == 0:
        return '"0"'
    return f'"0x{v:064x}"'


def pack_values(values, pack_width=PACK_WIDTH, pack_bits=PACK_BITS):
    """Pack values into Fields, pack_width values per Field, pack_bits bits each."""
    if pack_width * pack_bits >= BN254_P.bit_length():
        raise ValueError("packed width does not fit in a field element")
    packed = []
    values = [int(v) for v in values]
    for i in range(0, len(values), pack_width):
        v = 0
        for j, c in enumerate(values[i:i + pack_width]):
            if not 0 <= c < 1 << pack_bits:
                raise ValueError(f"value {c} does not fit in {pack_bits} bits")
            v += c << (j * pack_bits)
        packed.append(v)
    return packed


def _array(name, values):
    return f"{name} = [{', '.join(format_field(v) for v in values)}]\n"


def render_audit_prover_toml(secret_key, wa_commitment, encryption, ct_commitment=None,
                             packed=False):
    """Prover inputs for the audit circuit from one AuditEncryption."""
    toml = "# Audit Prover.toml\n"
    toml += f"secret_key = {format_field(secret_key)}\n"
    toml += f"wa_commitment = {format_field(wa_commitment)}\n"
    if ct_commitment is not None:
        toml += f"ct_commitment = {format_field(ct_commitment)}\n"
    else:
        toml += "# ct_commitment must be computed by the circuit toolchain\n"
        toml += 'ct_commitment = "0"\n'
    if packed:
        toml += _array("c0_packed", pack_values(encryption.c0))
        toml += _array("c1_packed", pack_values(encryption.c1))
    else:
        toml += _array("c0_sparse", encryption.c0)
        toml += _array("c1", encryption.c1)
    toml += _array("r", encryption.r)
    toml += _array("e1_sparse", encryption.e1)
    toml += _array("e2", encryption.e2)
    toml += _array("k0", encryption.k0)
    toml += _array("k1", encryption.k1)
    return toml


def write_audit_prover_toml(path, secret_key, wa_commitment, encryption, ct_commitment=None,
                            packed=False):
    with open(path, "w") as f:
        f.write(render_audit_prover_toml(secret_key, wa_commitment, encryption,
                                         ct_commitment, packed))
    return path
