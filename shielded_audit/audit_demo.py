"""
End-to-end audit flow against key artifacts on disk (or behind a URL):
identity -> commitments -> Merkle proof -> RLWE audit encryption ->
Prover.toml -> threshold decryption.
"""

import argparse
import logging
import os
import secrets
import sys

from .config import settings
from .custom_rlwe.rlwe_scheme import AuditEncryptor, PublicKeyCache
from .custom_rlwe.threshold import ThresholdDecryptor
from .errors import AuditCoreError
from .identity import generate_identity_keypair, identity_commitment, nullifier, value_commitment
from .merkle import ShieldedPoolMerkleTree, verify_proof
from .prover_inputs import write_audit_prover_toml
from .retrieval import load_shares, public_key_loader


def run(secret_seed, amount, out_dir, share_locations=None, packed=False):
    print("=== Step 1: Identity keypair ===")
    keypair = generate_identity_keypair(secret_seed)
    wa_commitment = identity_commitment(keypair.public_key)
    print(f"owner_x = {hex(keypair.public_key.x)}")
    print(f"owner_y = {hex(keypair.public_key.y)}")
    print(f"wa_commitment = {hex(wa_commitment)}")

    print("\n=== Step 2: Deposit commitment + Merkle proof ===")
    randomness = secrets.randbelow(1 << 128)
    commitment = value_commitment(keypair.public_key, amount, randomness)
    tree = ShieldedPoolMerkleTree()
    leaf_index = tree.insert(commitment)
    root = tree.root_optimized()
    siblings = tree.proof(leaf_index)
    print(f"leaf_index = {leaf_index}, root = {hex(root)}")
    if not verify_proof(commitment, leaf_index, siblings, root):
        print("\n=== MERKLE PROOF FAILED ===")
        return False
    print(f"nullifier = {hex(nullifier(keypair.secret_key, leaf_index))}")

    print("\n=== Step 3: RLWE audit encryption ===")
    encryptor = AuditEncryptor(PublicKeyCache(public_key_loader()))
    encryption = encryptor.encrypt(keypair.public_key.x, keypair.public_key.y)
    print(f"k0 range: [{encryption.k0.min()}, {encryption.k0.max()}]")
    print(f"k1 range: [{encryption.k1.min()}, {encryption.k1.max()}]")

    os.makedirs(out_dir, exist_ok=True)
    toml_path = write_audit_prover_toml(
        os.path.join(out_dir, "Prover.toml"),
        keypair.secret_key, wa_commitment, encryption, packed=packed,
    )
    print(f"Prover.toml written ({os.path.getsize(toml_path) / 1024:.1f} KB)")

    print("\n=== Step 4: Threshold decryption ===")
    shares = load_shares(share_locations)
    recovered = ThresholdDecryptor().decrypt_from_shares(encryption.ciphertext, shares)
    match = recovered == (keypair.public_key.x, keypair.public_key.y)
    print(f"Recovered owner_x = {hex(recovered.owner_x)}")
    print(f"Recovered owner_y = {hex(recovered.owner_y)}")
    print("\n=== DECRYPTION SUCCESSFUL ===" if match else "\n=== DECRYPTION FAILED ===")
    return match


def main(argv=None):
    parser = argparse.ArgumentParser(description="Run the shielded-pool audit flow")
    parser.add_argument("--secret", type=int, default=12345)
    parser.add_argument("--amount", type=int, default=1000000)
    parser.add_argument("--out", default="audit_circuit")
    parser.add_argument("--packed", action="store_true",
                        help="emit packed ciphertext public inputs")
    parser.add_argument("--share", action="append", dest="shares",
                        help="share artifact location (repeatable)")
    args = parser.parse_args(argv)
    logging.basicConfig(level=settings.LOG_LEVEL)

    try:
        ok = run(args.secret, args.amount, args.out, args.shares, args.packed)
    except AuditCoreError as e:
        print(f"\n ERROR: {e}")
        return 1
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
