"""RLWE auditor keypair generation + Shamir secret sharing.

All RLWE operations are mod q; the Shamir sharing of the secret ring is over
BN254 so shares stay compatible with the proving field.

Writes:
  <out>/rlwe_pk.json              - public key (a, b; coefficients in [0, q))
  <out>/rlwe_params.json          - parameters
  <out>/rlwe_sk_shares/share_i.json
"""

import argparse
import json
import logging
import os
import random

from .config import settings
from .custom_rlwe.keys import PublicKey, SecretShare
from .custom_rlwe.polynomial import PolynomialRing
from .custom_rlwe.threshold import reconstruct_secret_key
from .params import BN254_P, DELTA, N, NOISE_BOUND, NUM_SHARES, PLAINTEXT_MOD, RLWE_Q, THRESHOLD

logger = logging.getLogger(__name__)


def generate_rlwe_keypair(rng=None, n=N, q=RLWE_Q, noise_bound=NOISE_BOUND):
    """Returns (signed secret ring, PublicKey) with b = -(a*s) + e mod q."""
    ring = PolynomialRing(n, q)
    sk_signed = ring.random_bounded(noise_bound, rng=rng)
    a = ring.random_uniform(rng)
    e = ring.random_bounded(noise_bound, rng=rng)
    a_s = ring.mul(a, ring.reduce(sk_signed))
    b = ring.add(ring.neg(a_s), e)
    return sk_signed, PublicKey(b, a)


def shamir_share_field(secret, threshold, num_shares, rng=None, prime=BN254_P):
    """Shamir secret sharing of a single field element; returns [(x, y), ...]."""
    if not 1 <= threshold <= num_shares:
        raise ValueError("need 1 <= threshold <= num_shares")
    rng = rng or random.SystemRandom()
    coeffs = [secret % prime] + [rng.randrange(prime) for _ in range(threshold - 1)]

    shares = []
    for x in range(1, num_shares + 1):
        y = 0
        for c in reversed(coeffs):
            y = (y * x + c) % prime
        shares.append((x, y))
    return shares


def share_secret_ring(sk_signed, threshold=THRESHOLD, num_shares=NUM_SHARES, rng=None,
                      prime=BN254_P):
    """One independent sharing per ring position; signed coefficients map into the field."""
    per_holder = [[] for _ in range(num_shares)]
    for coeff in sk_signed:
        for holder, point in enumerate(shamir_share_field(int(coeff), threshold, num_shares,
                                                          rng, prime)):
            per_holder[holder].append(point)
    return [
        SecretShare(i + 1, threshold, num_shares, tuple(points))
        for i, points in enumerate(per_holder)
    ]


def write_key_artifacts(out_dir, public_key, shares, noise_bound=NOISE_BOUND):
    os.makedirs(out_dir, exist_ok=True)
    pk_path = os.path.join(out_dir, "rlwe_pk.json")
    with open(pk_path, "w") as f:
        json.dump(public_key.to_artifact(), f)

    params_path = os.path.join(out_dir, "rlwe_params.json")
    with open(params_path, "w") as f:
        json.dump({
            "N": len(public_key.a),
            "q": RLWE_Q,
            "noise_bound": noise_bound,
            "plaintext_modulus": PLAINTEXT_MOD,
            "delta": DELTA,
            "threshold": shares[0].threshold,
            "num_shares": len(shares),
            "field": "BN254",
        }, f, indent=2)

    shares_dir = os.path.join(out_dir, "rlwe_sk_shares")
    os.makedirs(shares_dir, exist_ok=True)
    share_paths = []
    for share in shares:
        share_path = os.path.join(shares_dir, f"share_{share.share_index}.json")
        with open(share_path, "w") as f:
            json.dump(share.to_artifact(), f)
        share_paths.append(share_path)

    logger.info("Wrote public key, params and %d shares to %s", len(shares), out_dir)
    return pk_path, params_path, share_paths


def main(argv=None):
    parser = argparse.ArgumentParser(description="Generate the RLWE auditor key and its shares")
    parser.add_argument("--out", default=os.path.dirname(settings.PUBLIC_KEY_LOCATION) or ".")
    parser.add_argument("--threshold", type=int, default=THRESHOLD)
    parser.add_argument("--shares", type=int, default=NUM_SHARES)
    parser.add_argument("--seed", type=int, default=None,
                        help="deterministic seed (testing only)")
    args = parser.parse_args(argv)
    logging.basicConfig(level=settings.LOG_LEVEL)

    rng = random.Random(args.seed) if args.seed is not None else None

    print(f"=== RLWE Keygen (N={N}, q={RLWE_Q}) ===")
    sk_signed, public_key = generate_rlwe_keypair(rng)
    print(f"sk generated: {int((sk_signed != 0).sum())} nonzero coefficients")

    print(f"\n=== Shamir Secret Sharing ({args.threshold}-of-{args.shares}) ===")
    shares = share_secret_ring(sk_signed, args.threshold, args.shares, rng)

    # Reconstruct from the first quorum before anything is written
    recovered = reconstruct_secret_key(shares[:args.threshold])
    if not (recovered == sk_signed % RLWE_Q).all():
        raise SystemExit("share verification failed")
    print("Full reconstruction verified (all coefficients).")

    pk_path, params_path, share_paths = write_key_artifacts(args.out, public_key, shares)
    print(f"PK saved to {pk_path}")
    print(f"Params saved to {params_path}")
    for path in share_paths:
        print(f"Share saved to {path}")


if __name__ == "__main__":
    main()
