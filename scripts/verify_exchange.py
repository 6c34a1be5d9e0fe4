"""
Verify revealed exchanges against their disclosed HMAC digests.
Usage:
  python scripts/verify_exchange.py --digest <hex> --key <hex> --secret 3
  python scripts/verify_exchange.py --transcript data/exchanges.csv
"""
import argparse
import sys

from nontransitive_dice.core.fairness import verify_commitment
from nontransitive_dice.persistence import csv_io


def verify_transcript(path: str) -> int:
    """
    Check every row of a transcript CSV. Returns the number of rows that fail.
    A row with a malformed key or number counts as a failure.
    """
    failures = 0
    for i, row in enumerate(csv_io.read_rows_from_csv(path)):
        try:
            ok = verify_commitment(row["digest"], row["key"], int(row["secret"]))
            expected = (int(row["secret"]) + int(row["counterparty_value"])) % int(row["max_value"])
            ok = ok and expected == int(row["result"])
        except (ValueError, ZeroDivisionError):
            ok = False
        if not ok:
            failures += 1
            print(f"Row {i} [{row['label']}]: MISMATCH")
    return failures


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description='Verify commit-reveal exchanges (HMAC-SHA3-256 over the decimal secret)')
    parser.add_argument('--digest', type=str, help='Digest disclosed before the exchange (hex)')
    parser.add_argument('--key', type=str, help='Revealed key (hex)')
    parser.add_argument('--secret', type=int, help='Revealed secret number')
    parser.add_argument('--transcript', type=str, help='Transcript CSV written by the game or experiments')
    args = parser.parse_args(argv)

    if args.transcript:
        failures = verify_transcript(args.transcript)
        print("All exchanges verified." if failures == 0 else f"{failures} exchange(s) failed verification.")
        return 0 if failures == 0 else 1

    if args.digest is None or args.key is None or args.secret is None:
        parser.error('--digest, --key and --secret are required without --transcript')
    try:
        ok = verify_commitment(args.digest, args.key, args.secret)
    except ValueError as e:
        print(f"Invalid key: {e}")
        return 1
    print("OK: the revealed secret matches the commitment." if ok else "MISMATCH: the commitment does not verify.")
    return 0 if ok else 1


if __name__ == '__main__':
    sys.exit(main())
