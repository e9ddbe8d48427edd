"""
Utility functions to lint the server signature table for duplicates and
ordering problems.
"""

from typing import Dict, List, Sequence, Tuple
from collections import defaultdict

from models.signature import ServerSignature
from rules.rules_loader import load_server_signatures


def detect_duplicate_ids(signatures: Sequence[ServerSignature]) -> Dict[str, int]:
    """
    Detect signature ids that appear more than once.

    Returns:
        Dictionary mapping duplicated id to its number of occurrences
    """
    counts: Dict[str, int] = defaultdict(int)
    for signature in signatures:
        counts[signature.id] += 1
    return {sig_id: count for sig_id, count in counts.items() if count > 1}


def detect_header_overlaps(signatures: Sequence[ServerSignature]) -> Dict[str, List[str]]:
    """
    Detect headers checked by several signatures. Table order decides which
    of them wins when a response could satisfy more than one.

    Returns:
        Dictionary with header names as keys and signature ids (in table
        order) as values
    """
    headers_map: Dict[str, List[str]] = defaultdict(list)
    for signature in signatures:
        for header in signature.headers:
            headers_map[header].append(signature.id)

    return {header: ids for header, ids in headers_map.items() if len(ids) > 1}


def detect_shadowed_matchers(signatures: Sequence[ServerSignature]) -> List[Tuple[str, str, str]]:
    """
    Detect matchers that can never decide a match because an earlier
    signature checks the same header with a prefix of their prefix.

    Example: {server: "nginx"} listed before {server: "nginx-plus"}.

    Returns:
        List of (header, shadowing id, shadowed id) tuples
    """
    shadowed = []
    for index, later in enumerate(signatures):
        for header, prefix in later.headers.items():
            for earlier in signatures[:index]:
                earlier_prefix = earlier.headers.get(header)
                if earlier_prefix is not None and prefix.startswith(earlier_prefix):
                    shadowed.append((header, earlier.id, later.id))
                    break
    return shadowed


def print_validation_report(signatures: Sequence[ServerSignature]) -> int:
    """
    Print a validation report of the server table.

    Returns:
        Number of problems found (duplicate ids and shadowed matchers)
    """
    print("\n" + "="*70)
    print("SERVER SIGNATURES VALIDATION REPORT")
    print("="*70)
    print(f"\nTotal Signatures: {len(signatures)}")

    problems = 0

    duplicates = detect_duplicate_ids(signatures)
    if duplicates:
        problems += len(duplicates)
        print(f"\nDUPLICATE IDS: {len(duplicates)}")
        for sig_id, count in sorted(duplicates.items()):
            print(f"  '{sig_id}' x{count}")
    else:
        print("\n✓ No duplicate ids")

    shadowed = detect_shadowed_matchers(signatures)
    if shadowed:
        problems += len(shadowed)
        print(f"\nSHADOWED MATCHERS: {len(shadowed)}")
        for header, earlier, later in shadowed:
            print(f"  '{header}': {earlier} always wins over {later}")
    else:
        print("\n✓ No shadowed matchers")

    overlaps = detect_header_overlaps(signatures)
    if overlaps:
        print(f"\nHEADER OVERLAPS (resolved by table order): {len(overlaps)}")
        for header, ids in sorted(overlaps.items()):
            print(f"  '{header}' -> {', '.join(ids)}")

    print("\n" + "="*70)
    return problems


if __name__ == "__main__":
    import sys
    import argparse

    parser = argparse.ArgumentParser(description="Validate the server signature table")
    parser.add_argument("path", nargs="?", help="YAML table to check (default: bundled rules/servers.yaml)")
    args = parser.parse_args()

    try:
        found = print_validation_report(load_server_signatures(args.path))
    except Exception as e:
        print(f"Error: {e}")
        sys.exit(1)
    sys.exit(1 if found else 0)
