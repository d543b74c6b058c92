#!/usr/bin/env python3
"""
scripts/validate_config.py
Usage:
  python scripts/validate_config.py config.yaml

Validates keys, types and values of the pipeline config (merged over defaults).
Exits 0 if OK, 2 if invalid.
"""
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from runner.config import DEFAULT_CONFIG, load_config_file, validate_config  # noqa: E402


def main(argv):
    if len(argv) < 2:
        print("Usage: python scripts/validate_config.py <config.yaml|config.json>", file=sys.stderr)
        return 2
    path = argv[1]
    try:
        cfg = load_config_file(path)
    except (OSError, ValueError) as e:
        print(f"ERROR loading config: {e}", file=sys.stderr)
        return 2
    errs = validate_config({**DEFAULT_CONFIG, **cfg})
    if errs:
        print("CONFIG INVALID:", file=sys.stderr)
        for e in errs:
            print(" -", e, file=sys.stderr)
        return 2
    print("CONFIG OK")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
