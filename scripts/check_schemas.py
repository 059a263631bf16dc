#!/usr/bin/env python3
"""
Check that every JSON Schema contract loads and is itself a valid schema.

Usage:
    python scripts/check_schemas.py [schema_root]

Exits 0 when all contracts are valid, 1 otherwise.
"""

import sys
from pathlib import Path

from tracker.kernel.contract_check import check_schemas
from tracker.kernel.schema_gate import SchemaGate, SchemaLoadError


def main() -> int:
    root = Path(sys.argv[1]) if len(sys.argv) > 1 else None
    try:
        gate = SchemaGate(root)
    except SchemaLoadError as e:
        print(f"✗ {e}", file=sys.stderr)
        if e.__cause__ is not None:
            print(f"  {e.__cause__}", file=sys.stderr)
        return 1

    errors = 0
    for name, error in check_schemas(gate).items():
        if error is None:
            print(f"✓ {name} is valid")
        else:
            errors += 1
            print(f"✗ {name} invalid", file=sys.stderr)
            print(f"  {error}", file=sys.stderr)

    return 0 if errors == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
