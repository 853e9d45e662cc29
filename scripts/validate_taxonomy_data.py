"""Validate packaged seed taxonomy consistency.

Checks:
1. Every seed cut uses a known category and cut type.
2. No cut appears twice within a category.
3. No variation text maps to two different cuts or shadows another cut's name.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from cut_lens.normalization.repository import TaxonomyRepository  # noqa: E402

DATA_ROOT = SRC / "cut_lens" / "normalization" / "data"


def fail(message: str) -> None:
    print(f"[taxonomy-check] ERROR: {message}")
    raise SystemExit(1)


def iter_taxonomy_versions() -> list[str]:
    versions = [
        path.name
        for path in sorted(DATA_ROOT.iterdir())
        if path.is_dir() and (path / "cuts.py").exists() and (path / "keywords.py").exists()
    ]
    if not versions:
        fail(f"No taxonomy versions found under {DATA_ROOT}")
    return versions


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Validate seed taxonomy data")
    parser.add_argument("--version", action="append", help="Taxonomy version (default: all)")
    args = parser.parse_args(argv)

    for version in args.version or iter_taxonomy_versions():
        problems = TaxonomyRepository(version=version).validate()
        if problems:
            fail(f"{version}: " + "; ".join(problems))

    print("[taxonomy-check] OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
