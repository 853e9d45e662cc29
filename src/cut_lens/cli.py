"""Command-line interface for cut-lens."""

import argparse
import json
import logging
import os
import sys

from cut_lens import __version__
from cut_lens.exceptions import CutLensError
from cut_lens.normalization import CutNormalizer, NormalizationConfig
from cut_lens.normalization.repository import TaxonomyRepository
from cut_lens.stores import CutStore, InMemoryCutStore


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="cut-lens",
        description="Normalize free-text meat cut names",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"cut-lens {__version__}",
    )
    parser.add_argument(
        "--database-url",
        default=os.getenv("DATABASE_URL"),
        help="PostgreSQL URL (default: DATABASE_URL env var, else in-memory seed taxonomy)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable info logging")

    commands = parser.add_subparsers(dest="command", required=True)

    suggest = commands.add_parser("suggest", help="Rank canonical cuts for a raw name")
    suggest.add_argument("name")
    suggest.add_argument("--category")
    suggest.add_argument("--limit", type=int)
    suggest.add_argument("--min-confidence", type=float)

    normalize = commands.add_parser("normalize", help="Attach a raw name to a cut or create one")
    normalize.add_argument("name")
    normalize.add_argument("--category")
    normalize.add_argument("--cut-type")
    normalize.add_argument("--force-create", action="store_true")

    analyze = commands.add_parser("analyze", help="Detect category, cut type and premium markers")
    analyze.add_argument("name")

    commands.add_parser("stats", help="Per-category taxonomy statistics")
    commands.add_parser("seed", help="Load the packaged seed taxonomy into the store")

    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    try:
        store = _build_store(args.database_url, seed=args.command != "seed")
        normalizer = CutNormalizer(store, NormalizationConfig.from_env())

        if args.command == "suggest":
            result = normalizer.suggest(
                args.name,
                category=args.category,
                limit=args.limit,
                min_confidence=args.min_confidence,
            )
            _print_suggestions(result, as_json=args.json)
        elif args.command == "normalize":
            result = normalizer.normalize(
                args.name,
                force_create=args.force_create,
                category=args.category,
                cut_type=args.cut_type,
            )
            _print_normalize(result, as_json=args.json)
        elif args.command == "analyze":
            result = normalizer.analyze(args.name)
            _print_analysis(result, as_json=args.json)
        elif args.command == "stats":
            _print_stats(normalizer.stats(), as_json=args.json)
        else:
            cuts, variations = normalizer.repo.seed(store)
            print(f"seeded {cuts} cuts, {variations} variations")
    except CutLensError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


def _build_store(database_url: str | None, *, seed: bool) -> CutStore:
    if database_url:
        from cut_lens.stores.postgres import PostgresCutStore

        store = PostgresCutStore(database_url)
        store.init_schema()
        return store

    store = InMemoryCutStore()
    if seed:
        TaxonomyRepository().seed(store)
    return store


def _print_suggestions(result, *, as_json: bool) -> None:
    if as_json:
        print(result.model_dump_json(indent=2, by_alias=True, exclude_none=True))
        return
    if not result.suggestions:
        print("  no suggestions")
        return
    for candidate in result.suggestions:
        print(
            f"  {candidate.confidence:.2f}  {candidate.match_type:<9} "
            f"{candidate.cut.name} ({candidate.cut.category})"
        )


def _print_normalize(result, *, as_json: bool) -> None:
    if as_json:
        print(result.model_dump_json(indent=2, by_alias=True, exclude_none=True))
        return

    print()
    print(f"  {result.original_name}")
    print()
    fields = [
        ("Outcome", result.outcome),
        ("Cut", result.normalized_cut.name if result.normalized_cut else None),
        ("Category", result.normalized_cut.category if result.normalized_cut else None),
        ("Match", result.match_type),
        ("Confidence", f"{result.confidence:.2f}"),
        ("Verified", str(result.variation.verified) if result.variation else None),
        ("Message", result.message),
    ]
    for label, value in fields:
        display = value if value else "-"
        print(f"  {label + ':':<12} {display}")
    for candidate in result.alternatives:
        print(f"    alt {candidate.confidence:.2f} {candidate.cut.name} ({candidate.cut.category})")
    print()


def _print_analysis(result, *, as_json: bool) -> None:
    if as_json:
        print(result.model_dump_json(indent=2, by_alias=True, exclude_none=True))
        return

    print()
    fields = [
        ("Cleaned", result.cleaned_name),
        ("Category", result.suggested_category),
        ("Cut Type", result.suggested_cut_type),
        ("Suggested", result.suggested_normalized_name),
        ("Premium", "yes" if result.is_premium else "no"),
        ("Confidence", f"{result.confidence:.2f}"),
        ("Reasons", ", ".join(result.reasons)),
    ]
    for label, value in fields:
        display = value if value else "-"
        print(f"  {label + ':':<12} {display}")
    print()


def _print_stats(stats, *, as_json: bool) -> None:
    if as_json:
        print(json.dumps([item.model_dump(by_alias=True) for item in stats], ensure_ascii=False, indent=2))
        return
    print("category | cuts | variations | verified | avg_confidence")
    for item in stats:
        avg = "-" if item.avg_confidence is None else f"{item.avg_confidence:.2f}"
        print(
            f"{item.category} | {item.normalized_cuts_count} | {item.variations_count} | "
            f"{item.verified_variations} | {avg}"
        )


if __name__ == "__main__":
    sys.exit(main())
