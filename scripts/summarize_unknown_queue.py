"""Summarize unknown queue JSONL records.

Usage:
  python scripts/summarize_unknown_queue.py --input /tmp/cut-lens-unknown.jsonl
"""

from __future__ import annotations

import argparse
import json
from collections import defaultdict
from pathlib import Path


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Summarize unknown cut names")
    parser.add_argument("--input", required=True, help="Path to unknown queue JSONL file")
    parser.add_argument("--top", type=int, default=50, help="Top records to show (default: 50)")
    parser.add_argument(
        "--format",
        choices=["json", "table"],
        default="table",
        help="Output format (default: table)",
    )
    parser.add_argument("--output", help="Optional output file path")
    return parser.parse_args(argv)


def load_records(path: Path) -> list[dict]:
    if not path.exists():
        return []

    records: list[dict] = []
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line:
            continue
        try:
            records.append(json.loads(line))
        except json.JSONDecodeError:
            continue
    return records


def summarize(records: list[dict]) -> list[dict]:
    """Group unknown names by (category, raw) with counts and mean confidence."""

    grouped: dict[tuple[str, str], dict] = defaultdict(
        lambda: {"count": 0, "confidence_sum": 0.0, "reason": None, "top_cut_id": None, "latest_ts": None}
    )

    for record in records:
        raw = str(record.get("raw") or "")
        if not raw:
            continue
        category = str(record.get("category") or "-")

        entry = grouped[(category, raw)]
        entry["count"] += 1
        entry["reason"] = record.get("reason")
        entry["top_cut_id"] = record.get("top_cut_id")
        conf = record.get("confidence")
        if isinstance(conf, (int, float)):
            entry["confidence_sum"] += float(conf)

        ts = record.get("ts")
        if isinstance(ts, str) and (entry["latest_ts"] is None or ts > entry["latest_ts"]):
            entry["latest_ts"] = ts

    rows = [
        {
            "category": category,
            "raw": raw,
            "count": entry["count"],
            "reason": entry["reason"],
            "top_cut_id": entry["top_cut_id"],
            "avg_confidence": round(entry["confidence_sum"] / entry["count"], 4),
            "latest_ts": entry["latest_ts"],
        }
        for (category, raw), entry in grouped.items()
    ]
    rows.sort(key=lambda row: (-row["count"], row["category"], row["raw"]))
    return rows


def render_table(rows: list[dict], top: int) -> str:
    head = "count | category | raw | reason | top_cut_id | avg_confidence | latest_ts"
    sep = "--- | --- | --- | --- | --- | --- | ---"
    lines = [head, sep]
    for row in rows[:top]:
        lines.append(
            f"{row['count']} | {row['category']} | {row['raw']} | {row['reason']} | "
            f"{row['top_cut_id']} | {row['avg_confidence']} | {row['latest_ts']}"
        )
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    rows = summarize(load_records(Path(args.input)))

    if args.format == "json":
        output = json.dumps(rows[: args.top], ensure_ascii=False, indent=2)
    else:
        output = render_table(rows, args.top)

    if args.output:
        Path(args.output).write_text(output + "\n", encoding="utf-8")
    else:
        print(output)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
