"""Tests for maintenance scripts."""

import importlib.util
import json
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent


def _load(name):
    path = ROOT / "scripts" / f"{name}.py"
    spec = importlib.util.spec_from_file_location(f"cut_lens_script_{name}", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_validate_taxonomy_data_passes(capsys):
    module = _load("validate_taxonomy_data")

    assert module.main([]) == 0
    assert "[taxonomy-check] OK" in capsys.readouterr().out


def test_summarize_unknown_queue(tmp_path, capsys):
    module = _load("summarize_unknown_queue")
    queue = tmp_path / "unknown.jsonl"
    records = [
        {"ts": "2026-01-01T00:00:00", "raw": "פילה חדש", "category": None, "confidence": 0.0, "reason": "no_match"},
        {"ts": "2026-01-02T00:00:00", "raw": "פילה חדש", "category": None, "confidence": 0.2, "reason": "no_match"},
        {"ts": "2026-01-01T00:00:00", "raw": "אנטריקוט בקר", "category": "בקר", "confidence": 0.67,
         "reason": "low_confidence", "top_cut_id": 1},
    ]
    queue.write_text("\n".join(json.dumps(r, ensure_ascii=False) for r in records) + "\nnot json\n", encoding="utf-8")

    assert module.main(["--input", str(queue), "--format", "json"]) == 0

    rows = json.loads(capsys.readouterr().out)
    assert rows[0]["raw"] == "פילה חדש"
    assert rows[0]["count"] == 2
    assert rows[0]["avg_confidence"] == 0.1
    assert rows[0]["latest_ts"] == "2026-01-02T00:00:00"
    assert rows[1]["top_cut_id"] == 1
