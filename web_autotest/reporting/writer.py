# web_autotest/reporting/writer.py
"""
Writers to persist suite reports as JUnit XML and a JSON summary.
"""

from __future__ import annotations

from pathlib import Path

from .schemas import SuiteResult


def write_junit(text: str, path: Path | str) -> Path:
    """Write rendered JUnit XML to `path`, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def write_summary(result: SuiteResult, out_dir: Path) -> Path:
    """
    Write the whole SuiteResult into out_dir/report.json.
    Returns the json path.
    """
    out_dir.mkdir(parents=True, exist_ok=True)
    json_path = out_dir / "report.json"
    json_path.write_text(result.model_dump_json(indent=2), encoding="utf-8")
    return json_path
