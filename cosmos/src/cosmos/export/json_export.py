import json
from pathlib import Path
from typing import Any, Dict

from ..models.search import SearchReport

def report_to_dict(report: SearchReport) -> Dict[str, Any]:
    """camelCase results plus the per-source outcome summary."""
    return {
        "query": report.query,
        "options": report.options.model_dump(mode="json", by_alias=True),
        "results": [r.model_dump(mode="json", by_alias=True) for r in report.results],
        "sources": [
            {"source": o.source, "count": len(o.results), "error": o.error}
            for o in report.outcomes
        ],
    }

def export_report_json(report: SearchReport, path: Path):
    """Write a search report to a JSON file."""
    with open(path, 'w') as f:
        json.dump(report_to_dict(report), f, indent=2, default=str)
