from typing import Dict

from ..models.search import SearchReport
from . import csv_export, json_export, md_export
from .paths import get_export_dir


def export_report(report: SearchReport, out_root: str = "./exports") -> Dict[str, str]:
    """Write JSON, CSV and Markdown for one search. Returns the file paths."""
    export_dir = get_export_dir(report.query, root=out_root)
    rows = [r.model_dump(mode="json") for r in report.results]

    json_path = export_dir / "results.json"
    csv_path = export_dir / "results.csv"
    md_path = export_dir / "results.md"

    json_export.export_report_json(report, json_path)
    csv_export.export_results_csv(rows, csv_path)
    md_export.export_results_md(rows, md_path, query=report.query)

    paths = {"json": str(json_path), "markdown": str(md_path)}
    if rows:
        paths["csv"] = str(csv_path)
    return paths
