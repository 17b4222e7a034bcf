from datetime import datetime, timezone
from pathlib import Path
from typing import List, Dict, Any, Optional

from ..search.service import parse_timestamp

def format_age(published_at: str, now: Optional[datetime] = None) -> str:
    """Relative age for display: "Just now", "5h ago", "3d ago", else the date."""
    dt = parse_timestamp(published_at)
    if dt.year == 1:
        return "Unknown date"
    now = now or datetime.now(timezone.utc)
    hours = int((now - dt).total_seconds() // 3600)

    if hours < 1:
        return "Just now"
    if hours < 24:
        return f"{hours}h ago"
    if hours < 168:
        return f"{hours // 24}d ago"
    return dt.date().isoformat()

def render_results_md(
    data: List[Dict[str, Any]],
    *,
    heading: str,
    level: int = 1,
    now: Optional[datetime] = None,
) -> List[str]:
    """Markdown lines for a list of result dumps (snake_case keys)."""
    lines = [f"{'#' * level} {heading}", ""]
    if not data:
        lines.append("- No results.")
        lines.append("")
        return lines

    sub = '#' * (level + 1)
    for item in data:
        lines.append(f"{sub} {item.get('title')}")
        lines.append(
            f"**Source**: {item.get('source')} | **Type**: {item.get('type')} "
            f"| **Published**: {format_age(item.get('published_at') or '', now=now)}"
        )
        description = item.get('description')
        if description:
            lines.append("")
            lines.append(description)
        if item.get('url'):
            lines.append(f"[Read Article]({item.get('url')})")
        lines.append("")
    return lines

def export_results_md(data: List[Dict[str, Any]], path: Path, *, query: str):
    """Export search results to Markdown."""
    lines = render_results_md(data, heading=f"Search: {query}")
    with open(path, 'w') as f:
        f.write("\n".join(lines))
