from pathlib import Path
from typing import Dict, Any
import yaml
from .errors import ValidationError


def load_topics(path: str = "topics.yaml") -> Dict[str, Any]:
    """
    Load a topic watchlist from YAML.
    Expected shape:
      topics:
        name: "Morning Brief"
        queries: ["AI regulation", "fusion energy"]
    """
    p = Path(path)
    if not p.exists():
        raise ValidationError(f"Topics file not found: {path}")

    try:
        data = yaml.safe_load(p.read_text()) or {}
    except yaml.YAMLError as e:
        raise ValidationError(f"Invalid topics YAML: {e}")

    if not isinstance(data, dict) or not isinstance(data.get("topics"), dict):
        raise ValidationError("Topics file must contain a 'topics' object.")

    topics = data["topics"]
    name = topics.get("name") or "Topic Brief"
    queries = topics.get("queries")

    if not isinstance(queries, list) or not queries:
        raise ValidationError("'topics.queries' must be a non-empty list.")

    norm = []
    seen = set()
    for q in queries:
        if not isinstance(q, str) or not q.strip():
            raise ValidationError("All topic queries must be non-empty strings.")
        q = " ".join(q.split())
        if q.lower() in seen:
            continue
        seen.add(q.lower())
        norm.append(q)

    return {"name": name, "queries": norm}
