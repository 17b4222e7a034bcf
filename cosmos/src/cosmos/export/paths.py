import re
from pathlib import Path

_SLUG_RE = re.compile(r"[^a-z0-9]+")

def slugify(text: str, max_len: int = 60) -> str:
    slug = _SLUG_RE.sub("-", (text or "").lower()).strip("-")
    return slug[:max_len].rstrip("-") or "query"

def get_export_dir(query: str, root: str = "./exports") -> Path:
    """
    Get (and create) export directory for a query.
    Structure: {root}/{slugified query}/
    """
    path = Path(root) / slugify(query)
    path.mkdir(parents=True, exist_ok=True)
    return path
