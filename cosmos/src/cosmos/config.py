import os
import logging
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)

NEWSAPI_BASE_URL = "https://newsapi.org/v2"
PERPLEXITY_BASE_URL = "https://api.perplexity.ai"

# Values copied from .env.example that were never filled in
_PLACEHOLDER_KEYS = {"", "your_key_here", "changeme"}

def load_env_file(path: str = ".env"):
    """
    Load environment variables from a .env file into os.environ.
    Does not override existing strings.
    """
    p = Path(path)
    if not p.exists():
        return

    try:
        with open(p) as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith('#'):
                    continue
                if line.startswith('export '):
                    line = line[len('export '):]
                if '=' in line:
                    key, val = line.split('=', 1)
                    key = key.strip()
                    val = val.strip().strip('"').strip("'")
                    if key not in os.environ:
                        os.environ[key] = val
    except OSError as e:
        logger.warning(f"Failed to load .env: {e}")

# Load on import
load_env_file()

def _get_key(name: str) -> Optional[str]:
    key = os.environ.get(name)
    if key is None or key.strip() in _PLACEHOLDER_KEYS:
        return None
    return key.strip()

def get_newsapi_key() -> Optional[str]:
    """NewsAPI key, or None when missing."""
    return _get_key("NEWSAPI_API_KEY")

def get_perplexity_key() -> Optional[str]:
    """Perplexity key, or None when missing."""
    return _get_key("PERPLEXITY_API_KEY")

def get_newsapi_base_url() -> str:
    return os.environ.get("NEWSAPI_BASE_URL", NEWSAPI_BASE_URL).rstrip("/")

def get_perplexity_base_url() -> str:
    return os.environ.get("PERPLEXITY_BASE_URL", PERPLEXITY_BASE_URL).rstrip("/")

def get_http_timeout(default: float) -> float:
    """
    HTTP timeout in seconds. COSMOS_HTTP_TIMEOUT overrides the
    per-client default when it parses as a positive number.
    """
    raw = os.environ.get("COSMOS_HTTP_TIMEOUT")
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid COSMOS_HTTP_TIMEOUT={raw!r}")
        return default
    if value <= 0:
        logger.warning(f"Ignoring non-positive COSMOS_HTTP_TIMEOUT={raw!r}")
        return default
    return value

def get_perplexity_models() -> Dict[str, str]:
    """Model overrides keyed by size ("small", "large")."""
    models = {}
    small = os.environ.get("PERPLEXITY_SMALL_MODEL")
    large = os.environ.get("PERPLEXITY_LARGE_MODEL")
    if small:
        models["small"] = small
    if large:
        models["large"] = large
    return models
