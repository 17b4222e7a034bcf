import json
import traceback
from typing import Optional

class CosmosError(Exception):
    """Base exception for cosmos"""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

class ValidationError(CosmosError):
    """Input validation errors"""
    pass

class ProviderError(CosmosError):
    """Upstream API errors (missing key, bad payload, and the subclasses below)"""
    pass

class UpstreamHTTPError(ProviderError):
    """Upstream answered with a non-success status"""
    def __init__(self, message: str, status: Optional[int] = None, details: dict = None):
        details = dict(details or {})
        if status is not None:
            details.setdefault("status", status)
        super().__init__(message, details)
        self.status = status

class NetworkError(ProviderError):
    """Transport failure before any response arrived"""
    pass

class UnknownError(CosmosError):
    """Unexpected errors"""
    pass

def format_error(e: Exception) -> str:
    """Format exception as the JSON error envelope."""

    if isinstance(e, CosmosError):
        error_type = e.__class__.__name__
        message = e.message
        details = e.details
    else:
        error_type = "UnknownError"
        message = str(e)
        details = {
            "traceback": traceback.format_exc().splitlines()
        }

    payload = {
        "ok": False,
        "error": {
            "type": error_type,
            "message": message,
            "details": details
        },
        "meta": {
            "version": 1
        }
    }

    return json.dumps(payload, indent=2)
