"""
Utility functions for the application.
"""
from typing import Any, Dict, Optional
from datetime import datetime, timezone
from fastapi import Response

# Response header telling clients whether a listing is live or sample data
DATA_SOURCE_HEADER = "X-Data-Source"


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, matching how timestamps are stored."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def format_message(message: str) -> Dict[str, Any]:
    """Format a plain API message."""
    return {"message": message}


def format_error(message: str, error: Optional[Any] = None) -> Dict[str, Any]:
    """Format error response."""
    response = {"message": message}
    if error is not None:
        response["error"] = error
    return response


def mark_data_source(response: Response, listing) -> None:
    """Set the data source header from a store Listing."""
    response.headers[DATA_SOURCE_HEADER] = "degraded" if listing.degraded else "live"
