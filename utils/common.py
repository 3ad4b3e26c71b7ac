"""
Common utilities used across the project.
"""

import uuid
from datetime import datetime, timezone


def generate_request_id() -> str:
    """Unique request ID for logging and tracing (12 hex chars)."""
    return uuid.uuid4().hex[:12]


def generate_timetable_id() -> str:
    return uuid.uuid4().hex


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
