"""
Helper Functions

Contains utility functions used throughout the application.
"""

import uuid
from datetime import datetime, timezone
from typing import Dict, Optional


def new_id() -> str:
    """Generate a new record identifier."""
    return str(uuid.uuid4())


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_iso(value: Optional[datetime]) -> Optional[str]:
    """Serialize a datetime for JSON payloads."""
    return value.isoformat() if value is not None else None


def parse_iso(value) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp coming from a JSON payload or a datastore."""
    if value is None or isinstance(value, datetime):
        return value
    parsed = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def get_user_identity(request_obj=None) -> Dict[str, Optional[str]]:
    """Extract user identity information from request."""
    if request_obj is None:
        from flask import request
        request_obj = request

    user_ip = getattr(request_obj, 'remote_addr', None) or 'unknown'
    body = None
    if hasattr(request_obj, 'get_json'):
        body = request_obj.get_json(silent=True)

    return {
        'user_ip': user_ip,
        'player_id': body.get('player_id') if isinstance(body, dict) else None
    }
