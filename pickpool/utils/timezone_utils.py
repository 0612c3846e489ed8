"""
Timezone utility functions for the pick'em pool
"""

from datetime import datetime, timezone

import pytz
from flask import current_app, has_app_context


def get_app_timezone():
    """Get the application's configured timezone"""
    timezone_name = (
        current_app.config.get("TIMEZONE", "UTC") if has_app_context() else "UTC"
    )
    try:
        return pytz.timezone(timezone_name)
    except pytz.UnknownTimeZoneError:
        return pytz.UTC


def convert_to_app_timezone(dt):
    """Convert a datetime to the application's timezone"""
    if dt is None:
        return None

    # If datetime is naive, assume it's UTC
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(get_app_timezone())


def parse_kickoff(value):
    """Parse an ISO timestamp from the odds feed ("2025-09-07T17:00Z")"""
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def format_game_time(dt, format_str="%a %m/%d at %I:%M %p"):
    """Format a game time in the application's timezone"""
    if dt is None:
        return "TBD"

    return convert_to_app_timezone(dt).strftime(format_str)
