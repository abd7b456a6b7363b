"""Small value helpers shared by the database layer"""

import uuid
from datetime import datetime, timezone
from typing import Optional, Union


def generate_id(prefix: Optional[str] = None) -> str:
    """Generate a new row identifier"""
    value = str(uuid.uuid4())
    return f"{prefix}_{value}" if prefix else value


def to_db_timestamp(value: datetime) -> str:
    """Format a datetime the way rows store it (UTC, millisecond precision, Z suffix)"""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def utc_now() -> str:
    """Current UTC timestamp in storage format"""
    return to_db_timestamp(datetime.now(timezone.utc))


def parse_timestamp(value: Union[str, datetime]) -> datetime:
    """Parse a stored timestamp into an aware datetime"""
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def to_flag(value: bool) -> int:
    """SQLite keeps booleans as 0/1"""
    return 1 if value else 0
