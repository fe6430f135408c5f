"""Prefixed ID generation utility."""

import uuid


def generate_id(prefix: str) -> str:
    """Generate a prefixed unique ID.

    Args:
        prefix: The prefix (e.g., "proj_", "spr_", "wi_").

    Returns:
        A string like "proj_a1b2c3d4e5f6a7b8".
    """
    short_uuid = uuid.uuid4().hex[:16]
    return f"{prefix}{short_uuid}"


def parse_item_key(key: str) -> tuple[str, int] | None:
    """Split ``PROJ-42`` into ``("PROJ", 42)``; None when the key is malformed."""
    project_key, sep, number = key.strip().rpartition("-")
    if not sep or not project_key or not number.isdigit():
        return None
    return project_key.upper(), int(number)
