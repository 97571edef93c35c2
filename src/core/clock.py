"""Wall-clock access for the outer layers.

The EMI engine never reads the clock itself; handlers and jobs call
``utcnow()`` once and pass the value down.
"""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Current UTC time as a naive datetime (the storage convention)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
