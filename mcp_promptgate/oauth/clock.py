# mcp_promptgate/oauth/clock.py
from datetime import datetime, timezone
from typing import Callable

# Time source injected into the stores so expiry can be tested deterministically
Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)
