from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Timezone-aware current time; expiry comparisons are always done in UTC."""
    return datetime.now(timezone.utc)
