from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Naive UTC timestamp, matching the DateTime columns of the datastore."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
