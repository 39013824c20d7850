from __future__ import annotations

import datetime
from collections.abc import Callable

Clock = Callable[[], int]


def utc_now() -> int:
    """Current time as whole Unix seconds, the unit every model stores."""
    return int(datetime.datetime.now(datetime.UTC).timestamp())
