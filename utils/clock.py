from datetime import datetime, timezone


class SystemClock:
    """Naive UTC timestamps, matching how the DateTime columns are stored."""

    def now(self):
        return datetime.now(timezone.utc).replace(tzinfo=None)


system_clock = SystemClock()
