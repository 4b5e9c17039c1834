from datetime import datetime, timezone


def utcnow() -> datetime:
    """Naive UTC timestamp truncated to the millisecond precision BSON stores."""
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)
