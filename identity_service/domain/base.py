from datetime import UTC, datetime


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the DateTime columns used by the tables"""
    return datetime.now(UTC).replace(tzinfo=None)
