from datetime import datetime, timezone


def utcnow():
    """Naive UTC timestamp, the form every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value):
    """Normalizes an aware datetime to naive UTC; naive values pass through."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def isoformat(value):
    return value.isoformat() if value else None
