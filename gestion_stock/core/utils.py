from datetime import datetime, timezone


def utcnow() -> datetime:
    """Horodatage UTC avec fuseau, tel que stocké dans les colonnes DateTime(timezone=True)."""
    return datetime.now(timezone.utc)
