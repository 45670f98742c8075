from datetime import UTC, datetime
from typing import Annotated

from pydantic import AfterValidator


def _to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


UTCDateTime = Annotated[datetime, AfterValidator(_to_utc)]
"""
Datetime object that is cast to UTC.
Naive datetimes are assumed to already be in UTC.

Not applied when table models are reloaded from the database
(sqlite drops the timezone), use :func:`.as_utc` when comparing those.
"""


def as_utc(value: datetime) -> datetime:
    """Non-annotated version of :data:`.UTCDateTime` for use outside of models"""
    return _to_utc(value)
