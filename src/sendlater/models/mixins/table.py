from datetime import UTC, datetime
from typing import Optional

from sqlmodel import Field, SQLModel

from sendlater.types import UTCDateTime


class TableMixin(SQLModel):
    """Mixin to add base elements to all tables"""

    created_at: Optional[UTCDateTime] = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: Optional[UTCDateTime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column_kwargs={"onupdate": lambda: datetime.now(UTC)},
    )


class TableReadMixin(SQLModel):
    """
    Mixin to add base elements to the read version of all tables
    """

    created_at: UTCDateTime
    updated_at: UTCDateTime
