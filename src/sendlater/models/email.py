"""
Scheduled emails.

An email is created in the ``PENDING`` state together with a scheduled job
whose id is the email's id. When the job fires, the delivery pipeline moves it
to ``SENT`` or ``FAILED`` - see :mod:`sendlater.services.delivery` .
"""

import uuid
from datetime import UTC, datetime
from enum import StrEnum
from typing import Optional

from pydantic import EmailStr, field_validator
from sqlmodel import Field

from sendlater.models.base import SQLModel
from sendlater.models.mixins import TableMixin, TableReadMixin
from sendlater.types import UTCDateTime


class EmailStatus(StrEnum):
    """
    Delivery status of an email.

    Status moves from ``PENDING`` to ``SENT`` or ``FAILED`` once per delivery attempt.
    A ``FAILED`` email can be moved back to ``PENDING`` by scheduling it for a new time,
    a ``SENT`` email can't be changed.
    """

    PENDING = "PENDING"
    """Waiting for its scheduled time"""
    SENT = "SENT"
    """Accepted by the outbound transport"""
    FAILED = "FAILED"
    """Rejected by the outbound transport, or errored while processing"""


def _future(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value <= datetime.now(UTC):
        raise ValueError("Scheduled date must be in the future")
    return value


class EmailBase(SQLModel):
    """Fields shared by all models in the Email family"""

    to: EmailStr = Field(max_length=320, description="Recipient address")
    subject: str = Field(min_length=1, max_length=500)
    body: str = Field(min_length=1)
    scheduled_at: UTCDateTime = Field(description="When the email should be sent")


class Email(EmailBase, TableMixin, table=True):
    """
    ORM model for an email.

    ``email_id`` doubles as the id of its scheduled job,
    so there is at most one armed job per email.
    """

    __tablename__ = "emails"

    email_id: str = Field(default_factory=lambda: uuid.uuid4().hex, primary_key=True)
    status: EmailStatus = Field(default=EmailStatus.PENDING, index=True)
    failure_reason: Optional[str] = Field(default=None)
    job_id: Optional[str] = Field(
        default=None,
        description="Id of the scheduled job that will deliver this email",
    )


class EmailCreate(EmailBase):
    """Email as submitted to be scheduled"""

    @field_validator("scheduled_at", mode="after")
    @classmethod
    def scheduled_in_future(cls, value: datetime) -> datetime:
        return _future(value)


class EmailUpdate(SQLModel):
    """Partial update of an unsent email. Changing ``scheduled_at`` reschedules it."""

    to: Optional[EmailStr] = Field(default=None, max_length=320)
    subject: Optional[str] = Field(default=None, min_length=1, max_length=500)
    body: Optional[str] = Field(default=None, min_length=1)
    scheduled_at: Optional[UTCDateTime] = None

    @field_validator("scheduled_at", mode="after")
    @classmethod
    def scheduled_in_future(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _future(value)


class EmailRead(EmailBase, TableReadMixin):
    """Version of Email returned from the API"""

    email_id: str
    status: EmailStatus
    failure_reason: Optional[str] = None
    job_id: Optional[str] = None
