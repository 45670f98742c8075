from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import UTC, datetime, timedelta
from enum import StrEnum
from typing import Awaitable, Callable

from pydantic import BaseModel, Field

from sendlater.exceptions import InvalidScheduleTime
from sendlater.types import UTCDateTime, as_utc

OnFire = Callable[[str], Awaitable[None]]
"""Coroutine function called with the job id when a job fires"""


class JobState(StrEnum):
    armed = "armed"
    """Waiting for its due time"""
    fired = "fired"
    """Due time elapsed and the delivery pipeline was invoked"""
    cancelled = "cancelled"
    """Removed before it fired"""


class ScheduledJob(BaseModel):
    """
    A pending future invocation of the delivery pipeline.

    ``fired`` and ``cancelled`` are terminal,
    a job that leaves either of them is a new arming with a new token.
    """

    job_id: str
    due_at: UTCDateTime
    payload: dict = Field(default_factory=dict)
    state: JobState = JobState.armed
    token: str = Field("", description="Identifies a single arming of a job id", exclude=True)


def check_due_at(due_at: datetime) -> timedelta:
    """
    Delay until ``due_at`` , raising if it is not in the future.

    Naive datetimes are treated as UTC.
    """
    delay = as_utc(due_at) - datetime.now(UTC)
    if delay <= timedelta(0):
        raise InvalidScheduleTime("Scheduled time must be in the future")
    return delay


class BaseJobScheduler(ABC):
    """
    Run the delivery pipeline for a job id at a future time.

    There is one job per job id, and a job id is by convention the id of the email
    it delivers. Subclasses differ in where jobs are kept:
    in memory (:class:`.LocalJobScheduler`) or in a redis queue (:class:`.QueueJobScheduler`).

    None of the operations retry on their own,
    errors from the backing store are raised as :class:`.SchedulingBackendError` .
    """

    @abstractmethod
    async def schedule_job(self, job_id: str, due_at: datetime) -> str:
        """
        Arm a job for ``job_id`` at ``due_at`` , replacing any existing job with that id.

        Returns:
            str: the job id

        Raises:
            :class:`.InvalidScheduleTime` if ``due_at`` is not in the future
        """

    @abstractmethod
    async def cancel_job(self, job_id: str) -> bool:
        """
        Cancel a pending job. Never raises.

        Returns:
            bool: ``True`` if a pending job was removed, ``False`` otherwise.
        """

    @abstractmethod
    async def reschedule_job(self, job_id: str, due_at: datetime) -> str:
        """
        Move a job to a new due time, keeping its id.

        If there is no record of the job, a fresh one is armed.

        Raises:
            :class:`.InvalidScheduleTime` if ``due_at`` is not in the future
            :class:`.AlreadyCompleted` if the job already ran to completion
            :class:`.InFlight` if the job is executing
        """

    @abstractmethod
    async def start(self) -> None:
        """Start the backing store. Idempotent."""

    @abstractmethod
    async def shutdown(self) -> None:
        """Stop the backing store and release its resources. Idempotent."""

    @abstractmethod
    def is_running(self) -> bool:
        pass
