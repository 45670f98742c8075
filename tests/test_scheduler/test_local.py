"""
End-to-end scheduling in local mode: email in the database,
timers in memory, delivery through a fake transport.
"""

import asyncio
from datetime import UTC, datetime, timedelta
from typing import Callable as C

import pytest
from sqlmodel import Session

from sendlater.exceptions import InvalidScheduleTime
from sendlater.models import Email, EmailStatus
from sendlater.scheduler import LocalJobScheduler
from sendlater.services.transport import SendResult

from ..fixtures.mail import FakeTransport


def _in(seconds: float) -> datetime:
    return datetime.now(UTC) + timedelta(seconds=seconds)


def _reload(session: Session, email: Email) -> Email:
    session.expire_all()
    return session.get(Email, email.email_id)


async def test_cancel_keeps_pending(
    local_scheduler: LocalJobScheduler,
    email: C[..., Email],
    session: Session,
    transport: FakeTransport,
):
    """An email whose job is cancelled is never sent and stays pending"""
    mail = email()
    await local_scheduler.schedule_job(mail.email_id, _in(0.3))
    assert await local_scheduler.cancel_job(mail.email_id)

    await asyncio.sleep(0.6)
    assert transport.sent == []
    assert _reload(session, mail).status == EmailStatus.PENDING


async def test_fire_sends(
    local_scheduler: LocalJobScheduler,
    email: C[..., Email],
    session: Session,
    transport: FakeTransport,
):
    mail = email()
    job_id = await local_scheduler.schedule_job(mail.email_id, _in(0.2))
    assert job_id == mail.email_id

    await asyncio.sleep(0.6)
    assert transport.sent == [(mail.to, mail.subject, mail.body)]
    sent = _reload(session, mail)
    assert sent.status == EmailStatus.SENT
    assert sent.failure_reason is None


async def test_fire_fails(
    local_scheduler: LocalJobScheduler,
    email: C[..., Email],
    session: Session,
    transport: FakeTransport,
):
    transport.result = SendResult(success=False, error="blocked")
    mail = email()
    await local_scheduler.schedule_job(mail.email_id, _in(0.2))

    await asyncio.sleep(0.6)
    failed = _reload(session, mail)
    assert failed.status == EmailStatus.FAILED
    assert failed.failure_reason == "blocked"


async def test_reschedule_fires_at_new_time(
    local_scheduler: LocalJobScheduler,
    email: C[..., Email],
    session: Session,
    transport: FakeTransport,
):
    mail = email()
    await local_scheduler.schedule_job(mail.email_id, _in(10))
    job_id = await local_scheduler.reschedule_job(mail.email_id, _in(0.2))
    assert job_id == mail.email_id

    await asyncio.sleep(0.6)
    assert len(transport.sent) == 1
    assert _reload(session, mail).status == EmailStatus.SENT


async def test_fire_skips_non_pending(
    local_scheduler: LocalJobScheduler,
    email: C[..., Email],
    session: Session,
    transport: FakeTransport,
):
    """A job for an email that was already sent does nothing"""
    mail = email(status=EmailStatus.SENT)
    await local_scheduler.schedule_job(mail.email_id, _in(0.1))

    await asyncio.sleep(0.4)
    assert transport.sent == []
    assert _reload(session, mail).status == EmailStatus.SENT


async def test_schedule_rejects_past(local_scheduler: LocalJobScheduler):
    with pytest.raises(InvalidScheduleTime):
        await local_scheduler.schedule_job("job", _in(-5))
    with pytest.raises(InvalidScheduleTime):
        await local_scheduler.reschedule_job("job", _in(0))


async def test_shutdown_clears_timers(
    local_scheduler: LocalJobScheduler, transport: FakeTransport
):
    from sendlater import scheduler

    await local_scheduler.schedule_job("job", _in(0.2))
    assert len(local_scheduler.store) == 1

    await scheduler.shutdown()
    assert len(local_scheduler.store) == 0
    assert not local_scheduler.is_running()
    assert transport.closed

    await asyncio.sleep(0.4)
    assert transport.sent == []
