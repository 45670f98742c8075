from typing import Callable as C
from unittest.mock import MagicMock

from sqlmodel import Session

from sendlater.models import Email, EmailStatus
from sendlater.services.delivery import DeliveryPipeline
from sendlater.services.transport import SendResult
from sendlater.store import EmailStore

from ..fixtures.mail import FakeTransport


def _reload(session: Session, email: Email) -> Email:
    session.expire_all()
    return session.get(Email, email.email_id)


async def test_sends_pending(
    pipeline: DeliveryPipeline, email: C[..., Email], session: Session, transport: FakeTransport
):
    mail = email(failure_reason="a previous failure")
    await pipeline.process(mail.email_id)

    assert transport.sent == [(mail.to, mail.subject, mail.body)]
    sent = _reload(session, mail)
    assert sent.status == EmailStatus.SENT
    assert sent.failure_reason is None


async def test_transport_failure(
    pipeline: DeliveryPipeline, email: C[..., Email], session: Session, transport: FakeTransport
):
    transport.result = SendResult(success=False, error="The from address is not verified")
    mail = email()
    await pipeline.process(mail.email_id)

    failed = _reload(session, mail)
    assert failed.status == EmailStatus.FAILED
    assert failed.failure_reason == "The from address is not verified"


async def test_transport_failure_no_reason(
    pipeline: DeliveryPipeline, email: C[..., Email], session: Session, transport: FakeTransport
):
    transport.result = SendResult(success=False)
    mail = email()
    await pipeline.process(mail.email_id)
    assert _reload(session, mail).failure_reason == "Unknown error"


async def test_transport_raises(
    pipeline: DeliveryPipeline, email: C[..., Email], session: Session, transport: FakeTransport
):
    transport.exc = RuntimeError("connection reset")
    mail = email()
    await pipeline.process(mail.email_id)

    failed = _reload(session, mail)
    assert failed.status == EmailStatus.FAILED
    assert failed.failure_reason == "connection reset"


async def test_skips_not_pending(
    pipeline: DeliveryPipeline, email: C[..., Email], session: Session, transport: FakeTransport
):
    sent = email(status=EmailStatus.SENT)
    failed = email(status=EmailStatus.FAILED, failure_reason="blocked")

    await pipeline.process(sent.email_id)
    await pipeline.process(failed.email_id)

    assert transport.sent == []
    assert _reload(session, failed).failure_reason == "blocked"


async def test_skips_missing(pipeline: DeliveryPipeline, transport: FakeTransport):
    await pipeline.process("does-not-exist")
    assert transport.sent == []


async def test_duplicate_process_sends_once(
    pipeline: DeliveryPipeline, email: C[..., Email], transport: FakeTransport
):
    mail = email()
    await pipeline.process(mail.email_id)
    await pipeline.process(mail.email_id)
    assert len(transport.sent) == 1


async def test_never_raises(transport: FakeTransport):
    """Even if the email can't be loaded or marked failed, processing doesn't raise"""
    store = MagicMock(spec=EmailStore)
    store.get.side_effect = RuntimeError("no such table: emails")
    store.update.side_effect = RuntimeError("no such table: emails")
    pipeline = DeliveryPipeline(store, transport)

    await pipeline.process("abc")

    store.update.assert_called_once()
    assert transport.sent == []
