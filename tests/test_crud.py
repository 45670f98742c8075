from datetime import UTC, datetime, timedelta
from typing import Callable as C

import pytest
from pydantic import ValidationError
from sqlmodel import Session

from sendlater import crud
from sendlater.models import Email, EmailCreate, EmailStatus
from sendlater.store import EmailStore


def test_create_email(session: Session, default_email: dict):
    email = crud.create_email(session=session, email_create=EmailCreate(**default_email))
    assert len(email.email_id) == 32
    assert email.job_id == email.email_id
    assert email.status == EmailStatus.PENDING
    assert email.created_at is not None


def test_emails_stmt(session: Session, email: C[..., Email]):
    pending = [email() for _ in range(3)]
    failed = email(status=EmailStatus.FAILED, failure_reason="blocked")

    everything = session.exec(crud.emails_stmt()).all()
    assert {e.email_id for e in everything} == {e.email_id for e in [*pending, failed]}

    only_failed = session.exec(crud.emails_stmt(status=EmailStatus.FAILED)).all()
    assert [e.email_id for e in only_failed] == [failed.email_id]


def test_update_email(session: Session, email: C[..., Email]):
    mail = email()
    before = mail.updated_at
    updated = crud.update_email(session=session, email=mail, subject="changed")
    assert updated.subject == "changed"
    assert updated.updated_at.replace(tzinfo=UTC) >= before.replace(tzinfo=UTC)


def test_store(maker, email: C[..., Email]):
    """The store works across sessions, and its results outlive them"""
    mail = email()
    store = EmailStore(maker)

    got = store.get(mail.email_id)
    assert got.subject == mail.subject

    updated = store.update(mail.email_id, status=EmailStatus.SENT)
    assert updated.status == EmailStatus.SENT
    assert store.get(mail.email_id).status == EmailStatus.SENT

    assert store.delete(mail.email_id)
    assert store.get(mail.email_id) is None


def test_store_missing(maker):
    store = EmailStore(maker)
    assert store.get("nope") is None
    assert store.update("nope", status=EmailStatus.SENT) is None
    assert not store.delete("nope")


def test_email_create_validation(default_email: dict):
    with pytest.raises(ValidationError, match="Scheduled date must be in the future"):
        EmailCreate(**{**default_email, "scheduled_at": datetime.now(UTC) - timedelta(seconds=1)})

    naive = datetime.now() + timedelta(days=1)
    created = EmailCreate(**{**default_email, "scheduled_at": naive.replace(tzinfo=None)})
    assert created.scheduled_at.tzinfo is UTC
