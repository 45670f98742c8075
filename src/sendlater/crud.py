from datetime import UTC, datetime
from typing import Optional

from sqlmodel import Session, select

from sendlater.models import Email, EmailCreate, EmailStatus


def create_email(*, session: Session, email_create: EmailCreate) -> Email:
    db_obj = Email.model_validate(email_create)
    db_obj.job_id = db_obj.email_id
    session.add(db_obj)
    session.commit()
    session.refresh(db_obj)
    return db_obj


def get_email(*, session: Session, email_id: str) -> Optional[Email]:
    return session.exec(select(Email).where(Email.email_id == email_id)).first()


def update_email(*, session: Session, email: Email, **kwargs) -> Email:
    for key, value in kwargs.items():
        setattr(email, key, value)
    email.updated_at = datetime.now(UTC)
    session.add(email)
    session.commit()
    session.refresh(email)
    return email


def delete_email(*, session: Session, email: Email) -> None:
    session.delete(email)
    session.commit()


def emails_stmt(status: Optional[EmailStatus] = None):  # noqa: ANN201
    """
    Select statement for listing emails, newest first, optionally filtered by status.

    Returned as a statement rather than results so it can be paginated.
    """
    stmt = select(Email)
    if status is not None:
        stmt = stmt.where(Email.status == status)
    return stmt.order_by(Email.created_at.desc(), Email.email_id)
