from sqlmodel import Session

from sendlater import crud, scheduler
from sendlater.exceptions import EmailAlreadySent, EmailNotFound
from sendlater.logging import init_logger
from sendlater.models import Email, EmailCreate, EmailStatus, EmailUpdate
from sendlater.types import as_utc


def get_email_or_raise(*, session: Session, email_id: str) -> Email:
    email = crud.get_email(session=session, email_id=email_id)
    if email is None:
        raise EmailNotFound(f"Email {email_id} not found")
    return email


async def create_email(*, session: Session, email_create: EmailCreate) -> Email:
    """
    Store an email and schedule its delivery.

    If it can't be scheduled, the email is deleted again and the error is raised.
    """
    logger = init_logger("services.emails")
    email = crud.create_email(session=session, email_create=email_create)
    try:
        job_id = await scheduler.schedule_job(email.email_id, email.scheduled_at)
    except Exception:
        logger.warning("Could not schedule email %s, removing it", email.email_id)
        crud.delete_email(session=session, email=email)
        raise
    if job_id != email.job_id:
        email = crud.update_email(session=session, email=email, job_id=job_id)
    logger.info("Created email %s scheduled for %s", email.email_id, email.scheduled_at)
    return email


async def update_email(*, session: Session, email_id: str, email_update: EmailUpdate) -> Email:
    """
    Update an unsent email.

    If ``scheduled_at`` changes, a pending email's job is rescheduled.
    A failed email gets a new job and is reset to pending.

    Raises:
        :class:`.EmailNotFound`
        :class:`.EmailAlreadySent`
    """
    logger = init_logger("services.emails")
    email = get_email_or_raise(session=session, email_id=email_id)
    if email.status == EmailStatus.SENT:
        raise EmailAlreadySent(f"Email {email_id} has already been sent")

    updates = email_update.model_dump(exclude_unset=True, exclude_none=True)
    new_time = updates.get("scheduled_at")
    if new_time is not None and as_utc(new_time) != as_utc(email.scheduled_at):
        if email.status == EmailStatus.PENDING and email.job_id:
            updates["job_id"] = await scheduler.reschedule_job(email.job_id, new_time)
        else:
            updates["job_id"] = await scheduler.schedule_job(email.email_id, new_time)
            updates["status"] = EmailStatus.PENDING
            updates["failure_reason"] = None
        logger.info("Moved email %s to %s", email_id, new_time)

    return crud.update_email(session=session, email=email, **updates)


async def delete_email(*, session: Session, email_id: str) -> None:
    """
    Cancel an email's job, if it has one that hasn't run yet, and delete it.

    Raises:
        :class:`.EmailNotFound`
    """
    email = get_email_or_raise(session=session, email_id=email_id)
    if email.job_id:
        await scheduler.cancel_job(email.job_id)
    crud.delete_email(session=session, email=email)
    init_logger("services.emails").info("Deleted email %s", email_id)
