from sendlater.logging import init_logger
from sendlater.models import EmailStatus
from sendlater.services.transport import Transport
from sendlater.store import EmailStore


class DeliveryPipeline:
    """
    What happens when a scheduled job fires.

    Only ``PENDING`` emails are sent, so a duplicate or late firing for an email
    that was already sent, failed, or deleted does nothing.
    :meth:`.process` never raises: failures become a ``FAILED`` status.
    """

    def __init__(self, store: EmailStore, transport: Transport):
        self.store = store
        self.transport = transport
        self.logger = init_logger("services.delivery")

    async def process(self, job_id: str) -> None:
        try:
            email = self.store.get(job_id)
            if email is None:
                self.logger.info("Email %s no longer exists, not sending", job_id)
                return
            if email.status != EmailStatus.PENDING:
                self.logger.info("Email %s is %s, not sending", job_id, email.status)
                return

            result = await self.transport.send(email.to, email.subject, email.body)
            if result.success:
                self.store.update(job_id, status=EmailStatus.SENT, failure_reason=None)
                self.logger.info("Sent email %s", job_id)
            else:
                reason = result.error or "Unknown error"
                self.store.update(job_id, status=EmailStatus.FAILED, failure_reason=reason)
                self.logger.warning("Failed to send email %s: %s", job_id, reason)
        except Exception as e:
            self.logger.exception("Error processing email %s", job_id)
            try:
                self.store.update(
                    job_id, status=EmailStatus.FAILED, failure_reason=str(e) or "Unknown error"
                )
            except Exception:
                self.logger.exception("Could not mark email %s as failed", job_id)
