from datetime import datetime

from sendlater.logging import init_logger
from sendlater.scheduler.base import BaseJobScheduler
from sendlater.scheduler.timers import TimerStore
from sendlater.services.delivery import DeliveryPipeline


class LocalJobScheduler(BaseJobScheduler):
    """
    Jobs are timers in this process's event loop.

    Not durable: pending jobs are lost on restart.
    Only one process should run a local scheduler, or each email is sent once per process.
    """

    def __init__(self, pipeline: DeliveryPipeline, store: TimerStore | None = None):
        if store is None:
            store = TimerStore()
        self.pipeline = pipeline
        self.store = store
        self.logger = init_logger("scheduler.local")

    async def schedule_job(self, job_id: str, due_at: datetime) -> str:
        job = self.store.schedule(job_id, due_at, self.pipeline.process)
        self.logger.info("Scheduled job %s for %s", job_id, job.due_at)
        return job.job_id

    async def cancel_job(self, job_id: str) -> bool:
        return self.store.cancel(job_id)

    async def reschedule_job(self, job_id: str, due_at: datetime) -> str:
        job = self.store.reschedule(job_id, due_at, self.pipeline.process)
        self.logger.info("Rescheduled job %s for %s", job_id, job.due_at)
        return job.job_id

    async def start(self) -> None:
        if self.is_running():
            self.logger.warning("Scheduler is already running!")
            return
        self.store.start()
        self.logger.debug("Local scheduler started")

    async def shutdown(self) -> None:
        if not self.is_running():
            self.logger.info("Scheduler is not running, not shutting down.")
            return
        self.logger.info("Shutting down scheduler, dropping %s pending jobs", len(self.store))
        self.store.clear()
        self.store.shutdown()
        self.logger.info("Scheduler shutdown complete")

    def is_running(self) -> bool:
        return self.store.running
