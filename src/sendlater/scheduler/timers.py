"""
In-memory timers for jobs, backed by an apscheduler :class:`~apscheduler.schedulers.asyncio.AsyncIOScheduler` .

Timers live only as long as the process, a restart loses every pending job.
"""

import threading
import uuid
from datetime import datetime

from apscheduler.jobstores.base import JobLookupError
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger

from sendlater.logging import init_logger
from sendlater.scheduler.base import JobState, OnFire, ScheduledJob, check_due_at
from sendlater.types import as_utc


class TimerStore:
    """
    Armed jobs keyed by job id, each with an apscheduler ``date`` job of the same id.

    Every arming gets a new token, and a firing only runs if its token still
    matches the armed entry, so a cancelled or replaced job never reaches ``on_fire`` .
    """

    def __init__(self):
        self.logger = init_logger("scheduler.timers")
        self.scheduler = AsyncIOScheduler(
            jobstores={"default": MemoryJobStore()}, logger=self.logger
        )
        self._jobs: dict[str, ScheduledJob] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._jobs)

    def __contains__(self, job_id: str) -> bool:
        return job_id in self._jobs

    @property
    def running(self) -> bool:
        return self.scheduler.running

    def start(self) -> None:
        if not self.scheduler.running:
            self.scheduler.start()

    def shutdown(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)

    def schedule(self, job_id: str, due_at: datetime, on_fire: OnFire) -> ScheduledJob:
        """
        Arm a job, replacing any existing job with the same id.

        Raises:
            :class:`.InvalidScheduleTime`
        """
        check_due_at(due_at)
        with self._lock:
            self._remove(job_id)
            return self._arm(job_id, due_at, on_fire)

    def cancel(self, job_id: str) -> bool:
        with self._lock:
            job = self._remove(job_id)
        if job is None:
            return False
        self.logger.debug("Cancelled job %s", job_id)
        return True

    def reschedule(self, job_id: str, due_at: datetime, on_fire: OnFire) -> ScheduledJob:
        """
        Move an armed job to ``due_at`` in place, keeping its id and token.

        If the job is not armed, or apscheduler has already released it for execution,
        a fresh job is armed under the same id.

        Raises:
            :class:`.InvalidScheduleTime`
        """
        check_due_at(due_at)
        due_at = as_utc(due_at)
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                self.logger.info("No armed job %s to reschedule, arming a new one", job_id)
                return self._arm(job_id, due_at, on_fire)

            try:
                self.scheduler.reschedule_job(job_id, trigger=DateTrigger(run_date=due_at))
            except JobLookupError:
                self.logger.debug("Job %s already left the jobstore, arming a new one", job_id)
                del self._jobs[job_id]
                return self._arm(job_id, due_at, on_fire)

            job.due_at = due_at
            self.logger.debug("Rescheduled job %s to %s", job_id, due_at)
            return job.model_copy()

    def get(self, job_id: str) -> ScheduledJob | None:
        with self._lock:
            job = self._jobs.get(job_id)
            return job.model_copy() if job is not None else None

    def list_jobs(self) -> list[ScheduledJob]:
        with self._lock:
            return [job.model_copy() for job in self._jobs.values()]

    def clear(self) -> None:
        """Cancel every armed job"""
        with self._lock:
            for job_id in list(self._jobs):
                self._remove(job_id)

    def _arm(self, job_id: str, due_at: datetime, on_fire: OnFire) -> ScheduledJob:
        job = ScheduledJob(
            job_id=job_id,
            due_at=due_at,
            payload={"email_id": job_id},
            token=uuid.uuid4().hex,
        )
        self.scheduler.add_job(
            self._fire,
            trigger=DateTrigger(run_date=job.due_at),
            args=[job_id, job.token, on_fire],
            id=job_id,
            name=job_id,
            replace_existing=True,
            misfire_grace_time=None,
            # an earlier arming may still be awaiting on_fire; tokens dedupe
            max_instances=2**31,
        )
        self._jobs[job_id] = job
        self.logger.debug("Armed job %s for %s", job_id, job.due_at)
        return job.model_copy()

    def _remove(self, job_id: str) -> ScheduledJob | None:
        """Must be called holding the lock"""
        job = self._jobs.pop(job_id, None)
        try:
            self.scheduler.remove_job(job_id)
        except JobLookupError:
            pass
        if job is not None:
            job.state = JobState.cancelled
        return job

    async def _fire(self, job_id: str, token: str, on_fire: OnFire) -> None:
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None or job.token != token:
                self.logger.debug("Ignoring stale firing of job %s", job_id)
                return
            del self._jobs[job_id]
            job.state = JobState.fired

        self.logger.debug("Firing job %s", job_id)
        try:
            await on_fire(job_id)
        except Exception:
            self.logger.exception("Error while running job %s", job_id)
