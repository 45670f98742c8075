"""
Jobs as deferred arq jobs in a redis queue.

Jobs survive restarts of both the api and the worker,
and are executed by :mod:`sendlater.scheduler.worker` .
"""

from datetime import datetime
from enum import StrEnum

from arq.connections import ArqRedis
from arq.constants import job_key_prefix, result_key_prefix, retry_key_prefix
from arq.jobs import Job, JobStatus
from redis.exceptions import RedisError

from sendlater.exceptions import AlreadyCompleted, InFlight, SchedulingBackendError
from sendlater.logging import init_logger
from sendlater.scheduler.base import check_due_at

JOB_NAME = "deliver_email"
"""Name of the worker function that delivers an email"""


class QueueJobState(StrEnum):
    waiting = "waiting"
    """Due, waiting for a free worker"""
    delayed = "delayed"
    """Not due yet"""
    active = "active"
    """Being executed by a worker"""
    completed = "completed"
    """Ran successfully, result still retained"""
    failed = "failed"
    """Ran out of tries, result still retained"""


class QueueAdapter:
    """
    Schedule, cancel, and reschedule deferred jobs in an arq queue.

    Job ids are the arq job ids, so arq guarantees there is at most
    one job per id in the queue at any time.
    """

    def __init__(self, redis: ArqRedis, queue_name: str, job_name: str = JOB_NAME):
        self.redis = redis
        self.queue_name = queue_name
        self.job_name = job_name
        self.logger = init_logger("scheduler.queue")

    async def get_state(self, job_id: str) -> QueueJobState | None:
        """State of a job, or ``None`` if the queue has no record of it"""
        job = Job(job_id, self.redis, _queue_name=self.queue_name)
        try:
            status = await job.status()
            if status == JobStatus.not_found:
                return None
            elif status == JobStatus.deferred:
                return QueueJobState.delayed
            elif status == JobStatus.queued:
                return QueueJobState.waiting
            elif status == JobStatus.in_progress:
                return QueueJobState.active

            info = await job.result_info()
        except (RedisError, OSError) as e:
            raise SchedulingBackendError(f"Could not get state of job {job_id}: {e}") from e

        if info is not None and not info.success:
            return QueueJobState.failed
        return QueueJobState.completed

    async def schedule(self, job_id: str, due_at: datetime) -> str:
        """
        Enqueue a job deferred until ``due_at`` , replacing any job with the same id
        that is not currently executing.

        Raises:
            :class:`.InvalidScheduleTime`
            :class:`.SchedulingBackendError` if the job can't be enqueued
        """
        check_due_at(due_at)
        state = await self.get_state(job_id)
        if state is not None and state != QueueJobState.active:
            await self._remove(job_id)
        return await self._enqueue(job_id, due_at)

    async def cancel(self, job_id: str) -> bool:
        """
        Remove a waiting or delayed job.

        Executing jobs are left alone. Never raises, errors are logged and return ``False`` .
        """
        try:
            state = await self.get_state(job_id)
            if state not in (QueueJobState.waiting, QueueJobState.delayed):
                self.logger.debug("Not cancelling job %s in state %s", job_id, state)
                return False
            await self._remove(job_id)
        except Exception as e:
            self.logger.warning("Could not cancel job %s: %s", job_id, e)
            return False
        self.logger.debug("Cancelled job %s", job_id)
        return True

    async def reschedule(self, job_id: str, due_at: datetime) -> str:
        """
        Move a pending job to ``due_at`` by removing it and enqueueing it again.

        The two steps are not atomic: if the second fails, the job is gone
        until it is scheduled again.

        Raises:
            :class:`.InvalidScheduleTime`
            :class:`.AlreadyCompleted`
            :class:`.InFlight`
            :class:`.SchedulingBackendError`
        """
        check_due_at(due_at)
        state = await self.get_state(job_id)
        if state is None:
            self.logger.info("No queued job %s to reschedule, scheduling a new one", job_id)
            return await self._enqueue(job_id, due_at)
        elif state == QueueJobState.completed:
            raise AlreadyCompleted(f"Job {job_id} has already completed")
        elif state == QueueJobState.active:
            raise InFlight(f"Job {job_id} is being executed")

        await self._remove(job_id)
        try:
            return await self._enqueue(job_id, due_at)
        except SchedulingBackendError:
            self.logger.warning(
                "Job %s was removed but could not be enqueued again, it will not run", job_id
            )
            raise

    async def _enqueue(self, job_id: str, due_at: datetime) -> str:
        delay = check_due_at(due_at)
        try:
            job = await self.redis.enqueue_job(
                self.job_name,
                job_id,
                _job_id=job_id,
                _queue_name=self.queue_name,
                _defer_by=delay,
            )
        except (RedisError, OSError) as e:
            raise SchedulingBackendError(f"Could not enqueue job {job_id}: {e}") from e
        if job is None:
            raise SchedulingBackendError(f"Queue refused job {job_id}, a job with that id exists")
        self.logger.debug("Enqueued job %s, deferred by %s", job_id, delay)
        return job.job_id

    async def _remove(self, job_id: str) -> None:
        try:
            await self.redis.zrem(self.queue_name, job_id)
            await self.redis.delete(
                job_key_prefix + job_id, result_key_prefix + job_id, retry_key_prefix + job_id
            )
        except (RedisError, OSError) as e:
            raise SchedulingBackendError(f"Could not remove job {job_id}: {e}") from e
