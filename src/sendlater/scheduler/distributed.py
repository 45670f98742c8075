from datetime import datetime

from arq import create_pool
from arq.connections import ArqRedis, RedisSettings
from redis.exceptions import RedisError

from sendlater.config import SchedulerConfig, get_config
from sendlater.exceptions import SchedulerNotRunningError, SchedulingBackendError
from sendlater.logging import init_logger
from sendlater.scheduler.base import BaseJobScheduler
from sendlater.scheduler.queue import QueueAdapter


class QueueJobScheduler(BaseJobScheduler):
    """
    Jobs are deferred jobs in a redis queue, executed by ``sendlater worker`` processes.

    Any number of api processes can share a queue.
    """

    def __init__(self, config: SchedulerConfig | None = None):
        if config is None:
            config = get_config().scheduler
        self.config = config
        self.pool: ArqRedis | None = None
        self._adapter: QueueAdapter | None = None
        self.logger = init_logger("scheduler.distributed")

    @property
    def adapter(self) -> QueueAdapter:
        if self._adapter is None:
            raise SchedulerNotRunningError("Queue scheduler has not been started")
        return self._adapter

    async def schedule_job(self, job_id: str, due_at: datetime) -> str:
        job_id = await self.adapter.schedule(job_id, due_at)
        self.logger.info("Scheduled job %s for %s", job_id, due_at)
        return job_id

    async def cancel_job(self, job_id: str) -> bool:
        if self._adapter is None:
            self.logger.warning("Queue scheduler not started, can't cancel job %s", job_id)
            return False
        return await self._adapter.cancel(job_id)

    async def reschedule_job(self, job_id: str, due_at: datetime) -> str:
        job_id = await self.adapter.reschedule(job_id, due_at)
        self.logger.info("Rescheduled job %s for %s", job_id, due_at)
        return job_id

    async def start(self) -> None:
        if self.is_running():
            self.logger.warning("Scheduler is already running!")
            return
        try:
            self.pool = await create_pool(
                RedisSettings.from_dsn(self.config.redis_url),
                default_queue_name=self.config.queue_name,
            )
        except (RedisError, OSError) as e:
            raise SchedulingBackendError(f"Could not connect to redis: {e}") from e
        self._adapter = QueueAdapter(self.pool, self.config.queue_name)
        self.logger.debug("Queue scheduler connected to %s", self.config.queue_name)

    async def shutdown(self) -> None:
        if not self.is_running():
            self.logger.info("Scheduler is not running, not shutting down.")
            return
        await self.pool.aclose()
        self.pool = None
        self._adapter = None
        self.logger.info("Scheduler shutdown complete")

    def is_running(self) -> bool:
        return self.pool is not None
