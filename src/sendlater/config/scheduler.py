from pydantic import BaseModel, Field


class SchedulerConfig(BaseModel):
    """
    Configuration for the scheduling engine that fires email deliveries.

    The engine runs in one of two modes, selected once at startup by ``use_queue`` :

    - ``False`` : timers are held in-process by an apscheduler instance.
      Nothing external is needed, but **armed timers do not survive a restart** -
      any email that was pending when the process stopped must be rescheduled.
    - ``True`` : jobs are stored in a redis-backed arq queue and executed by
      ``sendlater worker`` processes. Requires a running redis server.
    """

    use_queue: bool = False
    """Use the redis-backed durable queue rather than in-process timers"""
    redis_url: str = "redis://localhost:6379"
    """DSN of the redis server backing the queue"""
    queue_name: str = "sendlater:queue"
    """Name of the arq queue jobs are enqueued in"""
    concurrency: int = Field(default=5, ge=1)
    """Maximum number of deliveries a single worker process runs at once"""
    attempts: int = Field(default=3, ge=1)
    """Maximum number of times a delivery job is tried before it is recorded as failed"""
    backoff: float = Field(default=5, gt=0)
    """
    Seconds to wait before the first retry of a failed delivery job.
    Doubled for each subsequent retry.
    """
    keep_result: int = Field(default=3600, ge=0)
    """Seconds that completed job records are kept in redis before they are pruned"""
    keep_failed: int = Field(default=86400, ge=0)
    """
    Seconds that failed job records are kept in redis before they are pruned.
    Kept longer than completed ones so failures can be inspected.
    """
