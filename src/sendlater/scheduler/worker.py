"""
arq worker that executes queued delivery jobs.

Run with ``sendlater worker`` . Each worker runs up to ``scheduler.concurrency``
deliveries at once, and a job that raises is retried with exponential backoff
up to ``scheduler.attempts`` times before arq records it as failed.
"""

from typing import Any

from arq import Retry
from arq.connections import RedisSettings
from arq.constants import result_key_prefix
from arq.jobs import Job
from arq.worker import Worker, func

from sendlater.config import get_config
from sendlater.db import create_tables, get_maker
from sendlater.logging import init_logger
from sendlater.scheduler.queue import JOB_NAME
from sendlater.services.delivery import DeliveryPipeline
from sendlater.services.transport import get_transport
from sendlater.store import EmailStore


def retry_delay(job_try: int, backoff: float | None = None) -> float:
    """Seconds to wait before retrying after the ``job_try`` th try failed"""
    if backoff is None:
        backoff = get_config().scheduler.backoff
    return backoff * 2 ** (job_try - 1)


async def deliver_email(ctx: dict, email_id: str) -> dict:
    logger = init_logger("scheduler.worker")
    job_try = ctx.get("job_try", 1)
    try:
        await ctx["pipeline"].process(email_id)
    except Exception as e:
        if job_try < get_config().scheduler.attempts:
            delay = retry_delay(job_try)
            logger.warning(
                "Delivery of %s failed on try %s, retrying in %ss: %s", email_id, job_try, delay, e
            )
            raise Retry(defer=delay) from e
        logger.exception("Delivery of %s failed on final try %s", email_id, job_try)
        raise
    return {"success": True, "email_id": email_id}


async def startup(ctx: dict) -> None:
    logger = init_logger("scheduler.worker")
    create_tables()
    ctx["pipeline"] = DeliveryPipeline(EmailStore(get_maker()), get_transport())
    logger.info("Worker started")


async def shutdown(ctx: dict) -> None:
    pipeline: DeliveryPipeline | None = ctx.get("pipeline")
    if pipeline is not None and hasattr(pipeline.transport, "close"):
        await pipeline.transport.close()
    init_logger("scheduler.worker").info("Worker stopped")


async def after_job_end(ctx: dict) -> None:
    """Keep the records of failed jobs for ``scheduler.keep_failed`` rather than ``keep_result``"""
    info = await Job(ctx["job_id"], ctx["redis"]).result_info()
    if info is None or info.success:
        return
    keep_failed = get_config().scheduler.keep_failed
    await ctx["redis"].expire(result_key_prefix + ctx["job_id"], keep_failed)
    init_logger("scheduler.worker").debug(
        "Keeping failed job %s for %ss", ctx["job_id"], keep_failed
    )


def make_worker(**kwargs: Any) -> Worker:
    """
    Create a worker for the configured queue.

    Keyword arguments override the ones derived from config and are passed to :class:`arq.worker.Worker`
    """
    cfg = get_config().scheduler
    worker_kwargs = {
        "functions": [func(deliver_email, name=JOB_NAME)],
        "redis_settings": RedisSettings.from_dsn(cfg.redis_url),
        "queue_name": cfg.queue_name,
        "max_jobs": cfg.concurrency,
        "max_tries": cfg.attempts,
        "keep_result": cfg.keep_result,
        "on_startup": startup,
        "on_shutdown": shutdown,
        "after_job_end": after_job_end,
    }
    worker_kwargs.update(kwargs)
    return Worker(**worker_kwargs)


def run_worker(burst: bool = False) -> None:
    """Run a worker until it is stopped, or until the queue is empty if ``burst``"""
    worker = make_worker(burst=burst)
    worker.run()
