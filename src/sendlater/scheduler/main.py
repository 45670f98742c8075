from datetime import datetime

from sendlater.config import get_config
from sendlater.db import get_maker
from sendlater.exceptions import SchedulerNotRunningError
from sendlater.logging import init_logger
from sendlater.scheduler.base import BaseJobScheduler
from sendlater.scheduler.distributed import QueueJobScheduler
from sendlater.scheduler.local import LocalJobScheduler
from sendlater.services.delivery import DeliveryPipeline
from sendlater.services.transport import get_transport
from sendlater.store import EmailStore

_scheduler: BaseJobScheduler | None = None


def get_scheduler_class() -> type[LocalJobScheduler] | type[QueueJobScheduler]:
    if get_config().scheduler.use_queue:
        return QueueJobScheduler
    return LocalJobScheduler


def make_scheduler(pipeline: DeliveryPipeline | None = None) -> BaseJobScheduler:
    """
    Create, but don't start, a scheduler of the configured kind.

    The pipeline is only used in local mode,
    in queue mode deliveries run in the worker processes.
    """
    cls = get_scheduler_class()
    if cls is QueueJobScheduler:
        return QueueJobScheduler()

    if pipeline is None:
        pipeline = DeliveryPipeline(EmailStore(get_maker()), get_transport())
    return LocalJobScheduler(pipeline)


def get_scheduler() -> BaseJobScheduler | None:
    return _scheduler


async def start_scheduler(pipeline: DeliveryPipeline | None = None) -> BaseJobScheduler:
    """Create and start the process-wide scheduler, if it isn't running already"""
    global _scheduler
    logger = init_logger("scheduler")
    if _scheduler is not None and _scheduler.is_running():
        logger.warning("Scheduler is already running!")
        return _scheduler
    scheduler = make_scheduler(pipeline)
    await scheduler.start()
    _scheduler = scheduler
    logger.info("Started %s", scheduler.__class__.__name__)
    return _scheduler


def started() -> bool:
    return _scheduler is not None and _scheduler.is_running()


async def shutdown() -> None:
    global _scheduler
    if _scheduler is None:
        return
    await _scheduler.shutdown()
    if isinstance(_scheduler, LocalJobScheduler):
        await _close_transport(_scheduler.pipeline)
    _scheduler = None


async def _close_transport(pipeline: DeliveryPipeline) -> None:
    close = getattr(pipeline.transport, "close", None)
    if close is not None:
        await close()


def _require_scheduler(action: str, job_id: str) -> BaseJobScheduler:
    if _scheduler is None or not _scheduler.is_running():
        raise SchedulerNotRunningError(f"Scheduler is not running! Can't {action} job {job_id}")
    return _scheduler


async def schedule_job(job_id: str, due_at: datetime) -> str:
    return await _require_scheduler("schedule", job_id).schedule_job(job_id, due_at)


async def cancel_job(job_id: str) -> bool:
    """Cancel a job with the running scheduler. Returns ``False`` if there is none."""
    if not started():
        init_logger("scheduler").warning("Scheduler is not running, can't cancel job %s", job_id)
        return False
    return await _scheduler.cancel_job(job_id)


async def reschedule_job(job_id: str, due_at: datetime) -> str:
    return await _require_scheduler("reschedule", job_id).reschedule_job(job_id, due_at)
