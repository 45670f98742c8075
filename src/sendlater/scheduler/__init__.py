"""
Scheduling engine: run the delivery pipeline for an email at its scheduled time.

Two interchangeable backings implement :class:`.BaseJobScheduler` ,
selected once at startup by ``scheduler.use_queue`` :

- :class:`.LocalJobScheduler` keeps timers in memory with apscheduler.
  Simple, but pending jobs are lost on restart.
- :class:`.QueueJobScheduler` keeps deferred jobs in a redis-backed arq queue,
  executed by separate worker processes (:mod:`.worker`).

Either way, the job id is the email id, and the delivery pipeline
checks the email's status before sending, so a job firing twice never sends twice.
"""

from sendlater.scheduler.base import BaseJobScheduler, JobState, ScheduledJob
from sendlater.scheduler.distributed import QueueJobScheduler
from sendlater.scheduler.local import LocalJobScheduler
from sendlater.scheduler.main import (
    cancel_job,
    get_scheduler,
    get_scheduler_class,
    make_scheduler,
    reschedule_job,
    schedule_job,
    shutdown,
    start_scheduler,
    started,
)
from sendlater.scheduler.timers import TimerStore

__all__ = [
    "BaseJobScheduler",
    "JobState",
    "LocalJobScheduler",
    "QueueJobScheduler",
    "ScheduledJob",
    "TimerStore",
    "cancel_job",
    "get_scheduler",
    "get_scheduler_class",
    "make_scheduler",
    "reschedule_job",
    "schedule_job",
    "shutdown",
    "start_scheduler",
    "started",
]
