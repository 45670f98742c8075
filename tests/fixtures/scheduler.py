from typing import AsyncGenerator

import pytest_asyncio

from sendlater.scheduler import LocalJobScheduler, TimerStore
from sendlater.services.delivery import DeliveryPipeline

__all__ = ["clean_scheduler", "local_scheduler", "timer_store"]


@pytest_asyncio.fixture(loop_scope="function")
async def clean_scheduler() -> AsyncGenerator[None, None]:
    """Ensure no process-wide scheduler is running before or after a test"""
    import sendlater.scheduler.main

    await sendlater.scheduler.main.shutdown()
    yield
    await sendlater.scheduler.main.shutdown()


@pytest_asyncio.fixture(loop_scope="function")
async def timer_store() -> AsyncGenerator[TimerStore, None]:
    store = TimerStore()
    store.start()
    yield store
    store.clear()
    store.shutdown()


@pytest_asyncio.fixture(loop_scope="function")
async def local_scheduler(
    clean_scheduler: None, pipeline: DeliveryPipeline
) -> AsyncGenerator[LocalJobScheduler, None]:
    """The process-wide scheduler, in local mode, delivering with the fake transport"""
    from sendlater.scheduler import start_scheduler

    scheduler = await start_scheduler(pipeline)
    assert isinstance(scheduler, LocalJobScheduler)
    yield scheduler
