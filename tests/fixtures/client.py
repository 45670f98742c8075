from typing import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from sendlater.scheduler import LocalJobScheduler

__all__ = ["client"]


@pytest_asyncio.fixture(loop_scope="function")
async def client(local_scheduler: LocalJobScheduler) -> AsyncGenerator[AsyncClient, None]:
    """
    Client for the app, sharing the test's event loop and database.

    The app lifespan is not run, the scheduler is started by ``local_scheduler``
    """
    from sendlater.app import app

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
