from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from arq import Retry

from sendlater.scheduler import worker as worker_module
from sendlater.scheduler.worker import after_job_end, deliver_email, make_worker, retry_delay


@pytest.mark.parametrize("job_try,expected", [(1, 5), (2, 10), (3, 20), (4, 40)])
def test_retry_delay(job_try, expected):
    assert retry_delay(job_try, backoff=5) == expected


def test_retry_delay_from_config(set_config):
    set_config({"scheduler.backoff": 2})
    assert retry_delay(1) == 2
    assert retry_delay(3) == 8


async def test_deliver_email():
    pipeline = AsyncMock()
    result = await deliver_email({"pipeline": pipeline, "job_try": 1}, "abc")

    pipeline.process.assert_awaited_once_with("abc")
    assert result == {"success": True, "email_id": "abc"}


async def test_deliver_email_retries(set_config):
    set_config({"scheduler.attempts": 3, "scheduler.backoff": 5})
    pipeline = AsyncMock()
    pipeline.process.side_effect = RuntimeError("database is locked")

    with pytest.raises(Retry) as e:
        await deliver_email({"pipeline": pipeline, "job_try": 2}, "abc")
    # 5s * 2^(2-1), in ms
    assert e.value.defer_score == 10_000


async def test_deliver_email_final_try(set_config):
    """On the last try the error is raised so arq records the job as failed"""
    set_config({"scheduler.attempts": 3})
    pipeline = AsyncMock()
    pipeline.process.side_effect = RuntimeError("database is locked")

    with pytest.raises(RuntimeError, match="database is locked"):
        await deliver_email({"pipeline": pipeline, "job_try": 3}, "abc")


async def test_make_worker(set_config):
    set_config(
        {
            "scheduler.queue_name": "sendlater:worker-test",
            "scheduler.concurrency": 7,
            "scheduler.attempts": 4,
        }
    )
    worker = make_worker(handle_signals=False)

    assert list(worker.functions) == ["deliver_email"]
    assert worker.queue_name == "sendlater:worker-test"
    assert worker.max_jobs == 7
    assert worker.max_tries == 4
    assert worker.after_job_end is after_job_end


@pytest.fixture
def result_info(monkeypatch):
    """Patch the worker's arq Job so its result info can be set per test"""
    info = {}

    class FakeJob:
        def __init__(self, job_id, redis):
            self.job_id = job_id

        async def result_info(self):
            return info.get(self.job_id)

    monkeypatch.setattr(worker_module, "Job", FakeJob)
    return info


async def test_after_job_end_keeps_failed(set_config, result_info):
    """Failed job records are kept for keep_failed seconds"""
    set_config({"scheduler.keep_result": 3600, "scheduler.keep_failed": 86400})
    result_info["abc"] = SimpleNamespace(success=False)
    redis = AsyncMock()

    await after_job_end({"job_id": "abc", "job_try": 3, "redis": redis})
    redis.expire.assert_awaited_once_with("arq:result:abc", 86400)


@pytest.mark.parametrize("info", [SimpleNamespace(success=True), None])
async def test_after_job_end_leaves_others(result_info, info):
    """Completed and retried jobs keep arq's keep_result expiry"""
    if info is not None:
        result_info["abc"] = info
    redis = AsyncMock()

    await after_job_end({"job_id": "abc", "job_try": 1, "redis": redis})
    redis.expire.assert_not_awaited()
