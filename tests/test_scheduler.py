import pytest

from app import scheduler as scheduler_module
from app.jobs.process_domains import ProcessResult


class StubProcessor:
    def __init__(self, error=None):
        self.error = error
        self.calls = 0

    async def process_next(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return ProcessResult(processed=1, success=True, message="Domain example.com processed successfully")


@pytest.mark.asyncio
async def test_scheduled_job_runs_processor(monkeypatch):
    stub = StubProcessor()
    monkeypatch.setattr(scheduler_module, "domain_processor", stub)

    await scheduler_module.scheduled_process_job()

    assert stub.calls == 1


@pytest.mark.asyncio
async def test_scheduled_job_swallows_unexpected_errors(monkeypatch):
    stub = StubProcessor(error=RuntimeError("database went away"))
    monkeypatch.setattr(scheduler_module, "domain_processor", stub)

    await scheduler_module.scheduled_process_job()

    assert stub.calls == 1
