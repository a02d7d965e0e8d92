"""Tests for the HTTP trigger endpoints."""

import asyncio

from aiohttp import test_utils

from hr_briefing.core.exceptions import PipelineError
from hr_briefing.server import SUCCESS_MESSAGE, create_app


def call(runner, method, path):
    async def go():
        async with test_utils.TestClient(test_utils.TestServer(create_app(runner))) as client:
            response = await client.request(method, path)
            return response.status, await response.json()
    return asyncio.run(go())


class Runner:
    def __init__(self, error=None):
        self.calls = 0
        self.error = error

    async def __call__(self):
        self.calls += 1
        if self.error:
            raise self.error


class TestTrigger:
    def test_cron_get_runs_pipeline(self) -> None:
        runner = Runner()
        status, body = call(runner, "GET", "/api/cron")
        assert status == 200
        assert body["success"] is True
        assert body["message"] == SUCCESS_MESSAGE
        assert "timestamp" in body
        assert runner.calls == 1

    def test_manual_post_runs_pipeline(self) -> None:
        runner = Runner()
        status, _ = call(runner, "POST", "/api/run")
        assert status == 200
        assert runner.calls == 1

    def test_wrong_method_is_rejected(self) -> None:
        runner = Runner()
        status, body = call(runner, "POST", "/api/cron")
        assert status == 405
        assert body == {"error": "Method not allowed"}
        assert runner.calls == 0

    def test_failure_returns_500(self) -> None:
        status, body = call(Runner(PipelineError("scrape failed")), "GET", "/api/cron")
        assert status == 500
        assert body["success"] is False
        assert body["error"] == "scrape failed"
        assert "timestamp" in body
