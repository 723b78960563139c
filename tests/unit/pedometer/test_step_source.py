"""Tests for step sources."""

import asyncio
import json

import httpx

from pedometer.models import DailySteps
from pedometer.source import HttpStepSource, StaticStepSource


def _source(handler) -> HttpStepSource:
    return HttpStepSource("http://bridge.test", token="secret", transport=httpx.MockTransport(handler))


class TestStaticStepSource:
    def test_reports_fixed_counts(self):
        async def _run():
            source = StaticStepSource(steps=4200, distance_miles=2.0)
            assert (await source.authorize()).ok
            today = await source.fetch_today()
            assert today.ok
            assert today.steps == 4200
            assert today.distance_miles == 2.0

        asyncio.run(_run())

    def test_unauthorized(self):
        async def _run():
            source = StaticStepSource(steps=4200, authorized=False)
            auth = await source.authorize()
            assert not auth.ok
            assert auth.error == "step access not authorized"
            assert not (await source.fetch_today()).ok
            assert await source.fetch_history() == []

        asyncio.run(_run())

    def test_history_is_limited_to_recent_days(self):
        history = [DailySteps(date=f"2026-03-0{i}", steps=i * 1000) for i in range(1, 6)]

        async def _run():
            source = StaticStepSource(history=history)
            days = await source.fetch_history(days=2)
            assert [d.date for d in days] == ["2026-03-04", "2026-03-05"]
            assert await source.fetch_history(days=0) == []

        asyncio.run(_run())


class TestHttpStepSource:
    def test_fetch_today_unwraps_data(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers.get("Authorization")
            seen["path"] = request.url.path
            return httpx.Response(200, json={"success": True, "data": {"steps": 6100, "distance_miles": 2.7}})

        async def _run():
            async with _source(handler) as source:
                return await source.fetch_today()

        result = asyncio.run(_run())
        assert result.ok
        assert result.steps == 6100
        assert result.distance_miles == 2.7
        assert seen == {"auth": "Bearer secret", "path": "/steps/today"}

    def test_authorize(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "POST"
            assert request.url.path == "/authorize"
            return httpx.Response(200, json={"authorized": True})

        async def _run():
            async with _source(handler) as source:
                return await source.authorize()

        assert asyncio.run(_run()).ok

    def test_authorize_declined(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"success": True, "data": {"authorized": False}})

        async def _run():
            async with _source(handler) as source:
                return await source.authorize()

        result = asyncio.run(_run())
        assert not result.ok
        assert result.error == "step access not authorized"

    def test_unauthorized_status_is_a_failed_result(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={})

        async def _run():
            async with _source(handler) as source:
                return await source.fetch_today()

        result = asyncio.run(_run())
        assert not result.ok
        assert result.error == "step access not authorized"

    def test_server_error_message_is_kept(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, json={"error": "health store locked"})

        async def _run():
            async with _source(handler) as source:
                return await source.fetch_today()

        result = asyncio.run(_run())
        assert not result.ok
        assert result.error == "health store locked"

    def test_unsuccessful_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"success": False, "error": "no permission"})

        async def _run():
            async with _source(handler) as source:
                return await source.fetch_today()

        assert asyncio.run(_run()).error == "no permission"

    def test_unreachable_bridge(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async def _run():
            async with _source(handler) as source:
                return await source.fetch_today()

        result = asyncio.run(_run())
        assert not result.ok
        assert "unreachable" in result.error

    def test_fetch_history(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.params["days"] == "3"
            days = [
                {"date": "2026-03-01", "steps": 8000, "distance_miles": 3.5},
                {"date": "2026-03-02", "step_count": 11000},
                "garbage",
            ]
            return httpx.Response(200, content=json.dumps({"data": {"days": days}}))

        async def _run():
            async with _source(handler) as source:
                return await source.fetch_history(days=3)

        days = asyncio.run(_run())
        assert [d.steps for d in days] == [8000, 11000]

    def test_fetch_history_bare_list(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=[{"date": "2026-03-01", "steps": 500}])

        async def _run():
            async with _source(handler) as source:
                return await source.fetch_history()

        assert asyncio.run(_run()) == [DailySteps(date="2026-03-01", steps=500)]

    def test_fetch_history_failure_is_empty(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500)

        async def _run():
            async with _source(handler) as source:
                return await source.fetch_history()

        assert asyncio.run(_run()) == []
