"""Step-count sources.

The game never talks to a pedometer directly. It holds a ``StepSource`` and
awaits result objects from it, so a failed authorization or fetch is a value
to inspect rather than an exception to catch.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx

from .models import DailySteps, StepResult

logger = logging.getLogger(__name__)


class StepSourceError(Exception):
    """Raised inside a step source when the backing service misbehaves."""

    def __init__(self, message: str, status_code: int = 0):
        self.status_code = status_code
        super().__init__(message)


class StepSource(Protocol):
    async def authorize(self) -> StepResult: ...

    async def fetch_today(self) -> StepResult: ...

    async def fetch_history(self, days: int = 7) -> list[DailySteps]: ...

    async def close(self) -> None: ...


class StaticStepSource:
    """Fixed readings, from configuration or tests."""

    def __init__(
        self,
        steps: int = 0,
        distance_miles: float = 0.0,
        history: list[DailySteps] | None = None,
        authorized: bool = True,
    ):
        self._steps = steps
        self._distance = distance_miles
        self._history = list(history or [])
        self._authorized = authorized

    async def authorize(self) -> StepResult:
        if not self._authorized:
            return StepResult.failure("step access not authorized")
        return StepResult.success()

    async def fetch_today(self) -> StepResult:
        if not self._authorized:
            return StepResult.failure("step access not authorized")
        return StepResult.success(self._steps, self._distance)

    async def fetch_history(self, days: int = 7) -> list[DailySteps]:
        if not self._authorized or days <= 0:
            return []
        return self._history[-days:]

    async def close(self) -> None:
        return None


class HttpStepSource:
    """Async client for a health-data bridge exposing step counts over HTTP.

    Usage::

        async with HttpStepSource("http://localhost:8765", token="...") as src:
            today = await src.fetch_today()
    """

    def __init__(
        self,
        base_url: str,
        token: str = "",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> HttpStepSource:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    # ── Request helpers ─────────────────────────────────────────

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Make a request and return the unwrapped ``data`` payload."""
        def _json_or_empty(resp: httpx.Response) -> dict[str, Any]:
            if not resp.content:
                return {}
            try:
                data = resp.json()
            except ValueError:
                return {}
            return data if isinstance(data, dict) else {"data": data}

        try:
            resp = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise StepSourceError(f"Step bridge unreachable: {exc}") from exc

        body = _json_or_empty(resp)

        if resp.status_code in (401, 403):
            raise StepSourceError(
                body.get("error", "step access not authorized"),
                status_code=resp.status_code,
            )

        if resp.status_code >= 400:
            raise StepSourceError(
                body.get("error", f"HTTP {resp.status_code}"),
                status_code=resp.status_code,
            )

        if not body.get("success", True):
            raise StepSourceError(body.get("error", "Unknown error"))

        return body.get("data", body)

    # ── StepSource ──────────────────────────────────────────────

    async def authorize(self) -> StepResult:
        try:
            data = await self._request("POST", "/authorize")
        except StepSourceError as exc:
            logger.warning("Step authorization failed: %s", exc)
            return StepResult.failure(str(exc))
        if isinstance(data, dict) and not data.get("authorized", True):
            return StepResult.failure("step access not authorized")
        logger.debug("Step access authorized")
        return StepResult.success()

    async def fetch_today(self) -> StepResult:
        try:
            data = await self._request("GET", "/steps/today")
        except StepSourceError as exc:
            logger.warning("Failed to fetch today's steps: %s", exc)
            return StepResult.failure(str(exc))
        if not isinstance(data, dict):
            return StepResult.failure("unexpected response shape")
        result = StepResult.from_api(data)
        logger.debug("Fetched %d steps for today", result.steps)
        return result

    async def fetch_history(self, days: int = 7) -> list[DailySteps]:
        try:
            data = await self._request("GET", "/steps/history", params={"days": days})
        except StepSourceError as exc:
            logger.warning("Failed to fetch step history: %s", exc)
            return []
        items = data if isinstance(data, list) else data.get("days", [])
        return [DailySteps.from_api(d) for d in items if isinstance(d, dict)]
