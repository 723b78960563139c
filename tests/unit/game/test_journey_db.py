"""Tests for the journey history database."""

import asyncio
from pathlib import Path

from game.history import JourneyDB


def test_decisions_and_death_count(tmp_path: Path):
    async def _run():
        async with JourneyDB(tmp_path / "journey.db") as db:
            await db.log_decision(1, 11, 12, "Turn on the TV", "advanced", 10, 3)
            await db.log_decision(1, 12, 9, "Sneak to the car", "died", 0, 2)
            return await db.get_recent_decisions(), await db.get_death_count()

    decisions, deaths = asyncio.run(_run())
    assert len(decisions) == 2
    assert {d["outcome"] for d in decisions} == {"advanced", "died"}
    assert deaths == 1


def test_resets_and_conversions(tmp_path: Path):
    async def _run():
        async with JourneyDB(tmp_path / "journey.db") as db:
            await db.log_reset(2, 9, True)
            await db.log_energy_conversion(4200, 10000, 4, 4)
            return await db.get_recent_resets(), await db.get_recent_conversions()

    resets, conversions = asyncio.run(_run())
    assert resets[0]["attempt"] == 2
    assert resets[0]["stats_restored"] == 1
    assert conversions[0]["energy_earned"] == 4
    assert conversions[0]["steps"] == 4200


def test_daily_steps_upsert_and_order(tmp_path: Path):
    async def _run():
        async with JourneyDB(tmp_path / "journey.db") as db:
            await db.record_daily_steps("2026-03-02", 3000, 1.2)
            await db.record_daily_steps("2026-03-01", 8000, 3.4)
            await db.record_daily_steps("2026-03-02", 6500, 2.9)
            return await db.get_daily_steps()

    rows = asyncio.run(_run())
    assert [r["date"] for r in rows] == ["2026-03-01", "2026-03-02"]
    assert rows[1]["steps"] == 6500


def test_achievement_recorded_once(tmp_path: Path):
    async def _run():
        async with JourneyDB(tmp_path / "journey.db") as db:
            first = await db.record_achievement("steps_in_a_day:5000", "5,000 Steps", "2026-03-02")
            second = await db.record_achievement("steps_in_a_day:5000", "5,000 Steps", "2026-03-05")
            return first, second

    first, second = asyncio.run(_run())
    assert first is True
    assert second is False


def test_history_persists_between_opens(tmp_path: Path):
    path = tmp_path / "nested" / "journey.db"

    async def _run():
        async with JourneyDB(path) as db:
            await db.record_daily_steps("2026-03-01", 100)
        async with JourneyDB(path) as db:
            return await db.get_daily_steps()

    assert len(asyncio.run(_run())) == 1


def test_walking_into_the_death_chapter_counts_as_a_death(tmp_path: Path):
    async def _run():
        async with JourneyDB(tmp_path / "journey.db") as db:
            await db.log_decision(1, 11, 9, "Open the front door", "advanced", 10, 3)
            await db.log_decision(1, 11, 12, "Turn on the TV", "advanced", 10, 3)
            return await db.get_death_count(9), await db.get_death_count()

    with_chapter, without = asyncio.run(_run())
    assert with_chapter == 1
    assert without == 0
