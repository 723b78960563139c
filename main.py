"""Entry point for Step by Step.

Usage:
    python main.py status                # Where am I, how much energy do I have
    python main.py convert               # Turn today's walked steps into energy
    python main.py choose 2              # Take the second decision
    python main.py reset --restore-stats # Start a new attempt from chapter one
    python main.py achievements          # Walking milestones
    python main.py history               # Recent decisions, resets and conversions
"""

from __future__ import annotations

import asyncio
import logging
import sys
import textwrap

import click

from game.config import load_config
from game.session import GameSession
from story import Chapter, StoryLoadError
from story.economy import steps_per_energy_point


def _setup_logging(verbose: bool = False, log_file: str | None = None) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    fmt = "%(asctime)s — %(name)s — %(levelname)s — %(message)s"

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(level=level, format=fmt, handlers=handlers)

    # Quiet down noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


def _format_delta(value: int, label: str) -> str:
    if value > 0:
        return f"+{value} {label}"
    if value == 0:
        return f"- 0 {label}"
    return f"{value} {label}"


def _echo_chapter(chapter: Chapter | None, session: GameSession) -> None:
    if chapter is None:
        click.echo("No Chapter Available")
        return
    status = session.status()
    header = f"{chapter.title}"
    if status["day"]:
        header += f"  ({status['day']})"
    click.echo(f"\n  {header}\n")
    for line in textwrap.wrap(" ".join(chapter.text.split()), width=76):
        click.echo(f"  {line}")
    click.echo()

    if chapter.is_end:
        click.echo("  The story ends here. Run `reset` to try again.\n")
        return
    if status["depleted"]:
        click.echo("  . . . you feel tired, out of energy. But you need to keep going to survive.")
        click.echo("  Convert steps to energy to continue . . .\n")
    for idx, decision in enumerate(chapter.decisions, start=1):
        deltas = f"{_format_delta(decision.health_delta, 'Health')}  {_format_delta(decision.energy_delta, 'Energy')}"
        click.echo(f"  [{idx}] {decision.text}   ({deltas})")
    click.echo()


def _echo_stats(session: GameSession) -> None:
    s = session.status()
    click.echo(
        f"  Health {s['health']}/10 | Energy {s['energy']}/10 | "
        f"Completed: {s['completion']}% | Attempt #{s['attempts']}"
    )
    if s["pending_energy"]:
        click.echo(f"  {s['steps_to_convert']:,} steps ready -> {s['pending_energy']} energy")
    else:
        to_next = s["steps_to_next_point"]
        if s["steps_to_convert"] == 0:
            to_next = steps_per_energy_point(session.tracker.total_steps_goal)
        click.echo(f"  {to_next:,} steps to next energy point")
    if s["last_error"]:
        click.echo(f"  ! {s['last_error']}")


def _open_session(ctx: click.Context) -> GameSession:
    try:
        return GameSession(config=ctx.obj["config"])
    except StoryLoadError as e:
        click.echo(f"Could not load story: {e}", err=True)
        sys.exit(1)


@click.group()
@click.option("--verbose", is_flag=True, help="Enable debug logging")
@click.option("--config-dir", type=click.Path(), default=None, help="Config directory")
@click.pass_context
def main(ctx: click.Context, verbose: bool, config_dir: str | None) -> None:
    """Step by Step: walk to survive."""
    cfg = load_config(config_dir)
    _setup_logging(verbose=verbose, log_file=cfg.get("storage", {}).get("log_file"))
    ctx.ensure_object(dict)
    ctx.obj["config"] = cfg


@main.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show the current chapter, stats and pending steps."""

    async def _run() -> None:
        async with _open_session(ctx) as session:
            await session.sync_steps()
            _echo_chapter(session.controller.current_chapter(), session)
            _echo_stats(session)

    asyncio.run(_run())


@main.command()
@click.pass_context
def convert(ctx: click.Context) -> None:
    """Convert today's unconverted steps into energy."""

    async def _run() -> None:
        async with _open_session(ctx) as session:
            synced = await session.sync_steps()
            if not synced.ok:
                click.echo(f"Could not read steps: {synced.error}", err=True)
            earned = await session.convert()
            if earned:
                click.echo(f"\n  +{earned} energy. Keep walking.\n")
            else:
                click.echo("\n  Not enough new steps for an energy point yet.\n")
            _echo_stats(session)

    asyncio.run(_run())


@main.command()
@click.argument("number", type=int)
@click.option("--force", is_flag=True, help="Choose even with no energy left")
@click.pass_context
def choose(ctx: click.Context, number: int, force: bool) -> None:
    """Take decision NUMBER (as listed by `status`)."""

    async def _run() -> int:
        async with _open_session(ctx) as session:
            if session.controller.is_depleted() and not force:
                click.echo("Out of energy. Convert steps first (or pass --force).", err=True)
                return 1
            transition = await session.choose(number - 1)
            if transition.outcome == "invalid_decision":
                click.echo(f"No such decision: {number}", err=True)
                return 1
            if transition.outcome == "died":
                click.echo("\n  Your decision led to an untimely end.")
            elif transition.outcome == "story_not_found":
                click.echo("\n  Story not found. You stay where you are.", err=True)
            _echo_chapter(session.controller.current_chapter(), session)
            _echo_stats(session)
            return 0

    sys.exit(asyncio.run(_run()))


@main.command()
@click.option(
    "--restore-stats/--keep-stats",
    default=None,
    help="Restore starting health/energy (default from settings.yaml)",
)
@click.pass_context
def reset(ctx: click.Context, restore_stats: bool | None) -> None:
    """Start the story over as a new attempt."""

    async def _run() -> None:
        async with _open_session(ctx) as session:
            chapter = await session.reset(restore_stats=restore_stats)
            click.echo(f"\n  Attempt #{session.controller.attempt_count()} begins.")
            _echo_chapter(chapter, session)

    asyncio.run(_run())


@main.command()
@click.pass_context
def resume(ctx: click.Context) -> None:
    """Pick the story back up from the saved checkpoint."""

    async def _run() -> None:
        async with _open_session(ctx) as session:
            chapter = await session.resume()
            _echo_chapter(chapter, session)
            _echo_stats(session)

    asyncio.run(_run())


@main.command()
@click.option("--days", default=30, show_default=True, help="Days of history to pull")
@click.pass_context
def achievements(ctx: click.Context, days: int) -> None:
    """List walking milestones."""

    async def _run() -> None:
        async with _open_session(ctx) as session:
            await session.sync_steps()
            items, new = await session.achievements(days=days)
            average = await session.seven_day_average()
            click.echo(f"\n  7-day average: {average:,.0f} steps\n")
            for item in items:
                mark = "x" if item.is_completed else " "
                note = item.date_earned if item.is_completed else item.progress_note
                click.echo(f"  [{mark}] {item.title:<22} {note or ''}")
            for item in new:
                click.echo(f"\n  Unlocked: {item.title}!")
            click.echo()

    asyncio.run(_run())


@main.command()
@click.option("--limit", default=10, show_default=True, help="Entries per section")
@click.pass_context
def history(ctx: click.Context, limit: int) -> None:
    """Show recent decisions, resets and energy conversions."""

    async def _run() -> None:
        async with _open_session(ctx) as session:
            journey = await session.journey(limit=limit)
            click.echo(f"\n  Deaths so far: {journey['deaths']}\n")
            for row in journey["decisions"]:
                click.echo(
                    f"  #{row['attempt']} {row['from_chapter']} -> {row['to_chapter']}  "
                    f"{row['decision_text']} ({row['outcome']})"
                )
            for row in journey["resets"]:
                click.echo(f"  reset: attempt #{row['attempt']} from chapter {row['from_chapter']}")
            for row in journey["conversions"]:
                click.echo(f"  {row['steps']:,} steps -> +{row['energy_earned']} energy")
            click.echo()

    asyncio.run(_run())


if __name__ == "__main__":
    main()
