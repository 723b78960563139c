"""Validate a story file before shipping it.

Usage:
    python scripts/validate_story.py stories/survive.yaml
    python scripts/validate_story.py stories/survive.yaml --strict

Fatal problems (no first chapter, terminal chapters with decisions, ...)
always fail. With --strict, authoring warnings fail too.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from story import StoryLoadError, load_story


@click.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--strict", is_flag=True, help="Treat warnings as errors")
def validate(path: str, strict: bool) -> None:
    """Check the chapter graph in PATH."""

    # Warnings are printed below; keep the loader from logging them as well.
    logging.basicConfig(level=logging.ERROR)

    try:
        graph = load_story(path)
    except StoryLoadError as e:
        click.echo(f"FAIL {e}", err=True)
        sys.exit(1)

    warnings = graph.validate()
    endings = [c for c in graph.chapters if c.is_end]

    click.echo(f'\n  "{graph.title}": {len(graph)} chapters, {graph.total_days()} days, {len(endings)} endings')
    click.echo(f"  First chapter: {graph.first_chapter_id}  Death: {graph.death_chapter_id}")
    unreachable = len(graph) - len(graph.reachable_ids())
    if unreachable:
        click.echo(f"  Unreachable chapters: {unreachable}")

    if warnings:
        click.echo()
        for warning in warnings:
            click.echo(f"  WARN {warning}")
    click.echo()

    if strict and warnings:
        sys.exit(1)
    click.echo("OK")


if __name__ == "__main__":
    validate()
