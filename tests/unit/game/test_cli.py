"""Tests for the command-line entry point."""

from pathlib import Path

import yaml
from click.testing import CliRunner

from game.config import PROJECT_ROOT
from main import _format_delta, main


def _config_dir(tmp_path: Path, steps: int = 0, energy: int = 2) -> Path:
    settings = {
        "story": {"path": str(PROJECT_ROOT / "stories" / "survive.yaml")},
        "ledger": {"starting_health": 10, "starting_energy": energy},
        "steps": {"source": "static", "total_steps_goal": 10000, "static_count": steps},
        "storage": {
            "state_file": str(tmp_path / "progress.json"),
            "history_db": str(tmp_path / "journey.db"),
        },
    }
    (tmp_path / "settings.yaml").write_text(yaml.safe_dump(settings), encoding="utf-8")
    return tmp_path


def _invoke(config_dir: Path, *args: str):
    return CliRunner().invoke(main, ["--config-dir", str(config_dir), *args])


def test_format_delta():
    assert _format_delta(2, "Health") == "+2 Health"
    assert _format_delta(0, "Health") == "- 0 Health"
    assert _format_delta(-2, "Energy") == "-2 Energy"


def test_status_shows_first_chapter(tmp_path: Path):
    result = _invoke(_config_dir(tmp_path), "status")
    assert result.exit_code == 0, result.output
    assert "Awakening" in result.output or "[1]" in result.output
    assert "Health 10/10 | Energy 2/10 | Completed: 0%" in result.output
    assert "1,000 steps to next energy point" in result.output


def test_choose_moves_the_story(tmp_path: Path):
    config_dir = _config_dir(tmp_path)
    result = _invoke(config_dir, "choose", "2")
    assert result.exit_code == 0, result.output
    assert "Completed: 5%" in result.output


def test_choose_refuses_without_energy(tmp_path: Path):
    config_dir = _config_dir(tmp_path, energy=0)
    result = _invoke(config_dir, "choose", "2")
    assert result.exit_code == 1
    assert "Out of energy" in result.output
    forced = _invoke(config_dir, "choose", "2", "--force")
    assert forced.exit_code == 0, forced.output


def test_choose_unknown_decision(tmp_path: Path):
    result = _invoke(_config_dir(tmp_path), "choose", "7")
    assert result.exit_code == 1
    assert "No such decision: 7" in result.output


def test_convert_then_reset(tmp_path: Path):
    config_dir = _config_dir(tmp_path, steps=5000)
    converted = _invoke(config_dir, "convert")
    assert converted.exit_code == 0, converted.output
    assert "+5 energy" in converted.output

    reset = _invoke(config_dir, "reset")
    assert reset.exit_code == 0, reset.output
    assert "Attempt #1 begins." in reset.output


def test_achievements(tmp_path: Path):
    result = _invoke(_config_dir(tmp_path, steps=6000), "achievements")
    assert result.exit_code == 0, result.output
    assert "7-day average: 6,000 steps" in result.output
    assert "Unlocked: 5,000 Steps!" in result.output


def test_partial_point_shows_remaining_steps(tmp_path: Path):
    result = _invoke(_config_dir(tmp_path, steps=700), "status")
    assert result.exit_code == 0, result.output
    assert "300 steps to next energy point" in result.output


def test_history_lists_the_journey(tmp_path: Path):
    config_dir = _config_dir(tmp_path, steps=2000)
    _invoke(config_dir, "convert")
    _invoke(config_dir, "choose", "1")
    result = _invoke(config_dir, "history")
    assert result.exit_code == 0, result.output
    assert "Deaths so far: 1" in result.output
    assert "11 -> 9" in result.output
    assert "2,000 steps -> +2 energy" in result.output
