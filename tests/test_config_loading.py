from __future__ import annotations

from pathlib import Path

import pytest

from rostercheck.config import Config, load_config


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)


def test_defaults_without_files() -> None:
    assert load_config(None) == Config()


def test_layering_default_then_custom_then_overrides(tmp_path: Path) -> None:
    (tmp_path / "configs").mkdir()
    (tmp_path / "configs" / "config.yaml").write_text(
        "max_workers: 2\niqr_multiplier: 3\n", encoding="utf-8"
    )
    custom = tmp_path / "custom.yaml"
    custom.write_text("max_workers: 6\ndeadline_seconds: 30\n", encoding="utf-8")

    cfg = load_config(custom, overrides={"deadline_seconds": 5.0, "priority_bounds": None})
    assert cfg.iqr_multiplier == 3.0
    assert cfg.max_workers == 6
    assert cfg.deadline_seconds == 5.0
    assert cfg.priority_bounds is None


def test_priority_bounds_forms(tmp_path: Path) -> None:
    custom = tmp_path / "c.yaml"
    custom.write_text("priority_bounds: [1, 5]\n", encoding="utf-8")
    assert load_config(custom).priority_bounds == (1.0, 5.0)
    custom.write_text("priority_bounds: '1, 3'\n", encoding="utf-8")
    assert load_config(custom).priority_bounds == (1.0, 3.0)


@pytest.mark.parametrize("raw", ["[5, 1]", "[1]", "7"])
def test_bad_priority_bounds(tmp_path: Path, raw: str) -> None:
    custom = tmp_path / "c.yaml"
    custom.write_text(f"priority_bounds: {raw}\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(custom)


def test_worker_count_is_at_least_one() -> None:
    cfg = load_config(None, overrides={"max_workers": 0, "profiles_path": "p.yaml"})
    assert cfg.max_workers == 1
    assert cfg.profiles_path == Path("p.yaml")
