from __future__ import annotations

import json
import logging
from pathlib import Path

from rostercheck.utils.logging_setup import (
    ExtraAwareFormatter,
    JsonLineFormatter,
    setup_logging,
)


def _record(msg: str, **extra: object) -> logging.LogRecord:
    rec = logging.LogRecord(
        name="rostercheck.main",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for k, v in extra.items():
        setattr(rec, k, v)
    return rec


def test_extra_aware_formatter_keeps_message_clean() -> None:
    fmt = ExtraAwareFormatter("%(levelname)s | %(name)s | %(message)s")
    out = fmt.format(_record("Run finished with errors"))
    assert out == "WARNING | rostercheck.main | Run finished with errors"


def test_extra_aware_formatter_appends_selected_extras() -> None:
    fmt = ExtraAwareFormatter("%(message)s")
    out = fmt.format(
        _record("Loaded", table="tasks.csv", entity_type="task", renamed={"a": "b"})
    )
    assert out == "Loaded [table=tasks.csv entity_type=task]"


def test_json_formatter_merges_extras() -> None:
    line = JsonLineFormatter().format(_record("Mapped", table="clients.csv", mapped=5))
    payload = json.loads(line)
    assert payload["message"] == "Mapped"
    assert payload["level"] == "WARNING"
    assert payload["table"] == "clients.csv"
    assert payload["mapped"] == 5
    assert "msg" not in payload


def test_setup_logging_writes_both_files(tmp_path: Path) -> None:
    files = setup_logging(tmp_path / "run")
    logging.getLogger("rostercheck.test").info("hello", extra={"stage": "classify"})
    for h in logging.getLogger().handlers:
        h.flush()
    assert "hello" in files.human.read_text(encoding="utf-8")
    lines = files.jsonl.read_text(encoding="utf-8").strip().splitlines()
    last = json.loads(lines[-1])
    assert last["message"] == "hello"
    assert last["stage"] == "classify"
