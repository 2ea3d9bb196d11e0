"""Tests for the structured stderr logger."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from pixmin.utils import LogLevel, logger


@pytest.fixture(autouse=True)
def _restore_level():
    yield
    logger.set_log_level(LogLevel.WARN)


def test_format_line_renders_fields():
    line = logger.format_line("batch.item", LogLevel.INFO, {
        "file": 'a "b".png',
        "note": "two\nlines",
        "ok": True,
        "dst": None,
        "size": 12,
        "data": b"abc",
    })

    _, level, event, *fields = line.split(" | ")
    assert level == "[INFO]"
    assert event == "batch.item"
    assert fields == ['file="a \\"b\\".png"', 'note="two\\nlines"', "ok=true", "dst=null", "size=12",
                      "data=<3 bytes>"]


def test_log_respects_threshold_and_writes_to_stderr(capsys):
    logger.set_log_level(LogLevel.WARN)
    logger.log("quiet.event", LogLevel.INFO, file="a.png")
    logger.log("loud.event", LogLevel.ERROR, file="a.png")

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "quiet.event" not in captured.err
    assert "[ERROR] | loud.event | file=\"a.png\" | worker=main" in captured.err


def test_worker_ids_follow_pool_thread_names():
    assert logger.worker_id() == "main"

    with ThreadPoolExecutor(max_workers=1, thread_name_prefix=logger.WORKER_THREAD_PREFIX) as pool:
        assert pool.submit(logger.worker_id).result() == "w1"

    other = []
    thread = threading.Thread(target=lambda: other.append(logger.worker_id()), name="custom")
    thread.start()
    thread.join()
    assert other == ["custom"]


@pytest.mark.parametrize("name, level", [("warning", LogLevel.WARN), (" debug ", LogLevel.DEBUG)])
def test_level_from_name(name, level):
    assert LogLevel.from_name(name) is level


def test_level_from_name_rejects_unknown():
    with pytest.raises(ValueError):
        LogLevel.from_name("chatty")
