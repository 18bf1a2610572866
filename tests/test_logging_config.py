from __future__ import annotations

import logging

import pytest

from paddy_remote.common.logging_config import (
    TRACE,
    AnsiColorFormatter,
    NiceGuiLogHandler,
    attach_ui_log,
    detach_ui_log,
)


class LogWidget:
    def __init__(self, fail: bool = False) -> None:
        self.lines: list[str] = []
        self.fail = fail

    def push(self, line: str) -> None:
        if self.fail:
            raise RuntimeError("client deleted")
        self.lines.append(line)


def make_record(name: str, level: int, msg: str) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, msg, None, None)


@pytest.mark.unit
def test_link_log_receives_only_app_records():
    handler = NiceGuiLogHandler()
    widget = LogWidget()
    attach_ui_log(widget)
    try:
        handler.handle(make_record("paddy_remote.services.link_client", logging.INFO, "Connected"))
        handler.handle(make_record("websockets.client", logging.INFO, "frame"))
        handler.handle(make_record("paddy_remote.services.link_client", logging.DEBUG, "SEND"))
    finally:
        detach_ui_log(widget)
    assert len(widget.lines) == 1
    assert widget.lines[0].endswith("[INFO] Connected")


@pytest.mark.unit
def test_deleted_widget_is_dropped_and_others_still_receive():
    handler = NiceGuiLogHandler()
    broken, healthy = LogWidget(fail=True), LogWidget()
    attach_ui_log(broken)
    attach_ui_log(healthy)
    try:
        handler.handle(make_record("paddy_remote", logging.WARNING, "first"))
        broken.fail = False
        handler.handle(make_record("paddy_remote", logging.WARNING, "second"))
    finally:
        detach_ui_log(broken)
        detach_ui_log(healthy)
    assert broken.lines == []
    assert [line.rsplit(" ", 1)[-1] for line in healthy.lines] == ["first", "second"]


@pytest.mark.unit
def test_detached_widget_stops_receiving():
    handler = NiceGuiLogHandler()
    widget = LogWidget()
    attach_ui_log(widget)
    detach_ui_log(widget)
    handler.handle(make_record("paddy_remote", logging.ERROR, "gone"))
    assert widget.lines == []


@pytest.mark.unit
def test_formatter_colours_level_without_mutating_record():
    formatter = AnsiColorFormatter()
    formatter.colored = True
    record = make_record("paddy_remote", TRACE, "frame 3")
    line = formatter.format(record)
    assert "\033[32mTRACE\033[0m paddy_remote: frame 3" in line
    assert record.levelname == "TRACE"


@pytest.mark.unit
def test_formatter_plain_when_colour_disabled():
    line = AnsiColorFormatter(colored=False).format(make_record("paddy_remote", logging.INFO, "hi"))
    assert line.endswith(" INFO paddy_remote: hi")
    assert "\033[" not in line
