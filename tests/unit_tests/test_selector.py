"""
SelectorLogger tests: sink selection, stdout/file routing and rotation pass-through.
"""

from __future__ import annotations

import asyncio

import pytest

import sinklog
from sinklog import (
    BufferSink,
    ConfigurationError,
    LoggerConfig,
    SelectorLogger,
    SinkKind,
)


class TestSinkSelection:
    def test_without_path_writes_to_stdout(self, capsys, formatter) -> None:
        logger = SelectorLogger(formatter=formatter)
        logger.info("hello stdout")
        logger.warning("second line")

        out = capsys.readouterr().out
        assert logger.kind is SinkKind.STDOUT
        assert out.count("\n") == 2
        assert " INF: hello stdout" in out

    def test_with_path_writes_to_file_only(self, capsys, tmp_path, formatter) -> None:
        path = tmp_path / "out.log"
        logger = SelectorLogger(path=str(path), formatter=formatter)

        logger.info("first")
        logger.error("second")
        logger.close().result()

        assert logger.kind is SinkKind.FILE
        assert capsys.readouterr().out == ""
        assert len(path.read_text().splitlines()) == 2

    def test_file_mode_appends_by_default(self, tmp_path, formatter) -> None:
        path = tmp_path / "out.log"
        path.write_text("kept\n")

        logger = SelectorLogger(LoggerConfig(path=str(path)), formatter=formatter)
        logger.info("added")
        logger.close().result()

        lines = path.read_text().splitlines()
        assert lines[0] == "kept"
        assert lines[1].endswith(" INF: added")

    def test_options_override_config(self, tmp_path) -> None:
        path = tmp_path / "out.log"
        logger = SelectorLogger(LoggerConfig(threshold="error"), path=str(path))

        assert logger.kind is SinkKind.FILE
        assert logger.threshold is sinklog.ERROR
        logger.close().result()

    def test_option_aliases_override_config(self) -> None:
        errors = BufferSink()
        base = LoggerConfig(threshold="error")

        logger = SelectorLogger(base, log_level="debug", error_stream=errors)

        assert logger.threshold is sinklog.DEBUG
        assert logger.error_sink is errors
        assert logger.config.flags == "a"
        assert base.threshold is sinklog.ERROR

    def test_unset_options_keep_config_values(self) -> None:
        errors = BufferSink()
        logger = SelectorLogger(LoggerConfig(threshold="error", error_sink=errors), fd=1)

        assert logger.threshold is sinklog.ERROR
        assert logger.error_sink is errors

    def test_log_level_alias(self) -> None:
        logger = SelectorLogger(log_level="debug")
        assert logger.threshold is sinklog.DEBUG

    def test_from_config_rejects_explicit_sink(self) -> None:
        with pytest.raises(TypeError):
            SelectorLogger.from_config(LoggerConfig(), BufferSink())

    def test_unknown_level_is_fatal(self) -> None:
        with pytest.raises(ConfigurationError):
            SelectorLogger(log_level="loud")


class TestCriticalMirror:
    def test_critical_goes_to_stderr_by_default(self, capsys, tmp_path, formatter) -> None:
        path = tmp_path / "out.log"
        logger = SelectorLogger(path=str(path), formatter=formatter)

        logger.critical("meltdown")
        logger.error("not mirrored")
        logger.close().result()

        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err.count("\n") == 1
        assert captured.err.encode() == path.read_bytes().splitlines(keepends=True)[0]

    def test_configured_error_sink_replaces_stderr(self, capsys, formatter) -> None:
        errors = BufferSink()
        logger = SelectorLogger(error_sink=errors, formatter=formatter)

        logger.critical("meltdown")

        assert capsys.readouterr().err == ""
        assert len(errors.buffer) == 1

    def test_mirror_can_be_disabled(self) -> None:
        assert SelectorLogger(mirror_critical=False).error_sink is None


class TestRotation:
    def test_rotate_keeps_every_line(self, tmp_path, formatter) -> None:
        path = tmp_path / "test-log.txt"
        logger = SelectorLogger(path=str(path), mirror_critical=False, formatter=formatter)
        events = []
        logger.rotated.connect(events.append)
        sinklog.init(logger)

        sinklog.critical("message1")
        rotation = sinklog.rotate()
        sinklog.critical("message2")
        sinklog.critical("message3")

        rotation.result(timeout=1)
        logger.close().result()

        lines = path.read_text().splitlines()
        assert [line.rsplit(" ", 1)[-1] for line in lines] == ["message1", "message2", "message3"]
        assert events == [logger]

    def test_stdout_rotation_is_a_no_op(self, capsys) -> None:
        logger = SelectorLogger(mirror_critical=False)
        events = []
        logger.rotated.connect(events.append)

        assert logger.rotate().result() is None
        assert events == []

    async def test_rotation_can_be_awaited(self, tmp_path, formatter) -> None:
        path = tmp_path / "app.log"
        logger = SelectorLogger(path=str(path), mirror_critical=False, formatter=formatter)
        rotated = asyncio.Event()
        logger.rotated.once(lambda _: rotated.set())

        logger.info("before")
        await asyncio.wrap_future(logger.rotate())
        await asyncio.wrap_future(logger.info("after"))
        await asyncio.wait_for(rotated.wait(), timeout=1)
        await asyncio.wrap_future(logger.close())

        assert len(path.read_text().splitlines()) == 2
