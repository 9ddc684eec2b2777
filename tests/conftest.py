from datetime import datetime

import pytest

import sinklog
from sinklog import BufferSink, LineFormatter, Logger

FIXED_NOW = datetime(2024, 3, 5, 9, 7, 3)
FIXED_STAMP = "Tue Mar 05 09:07:03 2024"


@pytest.fixture
def formatter() -> LineFormatter:
    """Formatter with a pinned clock and LF line endings."""
    return LineFormatter(clock=lambda: FIXED_NOW, eol="\n")


@pytest.fixture
def buffer_sink() -> BufferSink:
    return BufferSink()


@pytest.fixture
def buffer_logger(buffer_sink, formatter) -> Logger:
    return Logger(buffer_sink, formatter=formatter)


@pytest.fixture(autouse=True)
def restore_default_logger():
    """Every test starts and ends with the process default logger registered."""
    sinklog.init(sinklog.DefaultLogger)
    yield
    sinklog.init(sinklog.DefaultLogger)


@pytest.fixture
def stamp() -> str:
    return FIXED_STAMP
