# File: tests/test_logger.py
import logging
from logging.handlers import RotatingFileHandler

from contact_scout.logger import configure, get_logger, init_logging


def test_child_loggers_share_the_project_handlers(tmp_path):
    log_file = tmp_path / "scout.log"
    root = configure(level="DEBUG", log_file=log_file)
    try:
        assert any(isinstance(h, RotatingFileHandler) for h in root.handlers)
        child = get_logger("crawler")
        assert child.name == "ContactScout.crawler"
        child.debug("fetched %s", "https://djnova.com/")
        for handler in root.handlers:
            handler.flush()
        assert "ContactScout.crawler | fetched https://djnova.com/" in log_file.read_text(encoding="utf-8")
    finally:
        init_logging()


def test_reconfigure_replaces_handlers():
    first = init_logging(level="WARNING")
    assert len(first.handlers) == 1
    second = init_logging(level=logging.DEBUG)
    assert second is first
    assert len(second.handlers) == 1
    assert second.level == logging.DEBUG
    assert not second.propagate
    init_logging()
