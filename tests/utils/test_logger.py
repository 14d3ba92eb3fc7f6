import datetime
import logging

from app.utils import logger as logger_module
from app.utils.logger import cleanup_old_logs, setup_logger


def test_setup_logger_is_idempotent():
    first = setup_logger("tests.logger")
    second = setup_logger("tests.logger")

    assert first is second
    assert len(first.handlers) == 2


def test_setup_logger_level_override():
    assert setup_logger("tests.logger.debug", level="debug").level == logging.DEBUG
    assert setup_logger("tests.logger.bogus", level="bogus").level == logging.INFO


def test_cleanup_old_logs(tmp_path, monkeypatch):
    monkeypatch.setattr(logger_module, "LOG_DIR", tmp_path)
    old_day = (datetime.datetime.now() - datetime.timedelta(days=30)).strftime("%Y-%m-%d")
    today = datetime.datetime.now().strftime("%Y-%m-%d")
    for day in (old_day, today):
        (tmp_path / day).mkdir()
        (tmp_path / day / "image_gallery.log").write_text("line\n")
    (tmp_path / "not-a-date").mkdir()

    assert cleanup_old_logs(keep_days=7) == 1
    assert not (tmp_path / old_day).exists()
    assert (tmp_path / today / "image_gallery.log").exists()
    assert (tmp_path / "not-a-date").exists()
