"""Tests for run log setup"""

import logging
from datetime import datetime

from c8deploy.logs import prepare_log_dir, run_log_path, setup_logging


def test_log_path_embeds_run_timestamp(tmp_path):
    path = run_log_path(tmp_path, "servicelog", datetime(2025, 8, 21, 9, 5, 3))
    assert path == tmp_path / "servicelog_20250821_090503.log"


def test_file_in_the_way_is_moved_aside(tmp_path):
    log_dir = tmp_path / "logs"
    log_dir.write_text("not a directory")

    prepare_log_dir(log_dir)

    assert log_dir.is_dir()
    backups = list(tmp_path.glob("logs.bak_*"))
    assert len(backups) == 1
    assert backups[0].read_text() == "not a directory"


def test_records_reach_the_run_log_file(tmp_path):
    logger, log_file = setup_logging(tmp_path / "logs", "health", console_output=False)
    try:
        logging.getLogger("c8deploy.health").info("zeebe: running")
        logging.getLogger("c8deploy.health").debug("--- Logs: zeebe ---")
    finally:
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)

    text = log_file.read_text()
    assert log_file.name.startswith("health_")
    assert "INFO   : zeebe: running" in text
    assert "--- Logs: zeebe ---" in text
