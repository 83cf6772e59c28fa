"""
tests/core/test_logging_config.py

Tests for the kycgate logging configuration.
"""

import os

from kycgate.core.logging import build_logging_config


def test_log_files_live_in_log_dir(tmp_path) -> None:
    config = build_logging_config(str(tmp_path), "debug")
    handlers = config["handlers"]

    assert handlers["kycgate_file"]["filename"] == os.path.join(tmp_path, "kycgate.log")
    assert handlers["kycgate_errors"]["filename"] == os.path.join(tmp_path, "kycgate-error.log")
    assert handlers["kycgate_errors"]["level"] == "ERROR"
    assert handlers["review_audit"]["filename"] == os.path.join(tmp_path, "kycgate-review.log")


def test_levels(tmp_path) -> None:
    config = build_logging_config(str(tmp_path), "debug")
    loggers = config["loggers"]

    assert loggers["kycgate"]["level"] == "DEBUG"
    assert loggers["kycgate.review"]["handlers"] == ["review_audit"]
    assert loggers["sqlalchemy"]["level"] == "WARNING"
    assert config["root"]["level"] == "WARNING"
    assert set(config["root"]["handlers"]) == {"kycgate_console", "kycgate_file", "kycgate_errors"}
