"""Tests for log masking."""

import logging

from common.logging_config import SensitiveDataFilter, setup_logging


def make_record(msg, args=()):
    return logging.LogRecord("test", logging.INFO, __file__, 1, msg, args, None)


def test_share_path_token_is_masked():
    record = make_record("Request started: GET /api/share/abc123XYZ/info")

    SensitiveDataFilter().filter(record)

    assert "abc123XYZ" not in record.getMessage()
    assert "/share/***MASKED***/info" in record.getMessage()


def test_token_in_args_is_masked():
    record = make_record("issued %s", ("share_token=s3cr3t",))

    SensitiveDataFilter().filter(record)

    assert "s3cr3t" not in record.getMessage()


def test_plain_message_untouched():
    record = make_record("Uploaded file 7 for user 3")

    assert SensitiveDataFilter().filter(record)
    assert record.getMessage() == "Uploaded file 7 for user 3"


def test_setup_logging_installs_single_handler():
    setup_logging("shareline-test", "DEBUG")
    setup_logging("shareline-test", "DEBUG")

    handlers = [h for h in logging.getLogger().handlers if getattr(h, "_shareline_handler", False)]
    assert len(handlers) == 1
    assert logging.getLogger("shareline-test").level == logging.DEBUG
