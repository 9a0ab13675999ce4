"""Tests for the scoped temporary log file."""

import os

import pytest

from jspkgmgr.common.log_capture import capture_log


def test_removed_after_success(tmp_path):
    """Leaving the block normally deletes the log."""
    final = tmp_path / "jspkgmgr.log"

    with capture_log(str(final)) as log:
        log.stream.write("all fine\n")
        assert log.read() == "all fine\n"
        temp_path = log.temp_path

    assert not os.path.exists(temp_path)
    assert not final.exists()


def test_preserved_after_failure(tmp_path):
    """An exception moves the log to its final path."""
    final = tmp_path / "jspkgmgr.log"

    with pytest.raises(RuntimeError):
        with capture_log(str(final)) as log:
            log.stream.write("npm ERR! code E404\n")
            temp_path = log.temp_path
            raise RuntimeError("install failed")

    assert not os.path.exists(temp_path)
    assert final.read_text() == "npm ERR! code E404\n"


def test_read_after_close_returns_text(tmp_path):
    """read works while open and returns nothing once removed."""
    with capture_log(str(tmp_path / "x.log")) as log:
        log.stream.write("partial")
        log.stream.flush()
        text = log.read()
    assert text == "partial"
    assert log.read() == ""
