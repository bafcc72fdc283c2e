"""Tests for helpers and log masking."""

import logging

import pytest

from common.logging_config import SensitiveDataFilter, short_handle
from gramstore.exceptions import IncompleteUploadError, InvalidFileError
from gramstore.utils import (
    format_file_size,
    get_file_extension,
    normalize_folder_id,
    timestamp_seconds_ago,
    get_current_timestamp,
    validate_file_name,
)


class TestValidateFileName:
    def test_strips_whitespace(self):
        assert validate_file_name("  report.pdf ") == "report.pdf"

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_blank_names_rejected(self, name):
        with pytest.raises(InvalidFileError):
            validate_file_name(name)

    @pytest.mark.parametrize("name", ["setup.exe", "run.BAT", "x.cmd", "s.scr", "p.pif", "c.com"])
    def test_blocked_extensions_rejected(self, name):
        with pytest.raises(InvalidFileError):
            validate_file_name(name)

    def test_extension_only_checked_at_the_end(self):
        assert validate_file_name("setup.exe.txt") == "setup.exe.txt"


def test_get_file_extension():
    assert get_file_extension("archive.tar.gz") == ".gz"
    assert get_file_extension("README") == ""


def test_normalize_folder_id_defaults_to_root():
    assert normalize_folder_id(None) == 1
    assert normalize_folder_id(7) == 7


@pytest.mark.parametrize("size,expected", [(0, "0 Bytes"), (512, "512 Bytes"), (1536, "1.5 KB"),
                                           (5 * 1024 * 1024, "5 MB")])
def test_format_file_size(size, expected):
    assert format_file_size(size) == expected


def test_timestamps_compare_as_strings():
    assert timestamp_seconds_ago(60) < get_current_timestamp()


def test_short_handle():
    assert short_handle(None) == "<none>"
    assert short_handle("abc") == "abc"
    assert short_handle("BQACAgIAAxkBAAIB") == "BQACAgIAAx..."


def test_sensitive_filter_masks_bot_token_in_urls():
    record = logging.LogRecord(
        "gramstore", logging.INFO, __file__, 1,
        "POST https://api.telegram.org/bot123456:ABC-def_ghi/sendDocument", None, None
    )

    SensitiveDataFilter().filter(record)

    assert "ABC-def_ghi" not in record.msg
    assert "/bot***MASKED***/sendDocument" in record.msg


def test_incomplete_upload_message_lists_missing_indices():
    exc = IncompleteUploadError("u1", expected=3, actual=2, missing=[1])

    assert "expected 3 chunks, found 2" in str(exc)
    assert "missing indices: 1" in str(exc)
    assert exc.missing == [1]
