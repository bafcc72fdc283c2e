"""Utility helper functions for the storage service."""

import math
from datetime import datetime, timedelta, timezone
from typing import Optional

from common.constants import BLOCKED_EXTENSIONS, ROOT_FOLDER_ID
from gramstore.exceptions import InvalidFileError


def get_current_timestamp() -> str:
    """
    Get current UTC timestamp in ISO format.

    Microseconds are always rendered so stored timestamps compare correctly as strings.

    Returns:
        Current timestamp as ISO format string
    """
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def timestamp_seconds_ago(seconds: int) -> str:
    """
    Get the UTC timestamp `seconds` in the past, in the stored format.
    """
    cutoff = datetime.now(timezone.utc) - timedelta(seconds=seconds)
    return cutoff.isoformat(timespec="microseconds")


def parse_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value)


def normalize_folder_id(folder_id: Optional[int]) -> int:
    """
    Map a missing folder id to the root folder.
    """
    if folder_id is None:
        return ROOT_FOLDER_ID
    return int(folder_id)


def get_file_extension(file_name: str) -> str:
    last_dot = file_name.rfind('.')
    return file_name[last_dot:] if last_dot != -1 else ''


def validate_file_name(file_name: Optional[str]) -> str:
    """
    Check that a file name is usable for storage.

    Args:
        file_name: Name supplied by the uploader

    Returns:
        The name stripped of surrounding whitespace

    Raises:
        InvalidFileError: If the name is blank or carries an executable extension
    """
    if not file_name or not file_name.strip():
        raise InvalidFileError("Invalid file name")

    name = file_name.strip()
    if get_file_extension(name).lower() in BLOCKED_EXTENSIONS:
        raise InvalidFileError(f"File type not allowed for security reasons: {name}")

    return name


def format_file_size(num_bytes: int) -> str:
    """
    Format a byte count for humans (e.g. 1536 -> '1.5 KB').
    """
    if num_bytes <= 0:
        return "0 Bytes"

    units = ["Bytes", "KB", "MB", "GB", "TB"]
    i = min(int(math.floor(math.log(num_bytes, 1024))), len(units) - 1)
    value = round(num_bytes / (1024 ** i), 2)
    return f"{value:g} {units[i]}"
