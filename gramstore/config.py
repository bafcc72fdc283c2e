"""Configuration settings for the storage service."""

import os
from common.constants import (
    MAX_CHUNK_SIZE_BYTES,
    MAX_FILE_SIZE_BYTES,
    MAX_RESUMABLE_FILE_SIZE_BYTES,
    TELEGRAM_MAX_OBJECT_BYTES,
    TEMP_CHUNK_MAX_AGE_SECONDS,
    SWEEP_INTERVAL_SECONDS,
)


DATABASE_PATH = os.environ.get("GRAMSTORE_DATABASE_PATH", "./data/metadata.db")

SERVICE_HOST = os.environ.get("GRAMSTORE_HOST", "0.0.0.0")

SERVICE_PORT = int(os.environ.get("GRAMSTORE_PORT", "8000"))

MAX_CHUNK_SIZE = int(os.environ.get("GRAMSTORE_MAX_CHUNK_SIZE", str(MAX_CHUNK_SIZE_BYTES)))

MAX_FILE_SIZE = int(os.environ.get("GRAMSTORE_MAX_FILE_SIZE", str(MAX_FILE_SIZE_BYTES)))

MAX_RESUMABLE_FILE_SIZE = int(
    os.environ.get("GRAMSTORE_MAX_RESUMABLE_FILE_SIZE", str(MAX_RESUMABLE_FILE_SIZE_BYTES))
)

TEMP_CHUNK_MAX_AGE = int(os.environ.get("GRAMSTORE_TEMP_CHUNK_MAX_AGE", str(TEMP_CHUNK_MAX_AGE_SECONDS)))

SWEEP_INTERVAL = int(os.environ.get("GRAMSTORE_SWEEP_INTERVAL", str(SWEEP_INTERVAL_SECONDS)))

TELEGRAM_BOT_TOKEN = os.environ.get("TELEGRAM_BOT_TOKEN", "")

TELEGRAM_CHAT_ID = os.environ.get("TELEGRAM_CHAT_ID", "")

TELEGRAM_API_BASE = os.environ.get("TELEGRAM_API_BASE", "https://api.telegram.org")

TELEGRAM_MAX_OBJECT_SIZE = int(os.environ.get("TELEGRAM_MAX_OBJECT_SIZE", str(TELEGRAM_MAX_OBJECT_BYTES)))

TELEGRAM_TIMEOUT_SECONDS = float(os.environ.get("TELEGRAM_TIMEOUT_SECONDS", "60"))
