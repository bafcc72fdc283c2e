"""Project-wide constants (size ceilings, chunk naming, root folder)."""

MAX_CHUNK_SIZE_BYTES: int = 5 * 1024 * 1024  # 5 MiB, bounded by per-request memory
TELEGRAM_MAX_OBJECT_BYTES: int = 20 * 1024 * 1024  # Bot API document download ceiling
MAX_FILE_SIZE_BYTES: int = 100 * 1024 * 1024  # whole-file uploads are buffered in memory
MAX_RESUMABLE_FILE_SIZE_BYTES: int = 2 * 1024 * 1024 * 1024

TEMP_CHUNK_MAX_AGE_SECONDS: int = 24 * 3600
SWEEP_INTERVAL_SECONDS: int = 3600

ROOT_FOLDER_ID: int = 1
ROOT_FOLDER_NAME: str = "Root"

CHUNK_LABEL_SUFFIX: str = ".part"
CHUNK_LABEL_PAD: int = 3

DEFAULT_MIME_TYPE: str = "application/octet-stream"

BLOCKED_EXTENSIONS = (".exe", ".bat", ".cmd", ".scr", ".pif", ".com")

HANDLE_LOG_PREFIX_LENGTH: int = 10
