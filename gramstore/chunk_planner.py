"""Chunk boundary planning for files stored as multiple remote objects."""

from typing import List

from common.constants import CHUNK_LABEL_PAD, CHUNK_LABEL_SUFFIX
from common.types import ChunkDescriptor


def plan_chunks(total_size: int, max_chunk_size: int) -> List[ChunkDescriptor]:
    """
    Split a file of `total_size` bytes into ordered chunk descriptors.

    A zero-byte file still yields one zero-length chunk so that every file
    owns at least one remote object and one chunk record.

    Args:
        total_size: Size of the whole file in bytes (>= 0)
        max_chunk_size: Largest allowed chunk in bytes (> 0)

    Returns:
        Descriptors with contiguous 0-based indices whose lengths sum to total_size

    Raises:
        ValueError: If total_size is negative or max_chunk_size is not positive
    """
    if total_size < 0:
        raise ValueError(f"total_size must be non-negative, got {total_size}")
    if max_chunk_size <= 0:
        raise ValueError(f"max_chunk_size must be positive, got {max_chunk_size}")

    if total_size == 0:
        return [ChunkDescriptor(index=0, offset=0, length=0)]

    chunks = []
    offset = 0
    index = 0
    while offset < total_size:
        length = min(max_chunk_size, total_size - offset)
        chunks.append(ChunkDescriptor(index=index, offset=offset, length=length))
        offset += length
        index += 1

    return chunks


def chunk_label(file_name: str, chunk_index: int, total_chunks: int) -> str:
    """
    Remote-side name for a chunk: `name.partNNN` for multi-chunk files, the bare name otherwise.
    """
    if total_chunks > 1:
        return f"{file_name}{CHUNK_LABEL_SUFFIX}{chunk_index:0{CHUNK_LABEL_PAD}d}"
    return file_name
