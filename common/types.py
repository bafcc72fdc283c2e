"""Shared data type definitions."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ChunkDescriptor:
    """
    Position of one chunk inside a file.
    """
    index: int
    offset: int
    length: int

    @property
    def end(self) -> int:
        return self.offset + self.length
