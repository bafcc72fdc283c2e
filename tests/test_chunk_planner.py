"""Unit tests for chunk planning and labelling."""

import pytest

from common.types import ChunkDescriptor
from gramstore.chunk_planner import chunk_label, plan_chunks


MIB = 1024 * 1024


class TestPlanChunks:
    def test_twelve_mib_with_five_mib_chunks(self):
        plan = plan_chunks(12 * MIB, 5 * MIB)

        assert [c.index for c in plan] == [0, 1, 2]
        assert [c.length for c in plan] == [5 * MIB, 5 * MIB, 2 * MIB]
        assert [c.offset for c in plan] == [0, 5 * MIB, 10 * MIB]

    def test_exact_multiple_has_no_trailing_empty_chunk(self):
        plan = plan_chunks(10, 5)

        assert plan == [
            ChunkDescriptor(index=0, offset=0, length=5),
            ChunkDescriptor(index=1, offset=5, length=5),
        ]

    def test_smaller_than_one_chunk(self):
        assert plan_chunks(3, 5) == [ChunkDescriptor(index=0, offset=0, length=3)]

    def test_zero_bytes_yields_single_empty_chunk(self):
        assert plan_chunks(0, 5) == [ChunkDescriptor(index=0, offset=0, length=0)]

    def test_descriptors_cover_the_whole_file(self):
        plan = plan_chunks(1001, 7)

        assert sum(c.length for c in plan) == 1001
        assert all(0 < c.length <= 7 for c in plan)
        for previous, current in zip(plan, plan[1:]):
            assert current.offset == previous.end
            assert current.index == previous.index + 1

    def test_negative_size_rejected(self):
        with pytest.raises(ValueError):
            plan_chunks(-1, 5)

    @pytest.mark.parametrize("max_chunk_size", [0, -5])
    def test_non_positive_chunk_size_rejected(self, max_chunk_size):
        with pytest.raises(ValueError):
            plan_chunks(10, max_chunk_size)


@pytest.mark.parametrize("total_size,expected", [(0, 1), (1, 1), (5, 1), (6, 2), (12, 3)])
def test_chunk_count(total_size, expected):
    assert len(plan_chunks(total_size, 5)) == expected


class TestChunkLabel:
    def test_multi_chunk_label_is_zero_padded(self):
        assert chunk_label("movie.mkv", 0, 3) == "movie.mkv.part000"
        assert chunk_label("movie.mkv", 12, 20) == "movie.mkv.part012"

    def test_single_chunk_keeps_the_name(self):
        assert chunk_label("notes.txt", 0, 1) == "notes.txt"
