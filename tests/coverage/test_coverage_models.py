"""Tests for coverage data models."""

import pytest

from gocview.coverage.models import (
    CoverageBlock,
    CoverageSummary,
    FileCoverage,
    group_by_file,
    navigation_target,
    rank_by_coverage,
    to_snapshot,
)


def _block(
    path: str = "a/b/main.go",
    start: tuple[int, int] = (1, 1),
    end: tuple[int, int] = (2, 1),
    stmts: int = 1,
    count: int = 0,
) -> CoverageBlock:
    return CoverageBlock(
        module_path=path,
        start_line=start[0],
        start_col=start[1],
        end_line=end[0],
        end_col=end[1],
        num_statements=stmts,
        execution_count=count,
    )


class TestCoverageBlock:
    """CoverageBlock invariants and derived values."""

    def test_covered_when_executed(self) -> None:
        assert _block(count=3).is_covered
        assert _block(count=3).coverage_percentage == 100.0

    def test_uncovered_when_never_executed(self) -> None:
        assert not _block(count=0).is_covered
        assert _block(count=0).coverage_percentage == 0.0

    def test_block_is_immutable(self) -> None:
        block = _block()
        with pytest.raises(AttributeError):
            block.execution_count = 5  # type: ignore[misc]

    @pytest.mark.parametrize(
        ("start", "end"),
        [
            ((0, 1), (2, 1)),  # zero line
            ((1, 0), (2, 1)),  # zero column
            ((5, 1), (4, 9)),  # end before start
            ((3, 7), (3, 7)),  # empty single-line block
            ((3, 8), (3, 7)),  # reversed single-line block
        ],
    )
    def test_invalid_ranges_rejected(self, start: tuple[int, int], end: tuple[int, int]) -> None:
        with pytest.raises(ValueError):
            _block(start=start, end=end)

    def test_negative_counts_rejected(self) -> None:
        with pytest.raises(ValueError):
            _block(stmts=-1)
        with pytest.raises(ValueError):
            _block(count=-1)

    def test_single_line_block_allowed_when_non_empty(self) -> None:
        block = _block(start=(3, 2), end=(3, 9))
        assert block.start_line == block.end_line

    def test_zero_based_start(self) -> None:
        assert _block(start=(8, 13), end=(9, 6)).zero_based_start == (7, 12)


class TestFileCoverage:
    """FileCoverage aggregate statistics."""

    def test_statement_totals(self) -> None:
        fc = FileCoverage(
            "a/b/main.go",
            [_block(stmts=1, count=1), _block(stmts=2, count=70), _block(stmts=4, count=0)],
        )
        assert fc.total_statements == 7
        assert fc.covered_statements == 3
        assert fc.total_executions == 71
        assert fc.block_count == 3
        assert fc.coverage_percentage == pytest.approx(300 / 7)

    def test_zero_statements_means_zero_percent(self) -> None:
        fc = FileCoverage("a/b/empty.go", [_block(stmts=0, count=5)])
        assert fc.total_statements == 0
        assert fc.coverage_percentage == 0.0

    def test_empty_file_coverage(self) -> None:
        assert FileCoverage("a/b/none.go").coverage_percentage == 0.0

    @pytest.mark.parametrize(
        "counts",
        [[0, 0, 0], [1, 0, 2], [5, 5, 5], [0]],
    )
    def test_percentage_stays_in_bounds(self, counts: list[int]) -> None:
        fc = FileCoverage("x.go", [_block(stmts=i + 1, count=c) for i, c in enumerate(counts)])
        assert 0.0 <= fc.coverage_percentage <= 100.0


class TestGrouping:
    """group_by_file / rank_by_coverage / to_snapshot."""

    def test_groups_preserve_first_appearance_and_block_order(self) -> None:
        b1 = _block("a/main.go", start=(1, 1), end=(2, 1))
        b2 = _block("a/h.go", start=(1, 1), end=(2, 1))
        b3 = _block("a/main.go", start=(5, 1), end=(6, 1))

        files = group_by_file([b1, b2, b3])

        assert [f.module_path for f in files] == ["a/main.go", "a/h.go"]
        assert files[0].blocks == [b1, b3]

    def test_grouping_keeps_every_block(self) -> None:
        blocks = [_block(f"f{i % 3}.go") for i in range(10)]
        files = group_by_file(blocks)
        assert sum(f.block_count for f in files) == len(blocks)

    def test_rank_by_coverage_highest_first(self) -> None:
        low = FileCoverage("low.go", [_block(count=0)])
        high = FileCoverage("high.go", [_block(count=1)])
        assert [f.module_path for f in rank_by_coverage([low, high])] == ["high.go", "low.go"]

    def test_to_snapshot(self) -> None:
        b = _block("a/main.go")
        assert to_snapshot(group_by_file([b])) == {"a/main.go": [b]}


class TestNavigationTarget:
    def test_prefers_first_uncovered_block(self) -> None:
        covered = _block(start=(1, 1), end=(2, 1), count=1)
        uncovered = _block(start=(5, 1), end=(6, 1), count=0)
        assert navigation_target(FileCoverage("f.go", [covered, uncovered])) is uncovered

    def test_falls_back_to_first_block(self) -> None:
        first = _block(start=(1, 1), end=(2, 1), count=1)
        second = _block(start=(5, 1), end=(6, 1), count=2)
        assert navigation_target(FileCoverage("f.go", [first, second])) is first

    def test_none_without_blocks(self) -> None:
        assert navigation_target(FileCoverage("f.go")) is None


class TestCoverageSummary:
    def test_summary_from_files(self) -> None:
        files = [
            FileCoverage("a.go", [_block(stmts=1, count=1), _block(stmts=2, count=70)]),
            FileCoverage("b.go", [_block(stmts=3, count=0)]),
        ]
        summary = CoverageSummary.from_files(files)

        assert summary.total_files == 2
        assert summary.fully_covered_files == 1
        assert summary.total_blocks == 3
        assert summary.covered_blocks == 2
        assert summary.total_statements == 6
        assert summary.covered_statements == 3
        assert summary.coverage_percentage == 50.0

    def test_empty_summary(self) -> None:
        summary = CoverageSummary.from_files([])
        assert summary.total_files == 0
        assert summary.coverage_percentage == 0.0
