"""Coverage data model.

Block-centric model for goc/go coverage profiles. A profile line becomes one
immutable ``CoverageBlock``; blocks sharing a module path are aggregated into
a ``FileCoverage`` on demand. Per-block coverage is binary: a block is either
executed (100%) or not (0%).
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class CoverageBlock:
    """One covered/uncovered source range from a profile line.

    Positions are 1-based. ``(start_line, start_col)`` must not come after
    ``(end_line, end_col)``, and a single-line block must be non-empty.
    """

    module_path: str  # as written in the profile, not an on-disk path
    start_line: int
    start_col: int
    end_line: int
    end_col: int
    num_statements: int
    execution_count: int

    def __post_init__(self) -> None:
        if min(self.start_line, self.start_col, self.end_line, self.end_col) < 1:
            raise ValueError("block positions must be >= 1")
        if self.num_statements < 0 or self.execution_count < 0:
            raise ValueError("statement and execution counts must be >= 0")
        if (self.start_line, self.start_col) > (self.end_line, self.end_col):
            raise ValueError("block start must not come after block end")
        if self.start_line == self.end_line and self.start_col >= self.end_col:
            raise ValueError("single-line block must have start_col < end_col")

    @property
    def is_covered(self) -> bool:
        """True if the block was entered at least once."""
        return self.execution_count > 0

    @property
    def coverage_percentage(self) -> float:
        return 100.0 if self.is_covered else 0.0

    @property
    def zero_based_start(self) -> tuple[int, int]:
        """(line, column) of the block start, 0-based and clamped at 0."""
        return max(self.start_line - 1, 0), max(self.start_col - 1, 0)


Snapshot = Mapping[str, Sequence[CoverageBlock]]


@dataclass(slots=True)
class FileCoverage:
    """All blocks sharing one module path, in profile order."""

    module_path: str
    blocks: list[CoverageBlock] = field(default_factory=list)

    @property
    def block_count(self) -> int:
        return len(self.blocks)

    @property
    def total_statements(self) -> int:
        return sum(b.num_statements for b in self.blocks)

    @property
    def covered_statements(self) -> int:
        return sum(b.num_statements for b in self.blocks if b.is_covered)

    @property
    def total_executions(self) -> int:
        """Sum of execution counts over all blocks."""
        return sum(b.execution_count for b in self.blocks)

    @property
    def coverage_percentage(self) -> float:
        """Covered statements as a percentage (0.0 when there are no statements)."""
        total = self.total_statements
        if total == 0:
            return 0.0
        return self.covered_statements / total * 100.0

    @property
    def uncovered_blocks(self) -> list[CoverageBlock]:
        return [b for b in self.blocks if not b.is_covered]


@dataclass(frozen=True, slots=True)
class CoverageSummary:
    """Aggregate statistics over a grouped snapshot."""

    total_files: int
    fully_covered_files: int
    total_blocks: int
    covered_blocks: int
    total_statements: int
    covered_statements: int

    @property
    def coverage_percentage(self) -> float:
        if self.total_statements == 0:
            return 0.0
        return self.covered_statements / self.total_statements * 100.0

    @classmethod
    def from_files(cls, files: Iterable[FileCoverage]) -> CoverageSummary:
        files = list(files)
        return cls(
            total_files=len(files),
            fully_covered_files=sum(
                1 for f in files if f.total_statements > 0 and not f.uncovered_blocks
            ),
            total_blocks=sum(f.block_count for f in files),
            covered_blocks=sum(1 for f in files for b in f.blocks if b.is_covered),
            total_statements=sum(f.total_statements for f in files),
            covered_statements=sum(f.covered_statements for f in files),
        )


def group_by_file(blocks: Iterable[CoverageBlock]) -> list[FileCoverage]:
    """Group blocks by module path.

    Files appear in the order the profile first mentions them; blocks keep
    their input order within each file.
    """
    files: dict[str, FileCoverage] = {}
    for block in blocks:
        file_cov = files.get(block.module_path)
        if file_cov is None:
            file_cov = files[block.module_path] = FileCoverage(module_path=block.module_path)
        file_cov.blocks.append(block)
    return list(files.values())


def rank_by_coverage(files: Iterable[FileCoverage]) -> list[FileCoverage]:
    """Sort files by coverage percentage, highest first (stable)."""
    return sorted(files, key=lambda f: f.coverage_percentage, reverse=True)


def to_snapshot(files: Iterable[FileCoverage]) -> dict[str, list[CoverageBlock]]:
    """Build the module path -> blocks mapping a registry stores."""
    return {f.module_path: list(f.blocks) for f in files}


def navigation_target(file_cov: FileCoverage) -> CoverageBlock | None:
    """Block a viewer should jump to: first uncovered, else first, else None."""
    for block in file_cov.blocks:
        if not block.is_covered:
            return block
    return file_cov.blocks[0] if file_cov.blocks else None
