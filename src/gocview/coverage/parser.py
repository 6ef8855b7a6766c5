"""goc / go coverage profile parser.

A profile holds one block per line:

    <module path>:<startline>.<startcol>,<endline>.<endcol> <numstmt> <count>

Example:
    example.org/pkg/main.go:8.13,9.6 1 1
    example.org/pkg/main.go:9.6,12.3 2 70

- numstmt: number of statements in block
- count: execution count (0 = not covered)

Lines that do not fit the grammar (including the ``mode:`` header that
``go test -coverprofile`` writes) are skipped with a diagnostic; one bad line
never aborts the parse.

This module also scans process output for the aggregation server
announcement goc prints on startup:

    [goc] goc server started: http://127.0.0.1:49598
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from gocview.core.errors import ProfileError
from gocview.coverage.models import CoverageBlock

logger = structlog.get_logger()

_BLOCK_RE = re.compile(
    r"(?P<path>[^:]+):"
    r"(?P<start_line>[0-9]+)\.(?P<start_col>[0-9]+),"
    r"(?P<end_line>[0-9]+)\.(?P<end_col>[0-9]+)"
    r"\s+(?P<num_statements>[0-9]+)"
    r"\s+(?P<execution_count>[0-9]+)",
    re.ASCII,
)

_SERVER_RE = re.compile(
    r"\[[^\]\r\n]+\][^\r\n]*?\bstarted:\s*"
    r"(?P<url>[A-Za-z][A-Za-z0-9+.\-]*://[^\s/:]+:[0-9]+)",
    re.ASCII,
)

# Go cover counters are uint32
_MAX_FIELD = 2**32 - 1

_INT_FIELDS = (
    "start_line",
    "start_col",
    "end_line",
    "end_col",
    "num_statements",
    "execution_count",
)


@dataclass(frozen=True, slots=True)
class SkippedLine:
    """A non-blank profile line that did not produce a block."""

    line_number: int  # 1-based
    text: str
    reason: str


@dataclass(slots=True)
class ProfileParseResult:
    """Blocks in input order plus a diagnostic per skipped line."""

    blocks: list[CoverageBlock] = field(default_factory=list)
    skipped: list[SkippedLine] = field(default_factory=list)


def _block_from_match(match: re.Match[str]) -> CoverageBlock:
    values: dict[str, int] = {}
    for name in _INT_FIELDS:
        value = int(match.group(name))
        if value > _MAX_FIELD:
            raise ValueError(f"{name} out of range: {value}")
        values[name] = value
    return CoverageBlock(module_path=match.group("path"), **values)


def parse_profile_detailed(raw_text: str) -> ProfileParseResult:
    """Parse profile text, keeping a record of every skipped line."""
    result = ProfileParseResult()

    for line_number, line in enumerate(raw_text.splitlines(), start=1):
        line = line.strip()
        if not line:
            continue

        match = _BLOCK_RE.fullmatch(line)
        if match is None:
            logger.debug("profile_line_skipped", line_number=line_number, line=line)
            result.skipped.append(SkippedLine(line_number, line, "does not match block grammar"))
            continue

        try:
            block = _block_from_match(match)
        except ValueError as e:
            logger.warning(
                "profile_line_invalid", line_number=line_number, line=line, reason=str(e)
            )
            result.skipped.append(SkippedLine(line_number, line, str(e)))
            continue

        result.blocks.append(block)

    if result.skipped:
        logger.debug(
            "profile_parsed",
            blocks=len(result.blocks),
            skipped=len(result.skipped),
        )
    return result


def parse_profile(raw_text: str) -> list[CoverageBlock]:
    """Parse profile text into blocks, in input line order."""
    return parse_profile_detailed(raw_text).blocks


def load_profile(path: Path) -> ProfileParseResult:
    """Read and parse a profile file from disk.

    Raises:
        ProfileError: If the file is missing or cannot be decoded.
    """
    if not path.is_file():
        raise ProfileError.not_found(str(path))
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ProfileError.unreadable(str(path), str(e)) from e
    return parse_profile_detailed(content)


def extract_server_url(output_text: str) -> str | None:
    """Return the aggregation server URL announced in ``output_text``, if any.

    Stateless; safe to call on every chunk of process output.
    """
    match = _SERVER_RE.search(output_text)
    if match is None:
        return None
    return match.group("url")
