"""Fallback text replacement used by the edit tool.

The caller's ``old`` text often drifts from the file on disk in whitespace or
line boundaries. ``replace`` tries four matchers from strictest to loosest and
stops at the first one that finds anything:

1. exact substring
2. line-trimmed window (each line compared after strip())
3. whitespace-normalized single line
4. block anchor (first and last lines of a >=3 line block)

Unless ``replace_all`` is set, a matcher that finds more than one candidate
fails the whole edit instead of guessing.
"""

from __future__ import annotations

import difflib
from collections.abc import Callable
from dataclasses import dataclass

import structlog

from execagent.constants import DIFF_CONTEXT_LINES
from execagent.infra.errors import ToolExecutionError

logger = structlog.get_logger()

TOOL_NAME = "edit"

Span = tuple[int, int]


@dataclass(frozen=True)
class DiffStats:
    additions: int
    deletions: int


def normalize_line_endings(text: str) -> str:
    return text.replace("\r\n", "\n")


def split_lines(text: str) -> list[str]:
    """Split on LF without a trailing empty line for a final newline."""
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


def _split_keepends(text: str) -> list[str]:
    lines = [line + "\n" for line in text.split("\n")]
    lines[-1] = lines[-1][:-1]
    if not lines[-1]:
        lines.pop()
    return lines


def _line_spans(content: str) -> list[Span]:
    """(start, end) offsets of each line in content, newline excluded."""
    spans: list[Span] = []
    start = 0
    for line in split_lines(content):
        end = start + len(line)
        spans.append((start, end))
        start = end + 1
    return spans


def _block_span(spans: list[Span], first: int, last: int) -> Span:
    return spans[first][0], spans[last][1]


def _exact_matches(content: str, old: str) -> list[Span]:
    matches: list[Span] = []
    idx = content.find(old)
    while idx != -1:
        matches.append((idx, idx + len(old)))
        idx = content.find(old, idx + 1)
    return matches


def _line_trimmed_matches(content: str, old: str) -> list[Span]:
    content_lines = split_lines(content)
    search = [line.strip() for line in split_lines(old)]
    if not search:
        return []

    spans = _line_spans(content)
    matches: list[Span] = []
    for i in range(len(content_lines) - len(search) + 1):
        if all(content_lines[i + j].strip() == s for j, s in enumerate(search)):
            matches.append(_block_span(spans, i, i + len(search) - 1))
    return matches


def _normalize_whitespace(text: str) -> str:
    return " ".join(text.split())


def _whitespace_normalized_matches(content: str, old: str) -> list[Span]:
    target = _normalize_whitespace(old)
    if not target:
        return []
    return [
        span
        for span, line in zip(_line_spans(content), split_lines(content))
        if _normalize_whitespace(line) == target
    ]


def _block_anchor_matches(content: str, old: str) -> list[Span]:
    search = split_lines(old)
    if len(search) < 3:
        return []

    first, last = search[0].strip(), search[-1].strip()
    content_lines = [line.strip() for line in split_lines(content)]
    spans = _line_spans(content)

    matches: list[Span] = []
    for i, line in enumerate(content_lines):
        if line != first:
            continue
        for j in range(i + 2, len(content_lines)):
            if content_lines[j] == last:
                matches.append(_block_span(spans, i, j))
                break
    return matches


Matcher = Callable[[str, str], list[Span]]

STRATEGIES: tuple[tuple[str, Matcher], ...] = (
    ("exact", _exact_matches),
    ("line_trimmed", _line_trimmed_matches),
    ("whitespace_normalized", _whitespace_normalized_matches),
    ("block_anchor", _block_anchor_matches),
)


def _non_overlapping(spans: list[Span]) -> list[Span]:
    kept: list[Span] = []
    for start, end in sorted(spans):
        if kept and start < kept[-1][1]:
            continue
        kept.append((start, end))
    return kept


def _splice(content: str, spans: list[Span], new: str) -> str:
    parts: list[str] = []
    cursor = 0
    for start, end in spans:
        parts.append(content[cursor:start])
        parts.append(new)
        cursor = end
    parts.append(content[cursor:])
    return "".join(parts)


def replace(content: str, old: str, new: str, replace_all: bool = False) -> str:
    """Replace ``old`` in ``content`` using the fallback cascade.

    Raises ToolExecutionError when nothing matches, or when a strategy finds
    several candidates and ``replace_all`` is false.
    """
    for strategy, matcher in STRATEGIES:
        matches = matcher(content, old)
        if not matches:
            continue

        if not replace_all and len(matches) > 1:
            raise ToolExecutionError(
                TOOL_NAME,
                f"oldString found {len(matches)} times in content ({strategy} match). "
                "Provide more surrounding context to identify the correct match, "
                "or set replaceAll to change every occurrence.",
            )

        logger.debug("edit_strategy_matched", strategy=strategy, matches=len(matches))
        targets = _non_overlapping(matches) if replace_all else matches
        return _splice(content, targets, new)

    raise ToolExecutionError(TOOL_NAME, "oldString not found in content")


def create_diff(old: str, new: str, path: str) -> str:
    """Unified diff body: 3 lines of context per hunk, "..." between hunks."""
    old_lines = _split_keepends(old)
    new_lines = _split_keepends(new)
    matcher = difflib.SequenceMatcher(None, old_lines, new_lines, autojunk=False)

    out = [f"--- {path}\n+++ {path}\n"]
    for idx, group in enumerate(matcher.get_grouped_opcodes(DIFF_CONTEXT_LINES)):
        if idx > 0:
            out.append("...\n")
        for tag, i1, i2, j1, j2 in group:
            if tag == "equal":
                out.extend(_signed(" ", old_lines[i1:i2]))
                continue
            if tag in ("replace", "delete"):
                out.extend(_signed("-", old_lines[i1:i2]))
            if tag in ("replace", "insert"):
                out.extend(_signed("+", new_lines[j1:j2]))
    return "".join(out)


def _signed(sign: str, lines: list[str]) -> list[str]:
    return [sign + (line if line.endswith("\n") else line + "\n") for line in lines]


def diff_stats(old: str, new: str) -> DiffStats:
    """Line-level addition and deletion counts between two texts."""
    matcher = difflib.SequenceMatcher(
        None, split_lines(old), split_lines(new), autojunk=False
    )
    additions = deletions = 0
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag in ("replace", "delete"):
            deletions += i2 - i1
        if tag in ("replace", "insert"):
            additions += j2 - j1
    return DiffStats(additions=additions, deletions=deletions)
