"""Line-level pattern search over parsed diffs."""

import re
from re import Pattern
from typing import List, NamedTuple, Union

from .models import FileDiffDetail, Hunk


class DiffMatch(NamedTuple):
    """Result of searching a diff for a pattern."""
    hunks: List[Hunk]
    added_line_match: bool
    removed_line_match: bool


def _compile(pattern: Union[str, Pattern[str]]) -> Pattern[str]:
    if isinstance(pattern, str):
        return re.compile(pattern)
    return pattern


def match_hunks(detail: FileDiffDetail, pattern: Union[str, Pattern[str]]) -> DiffMatch:
    """Find hunks whose added or removed lines match ``pattern``.

    A hunk is returned when at least one of its added or removed lines
    matches. The two flags are OR-ed across every hunk. Context lines are
    never searched.
    """
    regex = _compile(pattern)
    matching: List[Hunk] = []
    added_match = False
    removed_match = False

    for hunk in detail.hunks:
        hunk_removed = any(regex.search(line) for line in hunk.removed_lines)
        hunk_added = any(regex.search(line) for line in hunk.added_lines)

        removed_match = removed_match or hunk_removed
        added_match = added_match or hunk_added
        if hunk_added or hunk_removed:
            matching.append(hunk)

    return DiffMatch(hunks=matching, added_line_match=added_match, removed_line_match=removed_match)
