"""Unified diff parsing."""

from typing import List, Optional

from ..core.constants import ADDED_FILE_HEADER, HUNK_HEADER_PREFIX, REMOVED_FILE_HEADER
from .models import FileDiffDetail, Hunk


class _HunkBuilder:
    """Accumulates the lines of the hunk currently being read."""

    def __init__(self, header: str):
        self.header = header
        self.lines: List[str] = []
        self.added: List[str] = []
        self.removed: List[str] = []

    def build(self) -> Hunk:
        return Hunk(
            header=self.header,
            content="\n".join(self.lines),
            added_lines=self.added,
            removed_lines=self.removed,
        )


class DiffParser:
    """Parses the unified diff of one file into hunks."""

    @staticmethod
    def split_lines(diff_content: str) -> List[str]:
        """Split on newlines only, dropping the terminator of the last line."""
        if not diff_content:
            return []
        lines = diff_content.split("\n")
        if lines[-1] == "":
            lines.pop()
        return lines

    def parse(self, diff_content: str) -> FileDiffDetail:
        """Parse diff text; text without ``@@`` sections yields no hunks."""
        hunks: List[Hunk] = []
        current: Optional[_HunkBuilder] = None

        for line in self.split_lines(diff_content):
            if line.startswith(HUNK_HEADER_PREFIX):
                # Example: @@ -12,6 +12,8 @@ def load_settings(path):
                if current is not None:
                    hunks.append(current.build())
                current = _HunkBuilder(line)
                continue

            if current is None:
                # diff --git, index, ---/+++ file headers
                continue

            current.lines.append(line)
            if line.startswith("+") and not line.startswith(ADDED_FILE_HEADER):
                current.added.append(line[1:])
            elif line.startswith("-") and not line.startswith(REMOVED_FILE_HEADER):
                current.removed.append(line[1:])

        if current is not None:
            hunks.append(current.build())

        return FileDiffDetail(hunks=hunks)


def parse_diff(diff_content: str) -> FileDiffDetail:
    """Parse unified diff text with a default parser."""
    return DiffParser().parse(diff_content)
