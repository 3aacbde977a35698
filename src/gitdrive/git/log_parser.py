"""Parsing of ``git log`` output produced with a sentinel-delimited format."""

from datetime import datetime, timezone
from typing import List

from ..core.constants import FIELD_SEPARATOR, LOG_FIELD_COUNT, LOG_FIELDS, RECORD_SEPARATOR
from ..exceptions import ParseError
from .models import Commit


class LogParser:
    """Decodes raw log text into commits, preserving the order git emitted."""

    def __init__(
        self,
        field_separator: str = FIELD_SEPARATOR,
        record_separator: str = RECORD_SEPARATOR,
    ):
        if not field_separator or not record_separator:
            raise ValueError("Separators must be non-empty")
        if field_separator == record_separator:
            raise ValueError("Field and record separators must differ")
        self.field_separator = field_separator
        self.record_separator = record_separator

    @property
    def pretty_format(self) -> str:
        """Value for ``git log --pretty=format:`` matching this parser."""
        return self.field_separator.join(LOG_FIELDS) + self.record_separator

    def parse(self, raw_log: str) -> List[Commit]:
        """Parse every record; one malformed record fails the whole batch."""
        commits = []
        for index, record in enumerate(raw_log.split(self.record_separator)):
            if not record.strip():
                continue
            commits.append(self._parse_record(record.lstrip("\r\n"), index))
        return commits

    def _parse_record(self, record: str, index: int) -> Commit:
        fields = record.split(self.field_separator)
        if len(fields) != LOG_FIELD_COUNT:
            raise ParseError(
                f"Malformed log record: expected {LOG_FIELD_COUNT} fields, got {len(fields)}",
                details={"record_index": index, "record": record},
            )

        long_hash, short_hash, author, subject, body, timestamp = fields
        try:
            date = datetime.fromtimestamp(int(timestamp.strip()), tz=timezone.utc)
        except (ValueError, OverflowError, OSError) as e:
            raise ParseError(
                f"Invalid commit timestamp: {timestamp!r}",
                details={"record_index": index, "record": record},
                cause=e,
            )

        return Commit(
            long_hash=long_hash.strip(),
            hash=short_hash.strip(),
            author=author,
            subject=subject,
            body=body.strip(),
            date=date,
        )


def parse_log(raw_log: str) -> List[Commit]:
    """Parse log text produced with the default sentinel format."""
    return LogParser().parse(raw_log)
