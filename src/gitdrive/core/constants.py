"""Constants shared by the git command layer and the parsers."""

from typing import Final

# Log format sentinels, chosen to be improbable in commit metadata
FIELD_SEPARATOR: Final[str] = "#GITDRIVE#FIELD#"
RECORD_SEPARATOR: Final[str] = "#GITDRIVE#RECORD#"

# long hash, short hash, author, subject, body, author date (unix seconds)
LOG_FIELDS: Final[tuple] = ("%H", "%h", "%an", "%s", "%b", "%at")
LOG_FIELD_COUNT: Final[int] = len(LOG_FIELDS)

# Repository markers
REFS_MARKER: Final[str] = "refs"
GIT_DIR_MARKER: Final[str] = ".git"
HOOKS_DIRECTORY: Final[str] = "hooks"

# ls-tree --long columns: mode, type, object, size, path
LS_TREE_LONG_FIELD_COUNT: Final[int] = 5

# Diff line prefixes
HUNK_HEADER_PREFIX: Final[str] = "@@"
ADDED_FILE_HEADER: Final[str] = "+++"
REMOVED_FILE_HEADER: Final[str] = "---"

# Environment passed to every git invocation: no prompts, untranslated messages
GIT_BASE_ENV: Final[dict] = {"GIT_TERMINAL_PROMPT": "0", "LC_ALL": "C", "LANGUAGE": "C"}
SSH_KEY_FILE_MODE: Final[int] = 0o600
