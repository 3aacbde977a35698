"""Bare repository handle."""

import io
import os
import re
from typing import List, Optional, Union

from ..core.constants import LS_TREE_LONG_FIELD_COUNT, REFS_MARKER
from ..exceptions import ConfigError, ExecutionError, NotFoundError, ParseError
from .locator import find_root
from .models import CloneOptions, RepositoryOptions
from .repository import Repository


# Compiled once, read-only afterwards
_WHITESPACE = re.compile(r"\s+")


class BareRepository(Repository):
    """Handle over a bare repository, read through ``HEAD``."""

    @classmethod
    def clone(
        cls,
        path: Union[str, os.PathLike],
        url: str,
        options: Optional[RepositoryOptions] = None,
        clone_options: Optional[CloneOptions] = None,
    ) -> "BareRepository":
        """Clone ``url`` as a bare repository into ``path``."""
        return cls._clone(path, url, ["clone", "--bare"], options, clone_options)

    @classmethod
    def open(cls, path: Union[str, os.PathLike], options: Optional[RepositoryOptions] = None) -> "BareRepository":
        """Open an already cloned bare repository containing ``path``."""
        root = find_root(path, REFS_MARKER)
        repo = cls(root, options)
        try:
            output = repo._run("rev-parse", "--is-bare-repository")
        except ExecutionError as e:
            raise ConfigError("path is not a bare repository", details={"path": str(root)}, cause=e)
        if output.strip() != "true":
            raise ConfigError("path is not a bare repository", details={"path": str(root)})
        return repo

    def list_files(self) -> List[str]:
        """List every file in the tree at HEAD."""
        output = self._run("ls-tree", "--full-tree", "--name-only", "-z", "-r", "HEAD")
        return [name for name in output.split("\0") if name]

    def file_size(self, filename: str) -> int:
        """Return the size in bytes of ``filename`` at HEAD."""
        output = self._run("ls-tree", "--full-tree", "--long", "-z", "-r", "HEAD")
        for row in output.split("\0"):
            if not row:
                continue
            # mode, type and object are space separated; the path follows a tab
            meta, tab, name = row.partition("\t")
            fields = _WHITESPACE.split(meta.strip()) + ([name] if tab else [])
            if len(fields) != LS_TREE_LONG_FIELD_COUNT:
                raise ParseError(f"unable to read file size: {row}", details={"row": row})
            _mode, _type, _object, size, name = fields
            if name == filename:
                try:
                    return int(size)
                except ValueError as e:
                    raise ParseError(f"unable to read file size: {row}", details={"row": row}, cause=e)
        raise NotFoundError(f"unable to read file size: file {filename} not found", details={"filename": filename})

    def read_file(self, filename: str) -> io.BytesIO:
        """Return the exact bytes of ``filename`` at HEAD as a readable stream."""
        try:
            output = self._run("show", f"HEAD:{filename}", text=False)
        except ExecutionError as e:
            if e.mentions("does not exist", "exists on disk, but not in"):
                raise NotFoundError(f"File not found at HEAD: {filename}", details={"filename": filename}, cause=e)
            raise
        return io.BytesIO(output)
