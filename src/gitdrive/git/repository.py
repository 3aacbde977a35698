"""Git repository handle driving the git executable."""

import os
import stat
from pathlib import Path
from typing import IO, Dict, List, Optional, Tuple, Union

from ..core.constants import GIT_DIR_MARKER, HOOKS_DIRECTORY
from ..exceptions import ConfigError, ExecutionError, NotFoundError, ParseError
from ..logging import get_logger
from .diff_parser import DiffParser
from .locator import find_root
from .log_parser import LogParser
from .models import ChangeType, CloneOptions, Commit, File, RepositoryOptions
from .runner import CommandRunner
from .urls import trim_url, with_credentials


logger = get_logger(__name__)


class Repository:
    """Handle over a local git repository.

    The handle is not safe for concurrent use: git reads and writes shared
    state (HEAD, index, refs) under ``path``. Serialize operations per path.
    """

    def __init__(
        self,
        path: Union[str, os.PathLike],
        options: Optional[RepositoryOptions] = None,
        runner: Optional[CommandRunner] = None,
    ):
        """Initialize with the repository path and its fixed configuration."""
        self.path = Path(os.path.abspath(os.fspath(path)))
        self.options = options or RepositoryOptions()
        self.runner = runner or CommandRunner(
            workdir=self.path,
            ssh_key=self.options.ssh_key,
            strict_host_key_checking=self.options.strict_host_key_checking,
            timeout=self.options.timeout,
        )
        self._log_parser = LogParser()
        self._diff_parser = DiffParser()

    # --------------------------------------------------------
    # Construction
    # --------------------------------------------------------

    @classmethod
    def clone(
        cls,
        path: Union[str, os.PathLike],
        url: str,
        options: Optional[RepositoryOptions] = None,
        clone_options: Optional[CloneOptions] = None,
    ) -> "Repository":
        """Clone ``url`` into ``path`` and return a handle on the clone."""
        args = ["clone"]
        if clone_options is not None and clone_options.recursive:
            args.append("--recursive")
        return cls._clone(path, url, args, options, clone_options)

    @classmethod
    def open(cls, path: Union[str, os.PathLike], options: Optional[RepositoryOptions] = None) -> "Repository":
        """Open the working repository containing ``path``."""
        root = find_root(path, GIT_DIR_MARKER, directory=False)
        return cls(root, options)

    @classmethod
    def _clone(
        cls,
        path: Union[str, os.PathLike],
        url: str,
        args: List[str],
        options: Optional[RepositoryOptions],
        clone_options: Optional[CloneOptions],
    ) -> "Repository":
        if not url:
            raise ConfigError("A remote URL is required to clone")

        effective = cls._merge_clone_options(options or RepositoryOptions(), clone_options)
        effective = effective.model_copy(update={"url": url})
        target = Path(path)
        target.mkdir(parents=True, exist_ok=True)

        repo = cls(target, effective)
        password = effective.auth_password.get_secret_value() if effective.auth_password else None
        remote = with_credentials(url, effective.auth_username, password)
        repo._trace("Cloning repository", url=url)
        repo._run(*args, remote, ".")
        return repo

    @staticmethod
    def _merge_clone_options(options: RepositoryOptions, clone_options: Optional[CloneOptions]) -> RepositoryOptions:
        if clone_options is None:
            return options

        update = {}
        if clone_options.no_strict_host_key_checking:
            update["strict_host_key_checking"] = False
        auth = clone_options.auth
        if auth is not None:
            if auth.private_key is not None and options.ssh_key is None:
                update["ssh_key"] = auth.private_key
            if auth.username and not options.auth_username:
                update["auth_username"] = auth.username
            if auth.password is not None and options.auth_password is None:
                update["auth_password"] = auth.password
        return options.model_copy(update=update)

    # --------------------------------------------------------
    # Identity and local configuration
    # --------------------------------------------------------

    def fetch_url(self) -> str:
        """Return the URL of the ``origin`` remote."""
        try:
            return self._run("config", "--get", "remote.origin.url").strip()
        except ExecutionError as e:
            if e.exit_code == 1:
                raise NotFoundError("Remote origin is not configured", details={"path": str(self.path)}, cause=e)
            raise

    def name(self) -> str:
        """Return ``owner/name`` deduced from the origin URL."""
        return trim_url(self.fetch_url())

    def local_config_get(self, section: str, key: str) -> str:
        """Read ``section.key`` from the repository-local git config."""
        name = f"{section}.{key}"
        try:
            return self._run("config", "--local", "--get", name).strip()
        except ExecutionError as e:
            if e.exit_code == 1:
                raise NotFoundError(f"Config key not found: {name}", details={"key": name}, cause=e)
            raise

    def local_config_set(self, section: str, key: str, value: str) -> None:
        """Write ``section.key`` to the repository-local git config."""
        self._run("config", "--local", f"{section}.{key}", value)

    # --------------------------------------------------------
    # Commits and diffs
    # --------------------------------------------------------

    def commits(self, from_ref: Optional[str], to_ref: str = "HEAD", reverse: bool = False) -> List[Commit]:
        """List commits reachable from ``to_ref`` and not from ``from_ref``.

        Newest first unless ``reverse`` is set. Files are not populated.
        """
        self.resolve(to_ref)
        rev_range = to_ref
        if from_ref:
            self.resolve(from_ref)
            rev_range = f"{from_ref}..{to_ref}"

        args = ["log", f"--pretty=format:{self._log_parser.pretty_format}"]
        if reverse:
            args.append("--reverse")
        args.extend([rev_range, "--"])
        return self._log_parser.parse(self._run(*args))

    def get_commit(self, hash: str) -> Commit:
        """Return a commit with the files it touched (without diffs)."""
        long_hash = self.resolve(hash)
        output = self._run("log", "-1", f"--pretty=format:{self._log_parser.pretty_format}", long_hash, "--")
        parsed = self._log_parser.parse(output)
        if len(parsed) != 1:
            raise ParseError(f"Expected one commit for {hash}, got {len(parsed)}", details={"output": output})
        return parsed[0].model_copy(update={"files": self._changed_files(long_hash)})

    def get_commit_with_diff(self, hash: str) -> Commit:
        """Return a commit whose files carry their raw and parsed diffs."""
        commit = self.get_commit(hash)
        files: Dict[str, File] = {}
        for filename, entry in commit.files.items():
            raw = self.diff(commit.long_hash, filename)
            files[filename] = entry.model_copy(
                update={"diff": raw, "diff_detail": self._diff_parser.parse(raw)}
            )
        return commit.model_copy(update={"files": files})

    def diff(self, hash: str, filename: str) -> str:
        """Return the unified diff introduced by ``hash`` for one file."""
        return self._run("show", "--format=", "--no-color", "--no-ext-diff", hash, "--", filename)

    def latest_commit(self) -> Commit:
        """Return the commit at HEAD."""
        return self.get_commit("HEAD")

    def resolve(self, ref: str) -> str:
        """Resolve ``ref`` to a full commit hash."""
        try:
            return self._run("rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}").strip()
        except ExecutionError as e:
            raise NotFoundError(f"Revision not found: {ref}", details={"ref": ref}, cause=e)

    def _changed_files(self, long_hash: str) -> Dict[str, File]:
        output = self._run("diff-tree", "-z", "--no-commit-id", "--name-status", "-r", "-M", "--root", long_hash)
        tokens = [token for token in output.split("\0") if token]
        files: Dict[str, File] = {}
        index = 0
        while index < len(tokens):
            status = tokens[index]
            # renames and copies carry the source path before the destination
            width = 2 if status[:1] in ("R", "C") else 1
            paths = tokens[index + 1:index + 1 + width]
            if len(paths) != width:
                raise ParseError(f"Malformed name-status entry: {status}", details={"output": output})
            filename = paths[-1]
            files[filename] = File(filename=filename, status=ChangeType.from_status(status))
            index += 1 + width
        return files

    # --------------------------------------------------------
    # Working tree state
    # --------------------------------------------------------

    def exists_diff(self) -> bool:
        """Return True when the working tree differs from HEAD."""
        try:
            self._run("diff", "--quiet", "HEAD")
            return False
        except ExecutionError as e:
            if e.exit_code == 1:
                return True
            raise

    def status(self) -> str:
        """Return ``git status`` output."""
        return self._run("status")

    def current_snapshot(self) -> Dict[str, File]:
        """Return uncommitted files keyed by name, from porcelain status."""
        files: Dict[str, File] = {}
        entries = iter(self._run("status", "--porcelain", "-z").split("\0"))
        for entry in entries:
            if len(entry) < 4:
                continue
            code, filename = entry[:2], entry[3:]
            if code[0] in ("R", "C"):
                # -z puts the original path in the following entry
                next(entries, None)
            status = ChangeType.ADDED if code == "??" else ChangeType.from_status(code.strip())
            files[filename] = File(filename=filename, status=status)
        return files

    def has_diverged(self) -> bool:
        """Return True when HEAD and its upstream both have unique commits."""
        output = self._run("rev-list", "--left-right", "--count", "HEAD...@{upstream}").split()
        if len(output) != 2 or not all(count.isdigit() for count in output):
            raise ParseError(f"Unexpected rev-list output: {output}", details={"output": output})
        ahead, behind = (int(count) for count in output)
        return ahead > 0 and behind > 0

    # --------------------------------------------------------
    # Branches and tags
    # --------------------------------------------------------

    def current_branch(self) -> str:
        return self._run("rev-parse", "--abbrev-ref", "HEAD").strip()

    def default_branch(self) -> str:
        """Return the default branch of the origin remote."""
        try:
            ref = self._run("symbolic-ref", "--short", "refs/remotes/origin/HEAD").strip()
        except ExecutionError as e:
            raise NotFoundError("Default branch of origin is unknown", cause=e)
        return ref.split("/", 1)[1] if "/" in ref else ref

    def local_branch_exists(self, branch: str) -> Tuple[bool, bool]:
        """Return whether ``branch`` exists locally and has an upstream."""
        if not self._ref_exists(f"refs/heads/{branch}"):
            return False, False
        try:
            self._run("rev-parse", "--abbrev-ref", f"{branch}@{{upstream}}")
        except ExecutionError:
            return True, False
        return True, True

    def checkout(self, branch: str) -> None:
        self._trace("Checking out", branch=branch)
        self._run("checkout", branch)

    def checkout_new_branch(self, branch: str) -> None:
        self._trace("Creating branch", branch=branch)
        self._run("checkout", "-b", branch)

    def delete_branch(self, branch: str) -> None:
        if not self._ref_exists(f"refs/heads/{branch}"):
            raise NotFoundError(f"Branch not found: {branch}", details={"branch": branch})
        self._trace("Deleting branch", branch=branch)
        self._run("branch", "-D", branch)

    def fetch_remote_branch(self, remote: str, branch: str) -> None:
        """Fetch ``remote/branch`` and check it out as a local branch."""
        self._trace("Fetching branch", remote=remote, branch=branch)
        try:
            self._run("fetch", remote, f"refs/heads/{branch}:refs/remotes/{remote}/{branch}")
        except ExecutionError as e:
            if e.mentions("couldn't find remote ref"):
                raise NotFoundError(f"Remote branch not found: {remote}/{branch}", cause=e)
            raise

        exists, _ = self.local_branch_exists(branch)
        if exists:
            self._run("checkout", branch)
        else:
            self._run("checkout", "-b", branch, "--track", f"{remote}/{branch}")

    def pull(self, remote: str, branch: str) -> None:
        self._trace("Pulling", remote=remote, branch=branch)
        self._run("pull", remote, branch)

    def reset_hard(self, hash: str) -> None:
        self._trace("Resetting", hash=hash)
        self._run("reset", "--hard", hash)

    def verify_tag(self, tag: str) -> str:
        """Return the commit hash of ``tag``."""
        try:
            return self._run("rev-parse", "--verify", "--quiet", f"refs/tags/{tag}^{{commit}}").strip()
        except ExecutionError as e:
            raise NotFoundError(f"Tag not found: {tag}", details={"tag": tag}, cause=e)

    def fetch_remote_tag(self, remote: str, tag: str) -> None:
        """Fetch ``tag`` from ``remote`` and check it out."""
        self._trace("Fetching tag", remote=remote, tag=tag)
        try:
            self._run("fetch", remote, f"refs/tags/{tag}:refs/tags/{tag}")
        except ExecutionError as e:
            if e.mentions("couldn't find remote ref"):
                raise NotFoundError(f"Remote tag not found: {remote}/{tag}", cause=e)
            raise
        self._run("checkout", f"tags/{tag}")

    def _ref_exists(self, ref: str) -> bool:
        try:
            self._run("show-ref", "--verify", "--quiet", ref)
        except ExecutionError as e:
            if e.exit_code == 1:
                return False
            raise
        return True

    # --------------------------------------------------------
    # Files and index
    # --------------------------------------------------------

    def glob(self, pattern: str) -> List[str]:
        """Return repository-relative paths matching ``pattern``."""
        matches = []
        for match in self.path.glob(pattern):
            relative = match.relative_to(self.path)
            if relative.parts and relative.parts[0] == GIT_DIR_MARKER:
                continue
            matches.append(relative.as_posix())
        return sorted(matches)

    def open_file(self, filename: str) -> IO[str]:
        """Open a working tree file for reading."""
        target = self.path / filename
        if not target.is_file():
            raise NotFoundError(f"File not found: {filename}", details={"path": str(target)})
        return target.open("r", encoding="utf-8")

    def write(self, filename: str, content: Union[str, bytes, IO]) -> None:
        """Write ``content`` to a working tree file, creating parent directories."""
        target = self.path / filename
        target.parent.mkdir(parents=True, exist_ok=True)
        if hasattr(content, "read"):
            content = content.read()
        if isinstance(content, str):
            target.write_text(content, encoding="utf-8")
        else:
            target.write_bytes(content)

    def add(self, *paths: str) -> None:
        self._run("add", "--", *paths)

    def remove(self, *paths: str) -> None:
        self._run("rm", "-r", "--", *paths)

    def commit(self, message: str, allow_empty: bool = False) -> None:
        args = ["commit", "-m", message]
        if allow_empty:
            args.append("--allow-empty")
        self._trace("Committing", commit_message=message)
        self._run(*args)

    def push(self, remote: str, branch: str) -> None:
        """Force-push ``branch`` to ``remote``."""
        self._trace("Pushing", remote=remote, branch=branch)
        self._run("push", "--force", remote, branch)

    def remote_add(self, remote: str, url: str, branch: Optional[str] = None) -> None:
        args = ["remote", "add"]
        if branch:
            args.extend(["-t", branch])
        self._run(*args, remote, url)

    def remote_show(self, remote: str, *flags: str) -> str:
        """Return ``git remote show`` output; pass ``-n`` to skip querying the remote."""
        return self._run("remote", "show", *flags, remote)

    # --------------------------------------------------------
    # Hooks
    # --------------------------------------------------------

    def hooks_path(self) -> Path:
        relative = self._run("rev-parse", "--git-path", HOOKS_DIRECTORY).strip()
        return self.path / relative

    def hook_list(self) -> List[str]:
        """Return installed hook names, ignoring ``.sample`` files."""
        hooks_dir = self.hooks_path()
        if not hooks_dir.is_dir():
            return []
        return sorted(
            entry.name for entry in hooks_dir.iterdir()
            if entry.is_file() and not entry.name.endswith(".sample")
        )

    def write_hook(self, name: str, content: bytes) -> None:
        hooks_dir = self.hooks_path()
        hooks_dir.mkdir(parents=True, exist_ok=True)
        hook = hooks_dir / name
        hook.write_bytes(content)
        hook.chmod(hook.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)

    def delete_hook(self, name: str) -> None:
        hook = self.hooks_path() / name
        if not hook.is_file():
            raise NotFoundError(f"Hook not found: {name}", details={"hook": name})
        hook.unlink()

    # --------------------------------------------------------
    # Internals
    # --------------------------------------------------------

    def _run(self, *args: str, **kwargs) -> str:
        return self.runner.run(list(args), workdir=self.path, **kwargs)

    def _trace(self, event: str, /, **fields) -> None:
        if not self.options.verbose:
            return
        if self.options.logger is not None:
            details = " ".join(f"{key}={value}" for key, value in fields.items())
            self.options.logger(f"{event} {details}".strip())
        else:
            logger.info(event, path=str(self.path), **fields)
