"""Runs the git executable as a subprocess.

Every call spawns one process and blocks until it exits. Private key
material is written to a ``0600`` temporary file only for the duration of
the call and is removed afterwards on every exit path, cancellation
included.
"""

import contextlib
import os
import subprocess
import tempfile
import threading
import time
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence, Tuple, Union

from git.util import remove_password_if_present

from ..config import config
from ..core.constants import GIT_BASE_ENV, SSH_KEY_FILE_MODE
from ..exceptions import CancelledError, ConfigError, ExecutionError
from ..logging import get_logger
from .models import SSHKey


logger = get_logger(__name__)


class CommandRunner:
    """Executes git commands with optional injected credentials."""

    def __init__(
        self,
        workdir: Union[str, os.PathLike, None] = None,
        ssh_key: Optional[SSHKey] = None,
        strict_host_key_checking: bool = True,
        timeout: Optional[float] = None,
        git_binary: Optional[str] = None,
    ):
        """Initialize the runner.

        Args:
            workdir: Default working directory for commands
            ssh_key: Private key exposed to git's ssh transport
            strict_host_key_checking: Disable to accept unknown host keys
            timeout: Default deadline in seconds for each command
            git_binary: Executable to run (defaults to settings)
        """
        self.workdir = Path(workdir) if workdir is not None else None
        self.ssh_key = ssh_key
        self.strict_host_key_checking = strict_host_key_checking
        self.timeout = timeout if timeout is not None else config.git.command_timeout
        self.git_binary = git_binary or config.git.git_binary

    # --------------------------------------------------------
    # Public API
    # --------------------------------------------------------

    def run(
        self,
        args: Sequence[str],
        env: Optional[Dict[str, str]] = None,
        workdir: Union[str, os.PathLike, None] = None,
        timeout: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
        text: bool = True,
    ) -> Union[str, bytes]:
        """Run ``git <args>`` and return its stdout.

        Stdout is decoded as UTF-8 unless ``text`` is False, in which case
        the raw bytes are returned. Stderr is always decoded.

        Raises:
            ExecutionError: If git exits with a nonzero status
            CancelledError: If the deadline passes or ``cancel_event`` is set
            ConfigError: If no working directory is known or git is missing
        """
        cwd = Path(workdir) if workdir is not None else self.workdir
        if cwd is None:
            raise ConfigError("No working directory configured for git command")

        command = [self.git_binary, *args]
        redacted = remove_password_if_present(command)
        deadline = timeout if timeout is not None else self.timeout

        with self.credentials() as credential_env:
            child_env = self._build_env(credential_env, env)
            logger.debug("Running git command", command=redacted[1:], cwd=str(cwd))
            stdout, stderr, exit_code = self._execute(command, redacted, cwd, child_env, deadline, cancel_event)

        stderr = stderr.decode("utf-8", errors="replace")
        if exit_code != 0:
            logger.warning("Git command failed", command=redacted[1:], exit_code=exit_code)
            raise ExecutionError(
                f"git {' '.join(redacted[1:])} exited with status {exit_code}: {stderr.strip()}",
                exit_code=exit_code,
                stderr=stderr,
                command=redacted,
            )
        return stdout.decode("utf-8", errors="replace") if text else stdout

    @contextlib.contextmanager
    def credentials(self) -> Iterator[Dict[str, str]]:
        """Write the private key to a temporary file for the enclosed block.

        Yields the environment variables pointing git at the key.
        """
        if self.ssh_key is None:
            yield {}
            return

        fd, key_path = tempfile.mkstemp(prefix="gitdrive-key-")
        try:
            with os.fdopen(fd, "wb") as handle:
                os.chmod(key_path, SSH_KEY_FILE_MODE)
                handle.write(self.ssh_key.content)
                if not self.ssh_key.content.endswith(b"\n"):
                    handle.write(b"\n")
            yield {"GIT_SSH_COMMAND": self._ssh_command(key_path)}
        finally:
            with contextlib.suppress(FileNotFoundError):
                os.remove(key_path)

    # --------------------------------------------------------
    # Internals
    # --------------------------------------------------------

    def _ssh_command(self, key_path: str) -> str:
        parts = ["ssh", "-i", f'"{key_path}"', "-o", "IdentitiesOnly=yes"]
        if not self.strict_host_key_checking:
            parts.extend(["-o", "StrictHostKeyChecking=no", "-o", "UserKnownHostsFile=/dev/null"])
        return " ".join(parts)

    @staticmethod
    def _build_env(credential_env: Dict[str, str], extra_env: Optional[Dict[str, str]]) -> Dict[str, str]:
        child_env = dict(os.environ)
        child_env.update(GIT_BASE_ENV)
        child_env.update(credential_env)
        if extra_env:
            child_env.update(extra_env)
        return child_env

    def _execute(
        self,
        command: List[str],
        redacted: List[str],
        cwd: Path,
        env: Dict[str, str],
        timeout: Optional[float],
        cancel_event: Optional[threading.Event],
    ) -> Tuple[bytes, bytes, int]:
        if not cwd.is_dir():
            raise ConfigError(f"Working directory does not exist: {cwd}", details={"cwd": str(cwd)})

        try:
            process = subprocess.Popen(
                command,
                cwd=cwd,
                env=env,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise ConfigError(
                f"Unable to run {command[0]}: {e}",
                details={"command": redacted, "cwd": str(cwd)},
                cause=e,
            )

        started = time.monotonic()
        poll_interval = config.git.poll_interval
        reason = None
        try:
            while True:
                try:
                    stdout, stderr = process.communicate(timeout=poll_interval)
                    break
                except subprocess.TimeoutExpired:
                    if timeout is not None and time.monotonic() - started >= timeout:
                        reason = "deadline exceeded"
                    elif cancel_event is not None and cancel_event.is_set():
                        reason = "cancelled"
                    if reason:
                        break
        except BaseException:
            # interrupted while waiting: never leave the child running
            process.kill()
            process.wait()
            raise

        if reason:
            process.kill()
            process.communicate()
            logger.warning("Git command aborted", command=redacted[1:], reason=reason)
            raise CancelledError(
                f"git {' '.join(redacted[1:])} {reason}",
                details={"command": redacted, "timeout": timeout},
            )
        return stdout, stderr, process.returncode
