"""Pytest configuration and fixtures."""

import shutil
import tempfile
from pathlib import Path
from unittest.mock import Mock

import pytest

from gitdrive.git.runner import CommandRunner


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path).resolve()
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def fake_runner():
    """Runner double returning canned output."""
    return Mock(spec=CommandRunner)


@pytest.fixture
def sample_python_code():
    """Sample Python code for testing."""
    return '''"""Sample module for testing."""


class Calculator:
    """A simple calculator class."""

    def add(self, a, b):
        return a + b

    def multiply(self, a, b):
        return a * b
'''


def _configure_identity(repo):
    with repo.config_writer() as writer:
        writer.set_value("user", "name", "Test Author")
        writer.set_value("user", "email", "author@example.com")
        writer.set_value("commit", "gpgsign", "false")


@pytest.fixture
def sample_git_repo(temp_dir, sample_python_code):
    """Create a sample git repository with two commits."""
    import git

    repo_path = temp_dir / "sample_repo"
    repo_path.mkdir()

    repo = git.Repo.init(repo_path)
    _configure_identity(repo)

    (repo_path / "calculator.py").write_text(sample_python_code)
    (repo_path / "README.md").write_text("# Sample Repository\n\nThis is a test repository.\n")
    repo.index.add(["calculator.py", "README.md"])
    repo.index.commit("Initial commit")

    updated = sample_python_code.replace("return a * b", "return a * b  # product")
    (repo_path / "calculator.py").write_text(updated + "\n\ndef subtract(a, b):\n    return a - b\n")
    repo.index.add(["calculator.py"])
    repo.index.commit("Update calculator\n\nAdds subtract and documents multiply.")

    repo.close()
    return repo_path


@pytest.fixture
def sample_bare_repo(temp_dir, sample_git_repo):
    """Bare clone of the sample repository."""
    import git

    bare_path = temp_dir / "sample_bare.git"
    bare = git.Repo.clone_from(str(sample_git_repo), str(bare_path), bare=True)
    bare.close()
    return bare_path
