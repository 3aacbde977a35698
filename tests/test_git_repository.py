"""Tests for git repository handles."""

import git
import pytest

from gitdrive.exceptions import ExecutionError, NotFoundError
from gitdrive.git.bare import BareRepository
from gitdrive.git.models import ChangeType, CloneOptions, Commit, File, RepositoryOptions
from gitdrive.git.repository import Repository


def _branch_of(path):
    with git.Repo(path) as repo:
        return repo.active_branch.name


def _commit_upstream(path, filename, content, message):
    with git.Repo(path) as repo:
        (path / filename).write_text(content)
        repo.index.add([filename])
        repo.index.commit(message)
        return repo.head.commit.hexsha


def _set_identity(repo):
    repo.local_config_set("user", "name", "Clone Author")
    repo.local_config_set("user", "email", "clone@example.com")
    repo.local_config_set("commit", "gpgsign", "false")


@pytest.fixture
def repository(sample_git_repo):
    return Repository.open(sample_git_repo)


@pytest.fixture
def cloned_repo(temp_dir, sample_git_repo):
    repo = Repository.clone(temp_dir / "clone", str(sample_git_repo))
    _set_identity(repo)
    return repo


class TestRepository:
    """Test Repository class."""

    def test_open_from_nested_path(self, sample_git_repo):
        nested = sample_git_repo / "docs" / "api"
        nested.mkdir(parents=True)

        assert Repository.open(nested).path == sample_git_repo

    def test_open_outside_repository(self, temp_dir):
        outside = temp_dir / "not_a_repo"
        outside.mkdir()

        with pytest.raises(NotFoundError):
            Repository.open(outside)

    def test_commits_newest_first(self, repository):
        commits = repository.commits(None)

        assert len(commits) == 2
        assert all(isinstance(commit, Commit) for commit in commits)
        assert [c.subject for c in commits] == ["Update calculator", "Initial commit"]
        assert commits[0].body == "Adds subtract and documents multiply."
        assert commits[0].author == "Test Author"
        assert len(commits[0].long_hash) == 40
        assert commits[0].long_hash.startswith(commits[0].hash)

    def test_commits_reverse_and_range(self, repository):
        assert [c.subject for c in repository.commits(None, reverse=True)] == ["Initial commit", "Update calculator"]
        assert [c.subject for c in repository.commits("HEAD~1", "HEAD")] == ["Update calculator"]

    def test_commits_unknown_ref(self, repository):
        with pytest.raises(NotFoundError):
            repository.commits("no-such-ref")

    def test_latest_commit_files(self, repository):
        commit = repository.latest_commit()

        assert commit.subject == "Update calculator"
        assert list(commit.files) == ["calculator.py"]
        assert commit.files["calculator.py"].status == ChangeType.MODIFIED
        assert commit.files["calculator.py"].diff_detail.hunks == []

    def test_root_commit_files(self, repository):
        commit = repository.get_commit("HEAD~1")

        assert set(commit.files) == {"calculator.py", "README.md"}
        assert all(f.status == ChangeType.ADDED for f in commit.files.values())

    def test_get_commit_unknown(self, repository):
        with pytest.raises(NotFoundError):
            repository.get_commit("0" * 40)

    def test_get_commit_with_diff(self, repository):
        commit = repository.get_commit_with_diff("HEAD")
        calculator = commit.files["calculator.py"]

        assert calculator.diff.startswith("diff --git")
        added = [line for hunk in calculator.diff_detail.hunks for line in hunk.added_lines]
        removed = [line for hunk in calculator.diff_detail.hunks for line in hunk.removed_lines]
        assert "def subtract(a, b):" in added
        assert "        return a * b" in removed

        hunks, added_match, removed_match = calculator.diff_detail.matches(r"def subtract")
        assert added_match is True
        assert removed_match is False
        assert len(hunks) == 1

    def test_diff(self, repository):
        raw = repository.diff("HEAD", "calculator.py")

        assert "@@" in raw
        assert "+def subtract(a, b):" in raw

    def test_local_config(self, repository):
        repository.local_config_set("foo", "bar", "value")

        assert repository.local_config_get("foo", "bar") == "value"
        with pytest.raises(NotFoundError):
            repository.local_config_get("foo", "missing")

    def test_fetch_url_and_name(self, repository):
        with pytest.raises(NotFoundError):
            repository.fetch_url()

        repository.remote_add("origin", "git@github.com:ovh/cds.git")

        assert repository.fetch_url() == "git@github.com:ovh/cds.git"
        assert repository.name() == "ovh/cds"
        assert "git@github.com:ovh/cds.git" in repository.remote_show("origin", "-n")

    def test_branches(self, repository, sample_git_repo):
        original = _branch_of(sample_git_repo)
        assert repository.current_branch() == original

        repository.checkout_new_branch("feature")
        assert repository.current_branch() == "feature"
        assert repository.local_branch_exists("feature") == (True, False)

        repository.checkout(original)
        repository.delete_branch("feature")
        assert repository.local_branch_exists("feature") == (False, False)
        with pytest.raises(NotFoundError):
            repository.delete_branch("feature")

    def test_checkout_unknown_branch(self, repository):
        with pytest.raises(ExecutionError) as exc_info:
            repository.checkout("no-such-branch")
        assert exc_info.value.stderr

    def test_tags(self, repository, sample_git_repo):
        with git.Repo(sample_git_repo) as repo:
            repo.create_tag("v1.0")
            head = repo.head.commit.hexsha

        assert repository.verify_tag("v1.0") == head
        with pytest.raises(NotFoundError):
            repository.verify_tag("v9.9")

    def test_working_tree_state(self, repository):
        assert repository.exists_diff() is False
        assert repository.current_snapshot() == {}

        repository.write("calculator.py", "print('changed')\n")
        repository.write("notes.txt", "new file\n")

        assert repository.exists_diff() is True
        snapshot = repository.current_snapshot()
        assert snapshot["calculator.py"].status == ChangeType.MODIFIED
        assert snapshot["notes.txt"].status == ChangeType.ADDED
        assert "notes.txt" in repository.status()

    def test_add_commit_remove(self, repository):
        _set_identity(repository)
        repository.write("notes/todo.txt", b"first\n")
        repository.add("notes/todo.txt")
        repository.commit("Add notes")

        commit = repository.latest_commit()
        assert commit.subject == "Add notes"
        assert commit.files == {"notes/todo.txt": File(filename="notes/todo.txt", status=ChangeType.ADDED)}

        repository.remove("notes/todo.txt")
        repository.commit("Remove notes")
        assert repository.latest_commit().files["notes/todo.txt"].status == ChangeType.DELETED

    def test_commit_traced(self, sample_git_repo):
        messages = []
        repository = Repository(sample_git_repo, RepositoryOptions(verbose=True, logger=messages.append))

        repository.commit("Empty change", allow_empty=True)

        assert messages == ["Committing commit_message=Empty change"]
        assert repository.latest_commit().subject == "Empty change"

    def test_non_ascii_paths(self, repository):
        """Names outside ASCII are reported unquoted."""
        repository.write("été.txt", "chaud\n")
        assert repository.current_snapshot()["été.txt"].status == ChangeType.ADDED

        repository.add("été.txt")
        repository.commit("Add summer notes")

        commit = repository.get_commit_with_diff("HEAD")
        assert list(commit.files) == ["été.txt"]
        assert commit.files["été.txt"].diff_detail.hunks[0].added_lines == ["chaud"]

    def test_rename_keyed_by_new_name(self, repository):
        readme = (repository.path / "README.md").read_text()
        repository.remove("README.md")
        repository.write("LISEZMOI.md", readme)
        repository.add("LISEZMOI.md")

        snapshot = repository.current_snapshot()
        assert snapshot == {"LISEZMOI.md": File(filename="LISEZMOI.md", status=ChangeType.RENAMED)}

        repository.commit("Rename readme")
        files = repository.latest_commit().files
        assert files == {"LISEZMOI.md": File(filename="LISEZMOI.md", status=ChangeType.RENAMED)}

    def test_reset_hard(self, repository):
        repository.reset_hard("HEAD~1")

        assert repository.latest_commit().subject == "Initial commit"

    def test_files(self, repository):
        assert repository.glob("*.py") == ["calculator.py"]
        with repository.open_file("README.md") as handle:
            assert handle.read().startswith("# Sample Repository")
        with pytest.raises(NotFoundError):
            repository.open_file("missing.md")

    def test_hooks(self, repository):
        repository.write_hook("pre-commit", b"#!/bin/sh\nexit 0\n")

        assert "pre-commit" in repository.hook_list()
        assert not any(name.endswith(".sample") for name in repository.hook_list())

        repository.delete_hook("pre-commit")
        assert "pre-commit" not in repository.hook_list()
        with pytest.raises(NotFoundError):
            repository.delete_hook("pre-commit")

    def test_verbose_logger_callback(self, sample_git_repo):
        """Verbose handles report operations through the logger callback."""
        messages = []
        repository = Repository(sample_git_repo, RepositoryOptions(verbose=True, logger=messages.append))

        repository.checkout_new_branch("traced")

        assert messages == ["Creating branch branch=traced"]

    def test_quiet_by_default(self, sample_git_repo):
        messages = []
        repository = Repository(sample_git_repo, RepositoryOptions(logger=messages.append))

        repository.checkout_new_branch("quiet")

        assert messages == []


class TestRemoteOperations:
    """Test operations involving a remote."""

    def test_clone(self, cloned_repo, sample_git_repo):
        assert cloned_repo.fetch_url() == str(sample_git_repo)
        assert cloned_repo.default_branch() == _branch_of(sample_git_repo)
        assert cloned_repo.latest_commit().subject == "Update calculator"

    def test_clone_options_merged(self, temp_dir, sample_git_repo):
        repo = Repository.clone(
            temp_dir / "recursive",
            str(sample_git_repo),
            clone_options=CloneOptions(recursive=True, no_strict_host_key_checking=True),
        )

        assert repo.options.strict_host_key_checking is False
        assert repo.runner.strict_host_key_checking is False
        assert (repo.path / "calculator.py").exists()

    def test_fetch_remote_branch(self, temp_dir, sample_git_repo):
        with git.Repo(sample_git_repo) as upstream:
            upstream.create_head("tests")
        repo = Repository.clone(temp_dir / "clone", str(sample_git_repo))

        repo.fetch_remote_branch("origin", "tests")

        assert repo.current_branch() == "tests"
        assert repo.local_branch_exists("tests") == (True, True)

    def test_fetch_unknown_remote_branch(self, cloned_repo):
        with pytest.raises(NotFoundError):
            cloned_repo.fetch_remote_branch("origin", "no-such-branch")

    def test_fetch_remote_tag(self, cloned_repo, sample_git_repo):
        with git.Repo(sample_git_repo) as upstream:
            upstream.create_tag("v2.0")
            head = upstream.head.commit.hexsha

        cloned_repo.fetch_remote_tag("origin", "v2.0")

        assert cloned_repo.verify_tag("v2.0") == head
        with pytest.raises(NotFoundError):
            cloned_repo.fetch_remote_tag("origin", "v9.9")

    def test_pull(self, cloned_repo, sample_git_repo):
        branch = _branch_of(sample_git_repo)
        head = _commit_upstream(sample_git_repo, "CHANGES.md", "changes\n", "Add changelog")

        cloned_repo.pull("origin", branch)

        assert cloned_repo.latest_commit().long_hash == head

    def test_has_diverged(self, cloned_repo, sample_git_repo):
        branch = _branch_of(sample_git_repo)
        assert cloned_repo.has_diverged() is False

        _commit_upstream(sample_git_repo, "upstream.txt", "upstream\n", "Upstream change")
        cloned_repo.write("local.txt", "local\n")
        cloned_repo.add("local.txt")
        cloned_repo.commit("Local change")
        cloned_repo.fetch_remote_branch("origin", branch)

        assert cloned_repo.has_diverged() is True

    def test_push_to_bare(self, temp_dir, sample_bare_repo):
        repo = Repository.clone(temp_dir / "work", str(sample_bare_repo))
        _set_identity(repo)
        branch = repo.current_branch()
        repo.write("pushed.txt", "pushed\n")
        repo.add("pushed.txt")
        repo.commit("Pushed change")

        repo.push("origin", branch)

        assert BareRepository.open(sample_bare_repo).latest_commit().subject == "Pushed change"
