"""Pytest configuration and fixtures for space_backup tests."""

import tempfile
from pathlib import Path

import pytest
from git import Repo
from git.exc import GitCommandError
from rich.console import Console

from space_backup.catalog import CloneUrlLookup, LookupStatus, Project
from space_backup.config import BackupConfig


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def backup_root(temp_dir: Path):
    """Empty backup root directory."""
    root = temp_dir / "backup"
    root.mkdir()
    yield root


@pytest.fixture
def config(backup_root: Path):
    """Configuration pointing at the temporary backup root."""
    return BackupConfig(
        space_url="https://space.example.com",
        bearer_token="secret-token",
        clone_directory=backup_root,
        email_for_pull="backup@example.com",
    )


def init_repo(path: Path, readme: str) -> Repo:
    """Initialize a git repository with a configured user and one commit."""
    path.mkdir(parents=True)
    repo = Repo.init(path)
    repo.config_writer().set_value("user", "name", "Test User").release()
    repo.config_writer().set_value("user", "email", "test@example.com").release()

    (path / "README.md").write_text(readme)
    repo.index.add(["README.md"])
    repo.index.commit("Initial commit")
    return repo


@pytest.fixture
def origin_repo(temp_dir: Path):
    """Create a temporary git repository acting as the hosted remote."""
    repo_path = temp_dir / "remote" / "repoA"
    init_repo(repo_path, "# Repo A\n")
    yield repo_path


@pytest.fixture
def console(monkeypatch):
    """Record everything the syncer and catalog client print."""
    recording = Console(record=True, width=80, soft_wrap=True, color_system=None)
    monkeypatch.setattr("space_backup.syncer.console", recording)
    monkeypatch.setattr("space_backup.catalog.console", recording)
    return recording


class FakeCatalog:
    """In-memory catalog; a URL of None resolves as a missing httpUrl field."""

    def __init__(self):
        self.projects: list[Project] = []
        self.repos: dict[str, list[str]] = {}
        self.urls: dict[tuple[str, str], str | None] = {}
        self.calls: list[tuple] = []

    def add(self, project_id: str, project_name: str, repos: dict[str, str | None]):
        self.projects.append(Project(id=project_id, name=project_name))
        self.repos[project_id] = list(repos)
        for repo_name, url in repos.items():
            self.urls[(project_id, repo_name)] = url

    def list_projects(self) -> list[Project]:
        self.calls.append(("list_projects",))
        return list(self.projects)

    def list_repositories(self, project_id: str) -> list[str]:
        self.calls.append(("list_repositories", project_id))
        return list(self.repos.get(project_id, []))

    def resolve_clone_url(self, project_id: str, repo_name: str) -> CloneUrlLookup:
        self.calls.append(("resolve_clone_url", project_id, repo_name))
        url = self.urls.get((project_id, repo_name))
        if url is None:
            return CloneUrlLookup(
                LookupStatus.MISSING_FIELD, reason="response has no httpUrl"
            )
        return CloneUrlLookup(LookupStatus.OK, url=url)


class FakeTransport:
    """Records transport calls; repositories named in fail_on raise GitCommandError."""

    def __init__(self):
        self.calls: list[tuple] = []
        self.credentials_seen: list = []
        self.fail_on: set[str] = set()

    def clone(self, url, path, credentials):
        self.calls.append(("clone", url, Path(path)))
        self.credentials_seen.append(credentials(url))
        if Path(path).name in self.fail_on:
            raise GitCommandError(["git", "clone", url], 128, "fatal: repository not found")
        assert Path(path).parent.is_dir()
        Path(path).mkdir()

    def pull(self, path, credentials, signature):
        self.calls.append(("pull", Path(path)))
        self.credentials_seen.append(credentials(str(path)))
        if Path(path).name in self.fail_on:
            raise GitCommandError(["git", "pull"], 1, "fatal: not possible to fast-forward")


@pytest.fixture
def fake_catalog():
    return FakeCatalog()


@pytest.fixture
def fake_transport():
    return FakeTransport()
