"""
Main syncer logic for backing up every repository of every project.

For each repository the local directory decides the operation: absent means
clone, present means pull. Each repository is handled on its own, so a failure
is recorded and reported and the run moves on to the next one.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Literal

from rich.console import Console
from rich.markup import escape

from .catalog import CatalogClient, Project
from .config import BackupConfig
from .credentials import CredentialBridge
from .git_ops import GitTransport, PullSignature, Transport
from .layout import project_directory, repo_path

console = Console(soft_wrap=True)

SyncAction = Literal["clone", "pull"]


class RepoOutcome(str, Enum):
    CLONED = "cloned"
    PULLED = "pulled"
    SKIPPED = "skipped"  # no clone URL
    FAILED = "failed"
    PLANNED = "planned"  # dry run


@dataclass
class RepoResult:
    """Result of processing a single repository."""

    project: str
    repository: str
    outcome: RepoOutcome
    path: Path | None = None
    action: SyncAction | None = None
    url: str | None = None
    error: str | None = None

    @property
    def label(self) -> str:
        return f"{self.project}/{self.repository}"


@dataclass
class SyncResult:
    """Result of a whole backup run."""

    projects: int = 0
    results: list[RepoResult] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def count(self, outcome: RepoOutcome) -> int:
        return sum(1 for r in self.results if r.outcome is outcome)

    @property
    def failed(self) -> list[RepoResult]:
        return [r for r in self.results if r.outcome is RepoOutcome.FAILED]

    @property
    def skipped(self) -> list[RepoResult]:
        return [r for r in self.results if r.outcome is RepoOutcome.SKIPPED]


def _one_line(error: Exception) -> str:
    """Collapse an exception message (git errors span several lines) to one line."""
    return " ".join(str(error).split()) or type(error).__name__


class BackupSyncer:
    """Mirrors the catalog's repositories under the configured backup root."""

    def __init__(
        self,
        config: BackupConfig,
        catalog: CatalogClient | None = None,
        transport: Transport | None = None,
    ):
        """Initialize the syncer; collaborators are built from config unless given."""
        self.config = config
        self.catalog = catalog or CatalogClient(config)
        self.transport = transport or GitTransport(timeout=config.timeout)
        self.credentials = CredentialBridge(config.bearer_token)
        self.signature = PullSignature(email=config.email_for_pull)

    def sync(self) -> SyncResult:
        """
        Clone or pull every repository of every project.

        Projects and repositories are processed sequentially in catalog order.
        The run succeeds once the iteration completes, however many
        repositories failed along the way.
        """
        result = SyncResult()

        if self.config.dry_run:
            console.print("[yellow]DRY RUN - No changes will be made[/yellow]\n")

        for project in self.catalog.list_projects():
            result.projects += 1
            try:
                project_dir = project_directory(
                    self.config.clone_directory,
                    project.name,
                    create=not self.config.dry_run,
                )
            except OSError as e:
                error_msg = (
                    f"Failed to create directory for project {project.name}: "
                    f"{_one_line(e)}"
                )
                result.errors.append(error_msg)
                console.print(f"[red]{escape(error_msg)}[/red]")
                continue

            for repo_name in self.catalog.list_repositories(project.id):
                result.results.append(
                    self.sync_repository(project, project_dir, repo_name)
                )

        self._print_summary(result)
        return result

    def sync_repository(
        self, project: Project, project_dir: Path, repo_name: str
    ) -> RepoResult:
        """Bring one repository up to date. Never raises for git failures."""
        lookup = self.catalog.resolve_clone_url(project.id, repo_name)
        if not lookup.ok:
            console.print(
                f"[yellow]Failed to get clone URL for repository "
                f"{escape(repo_name)}: {escape(lookup.reason)}[/yellow]"
            )
            return RepoResult(
                project=project.name,
                repository=repo_name,
                outcome=RepoOutcome.SKIPPED,
                error=f"{lookup.status.value}: {lookup.reason}",
            )

        path = repo_path(project_dir, repo_name)
        console.print(f"Processing repository: {escape(repo_name)}")

        if path.exists():
            console.print(
                f"Repository {escape(repo_name)} already exists. Pulling latest changes..."
            )
            return self._pull(project, repo_name, path, lookup.url)

        console.print(f"Cloning repository {escape(repo_name)} from {escape(lookup.url)}...")
        return self._clone(project, repo_name, path, lookup.url)

    def _clone(self, project: Project, repo_name: str, path: Path, url: str) -> RepoResult:
        result = RepoResult(
            project=project.name,
            repository=repo_name,
            outcome=RepoOutcome.CLONED,
            path=path,
            action="clone",
            url=url,
        )

        if self.config.dry_run:
            console.print(f"  [dim]Would clone {escape(url)} to {escape(str(path))}[/dim]")
            result.outcome = RepoOutcome.PLANNED
            return result

        try:
            self.transport.clone(url, path, self.credentials)
        except Exception as e:
            result.outcome = RepoOutcome.FAILED
            result.error = _one_line(e)
            console.print(f"[red]Failed to clone repository {escape(repo_name)}: {escape(result.error)}[/red]")
            return result

        console.print(f"  [green]✓[/green] Cloned {escape(url)} to {escape(str(path))}")
        return result

    def _pull(self, project: Project, repo_name: str, path: Path, url: str) -> RepoResult:
        result = RepoResult(
            project=project.name,
            repository=repo_name,
            outcome=RepoOutcome.PULLED,
            path=path,
            action="pull",
            url=url,
        )

        if self.config.dry_run:
            console.print(f"  [dim]Would pull latest changes for {escape(str(path))}[/dim]")
            result.outcome = RepoOutcome.PLANNED
            return result

        try:
            self.transport.pull(path, self.credentials, self.signature)
        except Exception as e:
            result.outcome = RepoOutcome.FAILED
            result.error = _one_line(e)
            console.print(f"[red]Failed to pull repository {escape(repo_name)}: {escape(result.error)}[/red]")
            return result

        console.print(f"  [green]✓[/green] Pulled latest changes for {escape(str(path))}")
        return result

    def _print_summary(self, result: SyncResult) -> None:
        """Print backup summary."""
        console.print("\n[bold]Backup Summary:[/bold]")
        prefix = "[DRY RUN] " if self.config.dry_run else ""

        console.print(f"  Projects: {result.projects}")
        console.print(f"  Repositories: {len(result.results)}")
        if self.config.dry_run:
            console.print(f"  {escape(prefix)}Planned: {result.count(RepoOutcome.PLANNED)}")
        else:
            console.print(f"  [green]Cloned: {result.count(RepoOutcome.CLONED)}[/green]")
            console.print(f"  [green]Pulled: {result.count(RepoOutcome.PULLED)}[/green]")

        if result.skipped:
            console.print(f"  [yellow]Skipped: {len(result.skipped)}[/yellow]")
            for repo in result.skipped:
                console.print(f"    • {escape(repo.label)}: {escape(repo.error or '')}")

        if result.failed:
            console.print(f"  [red]Failed: {len(result.failed)}[/red]")
            for repo in result.failed:
                console.print(f"    • {escape(repo.label)}: {escape(repo.error or '')}")

        if result.errors:
            console.print(f"  [red]Errors: {len(result.errors)}[/red]")
            for error in result.errors:
                console.print(f"    • {escape(error)}")
