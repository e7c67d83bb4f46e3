"""
Catalog client for the Space HTTP API.

Lists projects, the repositories of each project, and resolves the HTTP clone
URL of a repository. Every call degrades to an empty or absent value on
failure so that a backup run carries on with whatever it can reach.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any
from urllib.parse import quote

import requests
from pydantic import BaseModel, Field, ValidationError
from rich.console import Console
from rich.markup import escape

from .config import BackupConfig

console = Console(soft_wrap=True)


class LookupStatus(str, Enum):
    """Outcome of a single catalog request."""

    OK = "ok"
    HTTP_ERROR = "http-error"  # non-2xx response
    TRANSPORT_ERROR = "transport-error"  # connection failure or timeout
    MALFORMED = "malformed"  # body is not JSON or has the wrong shape
    MISSING_FIELD = "missing-field"  # well-formed body without the value


class ProjectEntry(BaseModel):
    id: str | None = None
    name: str | None = None


class ProjectList(BaseModel):
    data: list[ProjectEntry] = Field(default_factory=list)


class RepoEntry(BaseModel):
    name: str | None = None


class ProjectRepos(BaseModel):
    repos: list[RepoEntry] = Field(default_factory=list)


class RepoUrl(BaseModel):
    http_url: str | None = Field(default=None, alias="httpUrl")


@dataclass(frozen=True)
class Project:
    """A project as listed by the catalog."""

    id: str
    name: str


@dataclass(frozen=True)
class CatalogResponse:
    """Decoded catalog response: either a model or a failure reason."""

    status: LookupStatus
    model: BaseModel | None = None
    reason: str = ""

    @property
    def ok(self) -> bool:
        return self.status is LookupStatus.OK


@dataclass(frozen=True)
class CloneUrlLookup:
    """Result of resolving the clone URL of one repository."""

    status: LookupStatus
    url: str | None = None
    reason: str = ""

    @property
    def ok(self) -> bool:
        return self.status is LookupStatus.OK and bool(self.url)


class CatalogClient:
    """Read-only client for the project/repository catalog."""

    def __init__(self, config: BackupConfig, session: requests.Session | None = None):
        """Initialize the client; the session is created here unless injected."""
        self.base_url = config.space_url
        self.timeout = config.timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {config.bearer_token}",
                "Accept": "application/json",
            }
        )

    def _get(self, path: str, schema: type[BaseModel]) -> CatalogResponse:
        """GET a path below the base URL and decode the body into schema."""
        url = f"{self.base_url}{path}"
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            return CatalogResponse(LookupStatus.TRANSPORT_ERROR, reason=str(e))

        if response.status_code // 100 != 2:
            reason = response.reason or f"HTTP {response.status_code}"
            return CatalogResponse(LookupStatus.HTTP_ERROR, reason=reason)

        try:
            payload: Any = response.json()
        except ValueError as e:
            return CatalogResponse(LookupStatus.MALFORMED, reason=f"Invalid JSON response: {e}")

        try:
            model = schema.model_validate(payload)
        except ValidationError as e:
            return CatalogResponse(
                LookupStatus.MALFORMED,
                reason=f"Unexpected response shape ({e.error_count()} errors)",
            )
        return CatalogResponse(LookupStatus.OK, model=model)

    def list_projects(self) -> list[Project]:
        """List every project visible to the bearer identity."""
        result = self._get("/api/http/projects?$fields=data(id,name)", ProjectList)
        if not result.ok:
            console.print(f"[red]Failed to retrieve project IDs: {escape(result.reason)}[/red]")
            return []

        return [
            Project(id=entry.id, name=entry.name)
            for entry in result.model.data
            if entry.id is not None and entry.name is not None
        ]

    def list_repositories(self, project_id: str) -> list[str]:
        """List the repository names of a project, in catalog order."""
        result = self._get(
            f"/api/http/projects/id:{quote(project_id, safe='')}?$fields=repos(name)",
            ProjectRepos,
        )
        if not result.ok:
            console.print(
                f"[red]Failed to retrieve repositories for project {escape(project_id)}: "
                f"{escape(result.reason)}[/red]"
            )
            return []

        return [repo.name for repo in result.model.repos if repo.name is not None]

    def resolve_clone_url(self, project_id: str, repo_name: str) -> CloneUrlLookup:
        """
        Resolve the HTTP clone URL of a repository.

        The lookup distinguishes request failures from a successful response
        that does not carry the URL; callers skip the repository either way.
        """
        result = self._get(
            f"/api/http/projects/id:{quote(project_id, safe='')}"
            f"/repositories/{quote(repo_name, safe='')}/url",
            RepoUrl,
        )
        if not result.ok:
            return CloneUrlLookup(result.status, reason=result.reason)

        url = result.model.http_url
        if not url:
            return CloneUrlLookup(
                LookupStatus.MISSING_FIELD, reason="response has no httpUrl"
            )
        return CloneUrlLookup(LookupStatus.OK, url=url)
