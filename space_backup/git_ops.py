"""
Git operations for the backup.

Provides the two transport capabilities the syncer relies on, clone and pull,
implemented with GitPython. Authentication always goes through a
CredentialBridge.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from git import Git, Repo
from git.exc import InvalidGitRepositoryError, NoSuchPathError

from .credentials import CredentialBridge

# Display name of the identity used for merge commits created by a pull
PULL_AUTHOR_NAME = "Automated Pull"


@dataclass(frozen=True)
class PullSignature:
    """Author identity recorded if a pull has to create a merge commit."""

    email: str
    name: str = PULL_AUTHOR_NAME

    def git_environment(self) -> dict[str, str]:
        return {
            "GIT_AUTHOR_NAME": self.name,
            "GIT_AUTHOR_EMAIL": self.email,
            "GIT_COMMITTER_NAME": self.name,
            "GIT_COMMITTER_EMAIL": self.email,
        }


class Transport(Protocol):
    """Clone/pull capability consumed by the syncer."""

    def clone(self, url: str, path: Path, credentials: CredentialBridge) -> None: ...

    def pull(
        self, path: Path, credentials: CredentialBridge, signature: PullSignature
    ) -> None: ...


class GitTransport:
    """Clone and pull repositories with the git command line via GitPython."""

    def __init__(self, timeout: float | None = None):
        """
        Args:
            timeout: Seconds after which a git process is killed; None waits forever
        """
        self.timeout = timeout

    def clone(self, url: str, path: Path, credentials: CredentialBridge) -> None:
        """
        Clone url into path.

        Raises:
            GitCommandError: if git fails, is killed after the timeout, or the
                remote rejects the credentials
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        Git(str(path.parent)).clone(
            "--",
            url,
            str(path),
            env=credentials.git_environment(url),
            kill_after_timeout=self.timeout,
        )

    def pull(
        self, path: Path, credentials: CredentialBridge, signature: PullSignature
    ) -> None:
        """
        Pull the tracked upstream branch into the working tree at path.

        Fast-forwards when possible; otherwise merges with the signature as
        author and committer.

        Raises:
            ValueError: if path is not a git repository
            GitCommandError: if the fetch or merge fails or times out
        """
        path = Path(path)
        try:
            repo = Repo(path)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise ValueError(f"Not a valid git repository: {path}") from e

        try:
            remote_url = next(repo.remote().urls)
        except (ValueError, StopIteration):
            raise ValueError(f"Repository has no origin remote: {path}") from None

        env = credentials.git_environment(remote_url)
        env.update(signature.git_environment())
        try:
            repo.git.pull(
                "--no-rebase",
                "--no-edit",
                env=env,
                kill_after_timeout=self.timeout,
            )
        finally:
            repo.close()
