"""Mapping of projects and repositories to directories under the backup root."""

from pathlib import Path


def project_directory(root: Path, project_name: str, create: bool = True) -> Path:
    """Ensure <root>/<project_name> exists and return it.

    With create=False only the path is computed; dry runs use this so they
    leave the disk untouched.
    """
    path = Path(root) / project_name
    if create:
        path.mkdir(parents=True, exist_ok=True)
    return path


def repo_path(project_dir: Path, repo_name: str) -> Path:
    """Path of a repository mirror inside its project directory (no I/O)."""
    return Path(project_dir) / repo_name
