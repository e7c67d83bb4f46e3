"""Tests for the local directory layout."""

from pathlib import Path

from space_backup.layout import project_directory, repo_path


def test_project_directory_is_created(backup_root: Path):
    """Test that the project directory is created under the root."""
    path = project_directory(backup_root, "Alpha")
    assert path == backup_root / "Alpha"
    assert path.is_dir()


def test_project_directory_is_idempotent(backup_root: Path):
    """Test that an existing project directory and its content are kept."""
    (backup_root / "Alpha" / "repoA").mkdir(parents=True)

    path = project_directory(backup_root, "Alpha")

    assert (path / "repoA").is_dir()


def test_project_directory_creates_missing_root(temp_dir: Path):
    """Test that a missing backup root is created along the way."""
    path = project_directory(temp_dir / "new-root", "Alpha")
    assert path.is_dir()


def test_project_directory_without_create(backup_root: Path):
    """Test that create=False only computes the path."""
    path = project_directory(backup_root, "Alpha", create=False)
    assert path == backup_root / "Alpha"
    assert not path.exists()


def test_repo_path_does_no_io(temp_dir: Path):
    """Test that repo_path composes a path without touching the disk."""
    path = repo_path(temp_dir / "missing", "repoA")
    assert path == temp_dir / "missing" / "repoA"
    assert not path.parent.exists()
