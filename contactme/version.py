"""
Version information for contactme
"""
from importlib import metadata
from pathlib import Path
from typing import Optional
import tomllib


def get_version() -> str:
    """Read the version from pyproject.toml, falling back to package metadata

    Returns:
        Version string
    """
    pyproject_path = Path(__file__).parent.parent / "pyproject.toml"
    try:
        with open(pyproject_path, "rb") as f:
            data = tomllib.load(f)
        return data["project"]["version"]
    except (OSError, tomllib.TOMLDecodeError, KeyError):
        pass

    try:
        return metadata.version("contactme")
    except metadata.PackageNotFoundError:
        return "unknown"


def get_git_commit(repo_path: Optional[Path] = None) -> Optional[str]:
    """Get the short git commit hash of a checkout

    Args:
        repo_path: Repository path (defaults to the source checkout)

    Returns:
        Short commit hash, or None outside a git checkout
    """
    import subprocess

    if repo_path is None:
        repo_path = Path(__file__).parent.parent

    if not (repo_path / ".git").exists():
        return None

    try:
        commit = subprocess.check_output(
            ["git", "rev-parse", "--short", "HEAD"],
            cwd=repo_path,
            text=True,
            stderr=subprocess.DEVNULL,
        ).strip()
        return commit
    except (subprocess.CalledProcessError, FileNotFoundError):
        return None


__version__ = get_version()
