from __future__ import annotations

import importlib.metadata
import subprocess
from pathlib import Path
from typing import NamedTuple, Optional

from .constants import EditorConstants


class VersionInfo(NamedTuple):
    version: Optional[str]
    commit: Optional[str]
    dirty: bool


def _git(args: list[str], cwd: Path) -> Optional[str]:
    try:
        out = subprocess.check_output(["git", *args], cwd=str(cwd), stderr=subprocess.DEVNULL)
    except (OSError, subprocess.CalledProcessError):
        return None
    return out.decode().strip() or None


def _package_version() -> Optional[str]:
    try:
        return importlib.metadata.version(EditorConstants.APP_NAME)
    except importlib.metadata.PackageNotFoundError:
        return None


def _source_checkout() -> tuple[Optional[str], bool]:
    # Only meaningful when running from a git working tree
    here = Path(__file__).resolve().parent
    if _git(["rev-parse", "--show-toplevel"], here) is None:
        return None, False
    commit = _git(["rev-parse", "HEAD"], here)
    status = _git(["status", "--porcelain"], here)
    return commit, bool(status)


def get_version_info() -> VersionInfo:
    commit, dirty = _source_checkout()
    return VersionInfo(version=_package_version(), commit=commit, dirty=dirty)


def get_version_string() -> str:
    info = get_version_info()
    version = info.version or "unknown"
    if info.commit is None:
        return f"{EditorConstants.APP_NAME} {version}"
    dirty_suffix = "-dirty" if info.dirty else ""
    # Short (7-character) git hash
    return f"{EditorConstants.APP_NAME} {version} ({info.commit[:7]}{dirty_suffix})"
