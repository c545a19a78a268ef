"""Locating the project root that commands operate on."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Union

ROOT_MARKERS = ("package.json", "composer.json", "Cargo.toml", ".git")

PathLike = Union[str, Path]


class ResolutionMode(Enum):
    """How the target root was chosen."""

    EXPLICIT = "explicit"
    AUTO_NEAREST = "auto_nearest"
    AUTO_PROMOTED = "auto_promoted"


@dataclass(frozen=True)
class ResolvedTarget:
    """The chosen root together with the evidence behind the choice."""

    resolved_root: Path
    resolution_mode: ResolutionMode
    evidence: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


class ResolveError(Exception):
    """Raised when no project root can be determined."""

    def __init__(self, message: str, path: Optional[Path] = None) -> None:
        super().__init__(message)
        self.path = path

    @classmethod
    def invalid_explicit_root(cls, path: Path) -> "ResolveError":
        return cls(f"explicit --repo path is not a directory: {path}", path)

    @classmethod
    def no_candidate_root(cls, cwd: Path) -> "ResolveError":
        return cls(
            f"could not resolve a project root from cwd {cwd} (use --repo <path>)",
            cwd,
        )


def canonicalize_best_effort(path: PathLike) -> Path:
    """Return the canonical form of an existing path, or the path unchanged."""
    path = Path(path)
    try:
        return path.resolve(strict=True)
    except (OSError, RuntimeError):
        return path


def resolve_target_root(
    cwd: PathLike, repo_override: Optional[PathLike] = None
) -> ResolvedTarget:
    """Determine the project root for `cwd`, honouring an explicit override."""
    if repo_override is not None:
        canonical = canonicalize_best_effort(repo_override)
        if not canonical.is_dir():
            raise ResolveError.invalid_explicit_root(canonical)
        return ResolvedTarget(
            resolved_root=canonical,
            resolution_mode=ResolutionMode.EXPLICIT,
            evidence=["resolved via explicit --repo override"],
        )

    cwd = Path(cwd)
    nearest = _find_nearest_candidate(cwd)
    if nearest is None:
        raise ResolveError.no_candidate_root(cwd)

    promoted = _maybe_promote_to_parent_workspace(nearest)
    if promoted is not None:
        return promoted

    return ResolvedTarget(
        resolved_root=nearest,
        resolution_mode=ResolutionMode.AUTO_NEAREST,
        evidence=[f"selected nearest root candidate {nearest}"],
    )


def _find_nearest_candidate(cwd: Path) -> Optional[Path]:
    start = canonicalize_best_effort(cwd)
    return next(
        (path for path in (start, *start.parents) if _is_candidate_root(path)),
        None,
    )


def _is_candidate_root(path: Path) -> bool:
    return any((path / marker).exists() for marker in ROOT_MARKERS)


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return ""


def _maybe_promote_to_parent_workspace(child: Path) -> Optional[ResolvedTarget]:
    parent = child.parent
    if parent == child or not parent.is_dir():
        return None
    child_name = child.name
    if not child_name:
        return None

    evidence: list[str] = []

    parent_package = parent / "package.json"
    if parent_package.exists():
        content = _read_text(parent_package)
        if '"workspaces"' in content and (child_name in content or "*" in content):
            evidence.append("parent package.json workspace includes child")

    parent_cargo = parent / "Cargo.toml"
    if parent_cargo.exists():
        content = _read_text(parent_cargo)
        if (
            "[workspace]" in content
            and "members" in content
            and (child_name in content or "*" in content)
        ):
            evidence.append("parent Cargo.toml workspace includes child")

    if not evidence:
        return None

    if (child / ".git").exists():
        return ResolvedTarget(
            resolved_root=child,
            resolution_mode=ResolutionMode.AUTO_NEAREST,
            evidence=[f"child repo {child} has standalone .git; kept nearest root"],
            warnings=["workspace promotion skipped due to standalone child repository"],
        )

    return ResolvedTarget(
        resolved_root=parent,
        resolution_mode=ResolutionMode.AUTO_PROMOTED,
        evidence=evidence,
    )