"""
pollmon Watcher Data Models.

Defines the watch configuration, the per-session state and the change
records passed between pipeline stages.
Requires Python 3.11+.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator, model_validator

from pollmon.utils.config import get_settings


def _watcher_default(name: str) -> Any:
    return getattr(get_settings().watcher, name)


class WatchConfig(BaseModel):
    """
    Options controlling a watch session.

    ``exclude_file_types`` and ``include_file_types`` are mutually exclusive.
    Patterns are file extensions without the dot (``"log"``) or, with a
    leading underscore, a literal filename suffix (``"_Makefile"``,
    ``"_temp.lua"``).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    exclude_file_types: frozenset[str] = Field(default_factory=frozenset)
    include_file_types: frozenset[str] = Field(default_factory=frozenset)
    exclude_dirs: frozenset[str] = Field(
        default_factory=frozenset,
        description="Directories to skip, relative to the watch root",
    )
    recursive: StrictBool = Field(default_factory=lambda: _watcher_default("recursive"))
    delay: float = Field(
        default_factory=lambda: _watcher_default("delay"),
        ge=0.0,
        description="Minimum seconds between two callback invocations",
    )
    poll_interval: float = Field(
        default_factory=lambda: _watcher_default("poll_interval"),
        ge=0.0,
        description="Seconds to pause between two passes",
    )
    follow_symlinks: StrictBool = Field(
        default_factory=lambda: _watcher_default("follow_symlinks")
    )

    @field_validator("delay", "poll_interval", mode="before")
    @classmethod
    def require_number(cls, v: Any) -> Any:
        """Reject strings and booleans instead of coercing them."""
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ValueError(f"must be a number, got {type(v).__name__}")
        return v

    @field_validator("exclude_dirs")
    @classmethod
    def normalize_dirs(cls, v: frozenset[str]) -> frozenset[str]:
        """Strip ``./`` prefixes and trailing slashes so entries compare as relative paths."""
        normalized = set()
        for entry in v:
            entry = entry.replace("\\", "/")
            while entry.startswith("./"):
                entry = entry[2:]
            entry = entry.rstrip("/")
            if entry:
                normalized.add(entry)
        return frozenset(normalized)

    @model_validator(mode="after")
    def check_exclusive_filters(self) -> "WatchConfig":
        """Only one of the two file type lists may be used."""
        if self.exclude_file_types and self.include_file_types:
            raise ValueError(
                "Cannot use both `include_file_types` and `exclude_file_types` in config."
            )
        return self


@dataclass
class WatchState:
    """
    Mutable state of one watch session.

    The watermark is shared by every file in the session: it only moves
    forward, to the newest modification time seen so far.
    """

    root: Path
    watermark: float
    last_invocation: float
    passes: int = 0
    invocations: int = 0

    @classmethod
    def started_at(cls, root: Path, now: float) -> "WatchState":
        """Create the state for a session starting at ``now``."""
        return cls(root=root, watermark=now, last_invocation=now)

    def advance(self, mtime: float) -> bool:
        """Move the watermark to ``mtime`` if it is newer. Returns True on advance."""
        if mtime > self.watermark:
            self.watermark = mtime
            return True
        return False


@dataclass(frozen=True, slots=True)
class ChangeCandidate:
    """A file whose modification time advanced the watermark."""

    path: Path
    relative_path: str
    mtime: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "path": str(self.path),
            "relative_path": self.relative_path,
            "mtime": self.mtime,
        }


@dataclass
class PassStats:
    """Counters collected over one traversal pass."""

    directories: int = 0
    files: int = 0
    filtered: int = 0
    changed: int = 0
    fired: int = 0
    excluded_dirs: list[str] = field(default_factory=list)
