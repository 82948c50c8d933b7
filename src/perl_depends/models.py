from __future__ import annotations

from pathlib import Path
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_EXTENSION = ".tmp"
REPORT_HEADER = "# PERL MODULE DPENDENCY LIST"


def _as_prefix_tuple(value: Any) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(str(v) for v in value)


class DependsConfig(BaseModel):
    """Settings shared by the patcher and the reporter, fixed for one run."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    extension: str = Field(default=DEFAULT_EXTENSION)
    verbose: int = Field(default=0, ge=0)
    log_level: Optional[str] = Field(default=None)
    log_file: Optional[str] = Field(default=None)
    transient_prefixes: Tuple[str, ...] = Field(default=("/tmp/",))
    stdlib_prefixes: Tuple[str, ...] = Field(default=("/usr/share/perl5/",))
    corelist_file: Optional[str] = Field(default=None)
    perl: str = Field(default="perl")

    @field_validator("extension")
    @classmethod
    def _non_empty_extension(cls, value: str) -> str:
        if not value:
            raise ValueError("extension must not be empty")
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: Optional[str]) -> Optional[str]:
        return value.upper() if value else None

    @field_validator("log_file", "corelist_file", mode="before")
    @classmethod
    def _normalize_path(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        return Path(value).as_posix()

    @field_validator("transient_prefixes", "stdlib_prefixes", mode="before")
    @classmethod
    def _normalize_prefixes(cls, value: Any) -> Tuple[str, ...]:
        return _as_prefix_tuple(value)

    def destination_for(self, target: Path) -> Path:
        return target.with_name(target.name + self.extension)


class PatchResult(BaseModel):
    """Outcome of instrumenting one target file."""

    source: str
    destination: str
    action: str = "skipped"
    error: Optional[str] = None

    @property
    def written(self) -> bool:
        return self.action != "skipped"


class DependencyEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    path: str

    def format_line(self) -> str:
        return f"{self.name:<30} {self.path}"


class DependencyReport(BaseModel):
    """Modules classified as external, sorted by name."""

    entries: List[DependencyEntry] = Field(default_factory=list)

    @property
    def exit_status(self) -> int:
        return 1 if self.entries else 0

    @property
    def names(self) -> List[str]:
        return [entry.name for entry in self.entries]

    def render(self) -> str:
        if not self.entries:
            return ""
        lines = [REPORT_HEADER]
        lines.extend(entry.format_line() for entry in self.entries)
        return "\n".join(lines) + "\n"
