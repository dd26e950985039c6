"""Error values for the release pipeline.

Pre-dispatch errors abort a run before any platform is built. Branch errors
belong to a single platform and are collected into the final report.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class InvalidTagFormat:
    tag: str
    prefix: str


@dataclass(frozen=True, slots=True)
class MissingTarget:
    platform_name: str


@dataclass(frozen=True, slots=True)
class ConfigInvalid:
    path: Path | None
    reason: str


@dataclass(frozen=True, slots=True)
class ToolMissing:
    tool: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class ReleaseCreationFailed:
    version: str
    status: int
    detail: str


@dataclass(frozen=True, slots=True)
class BuildFailed:
    platform_name: str
    returncode: int
    reason: str | None = None


@dataclass(frozen=True, slots=True)
class PostProcessFailed:
    platform_name: str
    path: Path
    returncode: int
    detail: str = ""


@dataclass(frozen=True, slots=True)
class UploadFailed:
    platform_name: str
    status: int
    detail: str


PipelineError = (
    InvalidTagFormat | MissingTarget | ConfigInvalid | ToolMissing | ReleaseCreationFailed
)

BranchError = BuildFailed | PostProcessFailed | UploadFailed

ReleaseError = PipelineError | BranchError
