from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path

from tagship.release.errors import BranchError


ASSET_CONTENT_TYPE = "application/octet-stream"


@dataclass(frozen=True, slots=True)
class PlatformSpec:
    """One entry of the static build matrix."""

    name: str
    os: str
    target_triple: str | None = None
    requires_cross: bool = False
    # Every default platform strips its binary after the build.
    strip: bool = True


@dataclass(frozen=True, slots=True)
class ToolchainPlan:
    platform_name: str
    executable: str
    extra_args: tuple[str, ...]
    output_directory: Path
    strip: bool = True

    def build_command(self) -> list[str]:
        return [self.executable, "build", "--release", *self.extra_args]

    def binary_path(self, binary_name: str) -> Path:
        return self.output_directory / "release" / binary_name


@dataclass(frozen=True, slots=True)
class BuildResult:
    platform_name: str
    binary_path: Path
    error: BranchError | None = None

    @property
    def success(self) -> bool:
        return self.error is None


@dataclass(frozen=True, slots=True)
class ReleaseHandle:
    """Where assets of a freshly created release are uploaded."""

    version: str
    release_id: int
    upload_url: str
    html_url: str | None = None


@dataclass(frozen=True, slots=True)
class Asset:
    name: str
    binary_path: Path
    platform_name: str
    content_type: str = ASSET_CONTENT_TYPE


@dataclass(frozen=True, slots=True)
class UploadedAsset:
    name: str
    size: int
    download_url: str | None = None


@dataclass(frozen=True, slots=True)
class PlatformOutcome:
    platform_name: str
    asset_name: str
    uploaded: UploadedAsset | None = None
    error: BranchError | None = None

    @property
    def published(self) -> bool:
        return self.uploaded is not None and self.error is None


class PipelineState(Enum):
    """Pipeline progress.

    UPLOADING is entered by the first upload; sibling branches may still be
    building at that point.
    """

    IDLE = auto()
    VERSION_RESOLVED = auto()
    RELEASE_CREATED = auto()
    BUILDING = auto()
    UPLOADING = auto()
    DONE = auto()
    FAILED = auto()


def _empty_outcomes() -> dict[str, PlatformOutcome]:
    return {}


@dataclass(frozen=True, slots=True)
class PipelineReport:
    version: str
    handle: ReleaseHandle
    outcomes: dict[str, PlatformOutcome] = field(default_factory=_empty_outcomes)
    state: PipelineState = PipelineState.DONE

    @property
    def ok(self) -> bool:
        return all(o.published for o in self.outcomes.values())

    @property
    def failed(self) -> list[PlatformOutcome]:
        return [o for o in self.outcomes.values() if not o.published]


def asset_name(binary_name: str, platform_name: str) -> str:
    return f"{binary_name}-{platform_name}"
