"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from tagship.core.errors import ErrorCode
from tagship.output.console import Style
from tagship.release.errors import (
    BuildFailed,
    ConfigInvalid,
    InvalidTagFormat,
    MissingTarget,
    PostProcessFailed,
    ReleaseCreationFailed,
    ReleaseError,
    ToolMissing,
    UploadFailed,
)

if TYPE_CHECKING:
    from tagship.output.console import ConsoleProtocol

__all__ = ["describe_release_error", "print_release_error", "release_error_exit_code"]


def describe_release_error(error: ReleaseError) -> str:
    """One-line description, used in per-platform summaries."""
    match error:
        case InvalidTagFormat(tag=tag, prefix=prefix):
            return f"invalid release tag: {tag!r} (expected prefix {prefix!r})"
        case MissingTarget(platform_name=name):
            return f"{name}: cross build requires a target triple"
        case ConfigInvalid(path=path, reason=reason):
            where = f"{path}: " if path is not None else ""
            return f"invalid config: {where}{reason}"
        case ToolMissing(tool=tool):
            return f"{tool}: missing"
        case ReleaseCreationFailed(version=version, status=status, detail=detail):
            return f"create release {version} failed ({_status(status)}): {detail}"
        case BuildFailed(platform_name=name, returncode=rc, reason=reason):
            if reason:
                return f"{name}: build failed ({reason})"
            return f"{name}: build failed (exit {rc})"
        case PostProcessFailed(platform_name=name, path=path, returncode=rc):
            return f"{name}: strip failed on {path} (exit {rc})"
        case UploadFailed(platform_name=name, status=status, detail=detail):
            return f"{name}: upload failed ({_status(status)}): {detail}"


def _status(status: int) -> str:
    return f"HTTP {status}" if status else "no response"


def print_release_error(error: ReleaseError, console: ConsoleProtocol) -> None:
    """Print release error to console with appropriate formatting."""
    console.error(describe_release_error(error))
    match error:
        case ToolMissing(hint=hint) if hint:
            console.print(f"hint: {hint}", Style.DIM)
        case ReleaseCreationFailed(status=422):
            console.print(
                "hint: a release for this tag probably exists already; delete it to re-run",
                Style.DIM,
            )
        case PostProcessFailed(detail=detail) if detail:
            console.print(detail.strip(), Style.DIM)
        case _:
            pass


def release_error_exit_code(error: ReleaseError) -> int:
    """Get exit code for a release error."""
    match error:
        case InvalidTagFormat() | MissingTarget() | ConfigInvalid():
            return int(ErrorCode.USER_ERROR)
        case ToolMissing():
            return int(ErrorCode.ENV_ERROR)
        case BuildFailed() | PostProcessFailed():
            return int(ErrorCode.BUILD_ERROR)
        case ReleaseCreationFailed() | UploadFailed():
            return int(ErrorCode.NETWORK_ERROR)
