from __future__ import annotations

from tagship.release.model import PlatformSpec


DEFAULT_BINARY_NAME = "acre"
DEFAULT_TAG_PREFIX = "refs/tags/v"
DEFAULT_OUTPUT_ROOT = "target"

NATIVE_TOOL = "cargo"
CROSS_TOOL = "cross"
STRIP_TOOL = "strip"

GITHUB_API_URL = "https://api.github.com"

DEFAULT_BUILD_ENV: dict[str, str] = {
    # Emit backtraces on panics.
    "RUST_BACKTRACE": "1",
}

# The release matrix always builds through cross with an explicit target.
DEFAULT_PLATFORMS: tuple[PlatformSpec, ...] = (
    PlatformSpec(
        name="linux",
        os="ubuntu-latest",
        target_triple="x86_64-unknown-linux-musl",
        requires_cross=True,
    ),
    PlatformSpec(
        name="macos",
        os="macos-latest",
        target_triple="x86_64-apple-darwin",
        requires_cross=True,
    ),
)
