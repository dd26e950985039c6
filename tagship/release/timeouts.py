from __future__ import annotations

# Toolchain invocations (cargo/cross build of one platform)
BUILD_TIMEOUT_SECONDS = 45 * 60.0

# Post-build processing (strip)
STRIP_TIMEOUT_SECONDS = 60.0

# GitHub API calls; uploads carry the whole binary so they get more room
GITHUB_API_TIMEOUT_SECONDS = 60.0
GITHUB_UPLOAD_TIMEOUT_SECONDS = 10 * 60.0
