"""Error codes for CLI exit status.

Every failure the release pipeline can report maps onto one of these codes,
so CI logs and wrapper scripts can tell a bad tag from a broken build or an
unreachable GitHub API.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    These values are used as process exit codes and should remain stable:
    - 0: Success
    - 1: User error (bad tag, invalid config)
    - 2: Environment error (missing toolchain, missing token)
    - 3: Build error (compile or strip failed, any platform branch failed)
    - 4: Network error (release creation or upload failed)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    BUILD_ERROR = 3
    NETWORK_ERROR = 4
