"""Release pipeline.

- version: tag reference to release version
- toolchain: per-platform build tool selection
- build: compile and strip one platform's binary
- github: release creation and asset upload
- orchestrator: sequencing and parallel fan-out
"""

from __future__ import annotations
