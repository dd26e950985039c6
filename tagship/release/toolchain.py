"""Toolchain selection for a platform of the release matrix.

Cross builds go through ``cross`` with an explicit ``--target`` and land in a
per-triple output directory; native builds use ``cargo`` and the plain output
root. Selection only computes parameters, it never runs anything.
"""

from __future__ import annotations

from pathlib import Path

from tagship.core.config import Config
from tagship.core.result import Err, Ok, Result
from tagship.release.config import CROSS_TOOL, DEFAULT_OUTPUT_ROOT, NATIVE_TOOL
from tagship.release.errors import MissingTarget
from tagship.release.model import PlatformSpec, ToolchainPlan


def select_toolchain(
    platform: PlatformSpec,
    *,
    native_tool: str = NATIVE_TOOL,
    cross_tool: str = CROSS_TOOL,
    output_root: Path = Path(DEFAULT_OUTPUT_ROOT),
) -> Result[ToolchainPlan, MissingTarget]:
    if not platform.requires_cross:
        return Ok(
            ToolchainPlan(
                platform_name=platform.name,
                executable=native_tool,
                extra_args=(),
                output_directory=output_root,
                strip=platform.strip,
            )
        )

    if not platform.target_triple:
        return Err(MissingTarget(platform_name=platform.name))

    return Ok(
        ToolchainPlan(
            platform_name=platform.name,
            executable=cross_tool,
            extra_args=("--target", platform.target_triple),
            output_directory=output_root / platform.target_triple,
            strip=platform.strip,
        )
    )


def plan_platforms(config: Config) -> Result[tuple[ToolchainPlan, ...], MissingTarget]:
    """Select a plan for every configured platform, in config order."""
    plans: list[ToolchainPlan] = []
    for platform in config.platforms:
        result = select_toolchain(
            platform,
            native_tool=config.toolchain.native,
            cross_tool=config.toolchain.cross,
            output_root=Path(config.output_root),
        )
        if isinstance(result, Err):
            return result
        plans.append(result.value)
    return Ok(tuple(plans))
