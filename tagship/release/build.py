"""Build one release binary and post-process it.

The compiler is opaque: a plan names the executable and its arguments, and
the job only checks the exit status and that the binary landed where the
plan says it would. Stripping mutates the binary in place.
"""

from __future__ import annotations

import os
from pathlib import Path
from shutil import which

from tagship.core.result import Err, Ok, Result
from tagship.output.console import ConsoleProtocol, Style
from tagship.platform.process import run, run_silent
from tagship.release.config import STRIP_TOOL
from tagship.release.errors import BuildFailed, PostProcessFailed, ToolMissing
from tagship.release.model import BuildResult, ToolchainPlan
from tagship.release.timeouts import BUILD_TIMEOUT_SECONDS, STRIP_TIMEOUT_SECONDS

_INSTALL_HINTS = {
    "cargo": "Install Rust via https://rustup.rs/",
    "cross": "Run: cargo install cross",
    "strip": "Install binutils (Linux) or the Xcode command line tools (macOS)",
}


class BuildJob:
    """Runs toolchain plans inside a source checkout."""

    def __init__(
        self,
        *,
        workspace_root: Path,
        console: ConsoleProtocol,
        strip_tool: str = STRIP_TOOL,
        env: dict[str, str] | None = None,
    ) -> None:
        self._root = workspace_root
        self._console = console
        self._strip_tool = strip_tool
        self._extra_env = dict(env or {})

    def _env(self) -> dict[str, str]:
        return {**os.environ, **self._extra_env}

    def preflight(self, plans: tuple[ToolchainPlan, ...]) -> Result[None, ToolMissing]:
        """Check that every executable the plans need is on PATH."""
        tools: list[str] = []
        for plan in plans:
            if plan.executable not in tools:
                tools.append(plan.executable)
        if any(plan.strip for plan in plans) and self._strip_tool not in tools:
            tools.append(self._strip_tool)

        for tool in tools:
            if which(tool) is None:
                return Err(ToolMissing(tool=tool, hint=_INSTALL_HINTS.get(tool)))
        return Ok(None)

    def run(self, plan: ToolchainPlan, binary_name: str) -> BuildResult:
        name = plan.platform_name
        binary_path = self._root / plan.binary_path(binary_name)

        cmd = plan.build_command()
        self._console.print(f"[{name}] {' '.join(cmd)}", Style.DIM)
        built = run_silent(cmd, cwd=self._root, env=self._env(), timeout=BUILD_TIMEOUT_SECONDS)
        if isinstance(built, Err):
            # Only spawn failures and timeouts carry stderr here.
            reason: str | None = None
            if built.error.returncode == -1:
                reason = built.error.stderr.strip() or None
            return BuildResult(
                platform_name=name,
                binary_path=binary_path,
                error=BuildFailed(
                    platform_name=name, returncode=built.error.returncode, reason=reason
                ),
            )

        if not binary_path.is_file():
            return BuildResult(
                platform_name=name,
                binary_path=binary_path,
                error=BuildFailed(
                    platform_name=name,
                    returncode=0,
                    reason=f"output missing: {binary_path}",
                ),
            )

        if plan.strip:
            stripped = self._strip(name, binary_path)
            if isinstance(stripped, Err):
                return BuildResult(
                    platform_name=name, binary_path=binary_path, error=stripped.error
                )

        return BuildResult(platform_name=name, binary_path=binary_path)

    def _strip(self, platform_name: str, path: Path) -> Result[None, PostProcessFailed]:
        cmd = [self._strip_tool, str(path)]
        self._console.print(f"[{platform_name}] {' '.join(cmd)}", Style.DIM)
        result = run(cmd, cwd=self._root, timeout=STRIP_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            return Err(
                PostProcessFailed(
                    platform_name=platform_name,
                    path=path,
                    returncode=result.error.returncode,
                    detail=result.error.stderr,
                )
            )
        return Ok(None)
