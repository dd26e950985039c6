"""Release pipeline orchestration.

A run is split in two stages:

- a sequential stage that resolves the version, plans every platform, checks
  the toolchains and creates the release; any failure here aborts the run
  before a single build starts;
- a parallel stage with one build-then-upload branch per platform. Branches
  share nothing but the version and the release handle. A failed branch is
  recorded in the report and never cancels its siblings, and assets that were
  already uploaded stay published. Two branches whose plans write the same
  binary path run one after the other.
"""

from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Protocol

from tagship.core.config import Config
from tagship.core.result import Err, Ok, Result
from tagship.output.console import ConsoleProtocol
from tagship.output.errors import print_release_error
from tagship.release.errors import (
    BuildFailed,
    MissingTarget,
    PipelineError,
    ReleaseCreationFailed,
    ToolMissing,
    UploadFailed,
)
from tagship.release.model import (
    Asset,
    BuildResult,
    PipelineReport,
    PipelineState,
    PlatformOutcome,
    ReleaseHandle,
    ToolchainPlan,
    UploadedAsset,
    asset_name,
)
from tagship.release.toolchain import plan_platforms
from tagship.release.version import resolve_version


class ReleasePublisher(Protocol):
    def create_release(self, version: str) -> Result[ReleaseHandle, ReleaseCreationFailed]: ...


class AssetUploader(Protocol):
    def upload_asset(
        self, handle: ReleaseHandle, asset: Asset
    ) -> Result[UploadedAsset, UploadFailed]: ...


class Builder(Protocol):
    def preflight(self, plans: tuple[ToolchainPlan, ...]) -> Result[None, ToolMissing]: ...

    def run(self, plan: ToolchainPlan, binary_name: str) -> BuildResult: ...


class ReleasePipeline:
    """Sequences version resolution, release creation, builds and uploads."""

    def __init__(
        self,
        *,
        config: Config,
        publisher: ReleasePublisher,
        uploader: AssetUploader,
        builder: Builder,
        console: ConsoleProtocol,
        max_workers: int | None = None,
    ) -> None:
        self._config = config
        self._publisher = publisher
        self._uploader = uploader
        self._builder = builder
        self._console = console
        self._max_workers = max_workers
        self._state = PipelineState.IDLE
        self._state_lock = threading.Lock()

    @property
    def state(self) -> PipelineState:
        return self._state

    def _set_state(self, state: PipelineState) -> None:
        with self._state_lock:
            self._state = state

    def _mark_uploading(self) -> None:
        with self._state_lock:
            if self._state == PipelineState.BUILDING:
                self._state = PipelineState.UPLOADING

    def _fail(self, error: PipelineError) -> Err[PipelineError]:
        self._set_state(PipelineState.FAILED)
        return Err(error)

    def run(self, tag: str) -> Result[PipelineReport, PipelineError]:
        version = resolve_version(tag, self._config.tag_prefix)
        if isinstance(version, Err):
            return self._fail(version.error)
        self._set_state(PipelineState.VERSION_RESOLVED)
        self._console.header(f"Release {version.value}")

        plans = self.plan()
        if isinstance(plans, Err):
            return self._fail(plans.error)

        preflight = self._builder.preflight(plans.value)
        if isinstance(preflight, Err):
            return self._fail(preflight.error)

        created = self._publisher.create_release(version.value)
        if isinstance(created, Err):
            return self._fail(created.error)
        handle = created.value
        self._set_state(PipelineState.RELEASE_CREATED)
        self._console.info(
            f"created release {handle.version} ({handle.html_url or handle.upload_url})"
        )

        outcomes = self._dispatch(plans.value, handle)

        published = all(o.published for o in outcomes.values())
        state = PipelineState.DONE if published else PipelineState.FAILED
        self._set_state(state)
        return Ok(
            PipelineReport(version=version.value, handle=handle, outcomes=outcomes, state=state)
        )

    def plan(self) -> Result[tuple[ToolchainPlan, ...], MissingTarget]:
        return plan_platforms(self._config)

    def _dispatch(
        self, plans: tuple[ToolchainPlan, ...], handle: ReleaseHandle
    ) -> dict[str, PlatformOutcome]:
        self._set_state(PipelineState.BUILDING)
        results: dict[str, PlatformOutcome] = {}
        workers = self._max_workers or len(plans) or 1
        # Plans that write the same binary must not overlap.
        output_locks: dict[Path, threading.Lock] = {}
        for plan in plans:
            output_locks.setdefault(plan.binary_path(self._config.binary), threading.Lock())

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="tagship-branch") as pool:
            futures: dict[Future[PlatformOutcome], ToolchainPlan] = {
                pool.submit(
                    self._run_branch,
                    plan,
                    handle,
                    output_locks[plan.binary_path(self._config.binary)],
                ): plan
                for plan in plans
            }
            for future in as_completed(futures):
                plan = futures[future]
                try:
                    outcome = future.result()
                except Exception as e:  # noqa: BLE001
                    error = BuildFailed(
                        platform_name=plan.platform_name,
                        returncode=-1,
                        reason=f"unexpected error: {e}",
                    )
                    print_release_error(error, self._console)
                    outcome = PlatformOutcome(
                        platform_name=plan.platform_name,
                        asset_name=asset_name(self._config.binary, plan.platform_name),
                        error=error,
                    )
                results[plan.platform_name] = outcome

        # Report in matrix order, not completion order.
        return {plan.platform_name: results[plan.platform_name] for plan in plans}

    def _run_branch(
        self, plan: ToolchainPlan, handle: ReleaseHandle, output_lock: threading.Lock
    ) -> PlatformOutcome:
        with output_lock:
            return self._build_and_upload(plan, handle)

    def _build_and_upload(self, plan: ToolchainPlan, handle: ReleaseHandle) -> PlatformOutcome:
        name = plan.platform_name
        binary = self._config.binary
        target_name = asset_name(binary, name)

        build = self._builder.run(plan, binary)
        if build.error is not None:
            print_release_error(build.error, self._console)
            return PlatformOutcome(platform_name=name, asset_name=target_name, error=build.error)

        self._mark_uploading()
        asset = Asset(name=target_name, binary_path=build.binary_path, platform_name=name)
        uploaded = self._uploader.upload_asset(handle, asset)
        if isinstance(uploaded, Err):
            print_release_error(uploaded.error, self._console)
            return PlatformOutcome(platform_name=name, asset_name=target_name, error=uploaded.error)

        done = uploaded.value
        self._console.success(f"[{name}] uploaded {done.name} ({done.size} bytes)")
        return PlatformOutcome(platform_name=name, asset_name=target_name, uploaded=uploaded.value)
