"""Release commands - run the tag-triggered pipeline or preview it."""

from __future__ import annotations

from pathlib import Path

import typer

from tagship.cli.context import (
    build_context,
    github_api_url,
    github_token,
    resolve_repo,
    resolve_tag,
)
from tagship.core.errors import ErrorCode
from tagship.core.result import Err, Ok
from tagship.output.console import Style
from tagship.output.errors import print_release_error, release_error_exit_code
from tagship.output.report import print_report
from tagship.release.build import BuildJob
from tagship.release.github import GitHubReleases
from tagship.release.model import asset_name
from tagship.release.orchestrator import ReleasePipeline
from tagship.release.timeouts import GITHUB_API_TIMEOUT_SECONDS
from tagship.release.toolchain import plan_platforms
from tagship.release.version import resolve_version
from tagship.tools.http import RealHttpClient


def run(
    tag: str | None = typer.Argument(
        None, help="Pushed tag reference (default: $GITHUB_REF)", show_default=False
    ),
    config: Path | None = typer.Option(
        None, "--config", help="Path to tagship.toml", show_default=False
    ),
    workers: int | None = typer.Option(
        None, "--workers", min=1, help="Parallel platform branches (default: one per platform)"
    ),
) -> None:
    """Create the release, build every platform and upload the binaries."""
    ctx = build_context(config)
    ref = resolve_tag(tag)
    repo = resolve_repo(ctx.config)
    token = github_token()

    api = GitHubReleases(
        http=RealHttpClient(timeout=GITHUB_API_TIMEOUT_SECONDS),
        repo=repo,
        token=token,
        api_url=github_api_url(),
    )
    builder = BuildJob(
        workspace_root=ctx.root,
        console=ctx.console,
        strip_tool=ctx.config.toolchain.strip,
        env=ctx.config.build_env,
    )
    pipeline = ReleasePipeline(
        config=ctx.config,
        publisher=api,
        uploader=api,
        builder=builder,
        console=ctx.console,
        max_workers=workers,
    )

    match pipeline.run(ref):
        case Err(error):
            print_release_error(error, ctx.console)
            raise typer.Exit(code=release_error_exit_code(error))
        case Ok(report):
            print_report(report, ctx.console)
            if not report.ok:
                raise typer.Exit(code=int(ErrorCode.BUILD_ERROR))


def plan(
    tag: str | None = typer.Argument(
        None, help="Pushed tag reference (default: $GITHUB_REF)", show_default=False
    ),
    config: Path | None = typer.Option(
        None, "--config", help="Path to tagship.toml", show_default=False
    ),
) -> None:
    """Show what a release run would build and upload, without doing it."""
    ctx = build_context(config)
    ref = resolve_tag(tag)

    version = resolve_version(ref, ctx.config.tag_prefix)
    if isinstance(version, Err):
        print_release_error(version.error, ctx.console)
        raise typer.Exit(code=release_error_exit_code(version.error))

    plans = plan_platforms(ctx.config)
    if isinstance(plans, Err):
        print_release_error(plans.error, ctx.console)
        raise typer.Exit(code=release_error_exit_code(plans.error))

    ctx.console.header(f"Release {version.value}")
    for p in plans.value:
        ctx.console.print(p.platform_name, Style.BOLD)
        ctx.console.print(f"  command: {' '.join(p.build_command())}", Style.DIM)
        ctx.console.print(f"  binary:  {p.binary_path(ctx.config.binary)}", Style.DIM)
        ctx.console.print(f"  strip:   {'yes' if p.strip else 'no'}", Style.DIM)
        ctx.console.print(f"  asset:   {asset_name(ctx.config.binary, p.platform_name)}", Style.DIM)
