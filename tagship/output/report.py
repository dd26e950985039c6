"""Per-platform summary of a release run."""

from __future__ import annotations

from typing import TYPE_CHECKING

from tagship.output.console import Style
from tagship.output.errors import describe_release_error

if TYPE_CHECKING:
    from tagship.output.console import ConsoleProtocol
    from tagship.release.model import PipelineReport

__all__ = ["print_report"]


def print_report(report: PipelineReport, console: ConsoleProtocol) -> None:
    console.header(f"Summary ({report.version})")
    for outcome in report.outcomes.values():
        if outcome.published:
            console.print(
                f"  {outcome.platform_name}: published {outcome.asset_name}", Style.SUCCESS
            )
        elif outcome.error is not None:
            console.print(f"  {describe_release_error(outcome.error)}", Style.ERROR)

    failed = report.failed
    if failed:
        names = ", ".join(o.platform_name for o in failed)
        console.error(f"{len(failed)} of {len(report.outcomes)} platform(s) failed: {names}")
        if len(failed) < len(report.outcomes):
            console.print("published assets were left in place", Style.DIM)
    else:
        console.success(f"release {report.version} published ({len(report.outcomes)} assets)")
