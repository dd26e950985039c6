from __future__ import annotations

from pathlib import Path

import pytest
import typer

from tagship.cli import context as context_mod
from tagship.cli.commands import release_cmd
from tagship.cli.context import CLIContext
from tagship.core.config import Config
from tagship.core.errors import ErrorCode
from tagship.core.result import Ok, Result
from tagship.output.console import ConsoleProtocol, MockConsole
from tagship.release.errors import BuildFailed, ToolMissing
from tagship.release.model import BuildResult, PlatformSpec, ToolchainPlan
from tagship.tools.http import MockHttpClient

RELEASES_URL = "https://api.github.com/repos/example/acre/releases"
UPLOAD_URL = "https://uploads.github.com/repos/example/acre/releases/9/assets"

CONFIG = Config(
    binary="acre",
    repo="example/acre",
    platforms=(
        PlatformSpec(name="linux", os="ubuntu-latest"),
        PlatformSpec(name="macos", os="macos-latest"),
    ),
)


class StubBuildJob:
    fail: set[str] = set()

    def __init__(
        self,
        *,
        workspace_root: Path,
        console: ConsoleProtocol,
        strip_tool: str,
        env: dict[str, str],
    ) -> None:
        del console, strip_tool, env
        self.root = workspace_root

    def preflight(self, plans: tuple[ToolchainPlan, ...]) -> Result[None, ToolMissing]:
        return Ok(None)

    def run(self, plan: ToolchainPlan, binary_name: str) -> BuildResult:
        path = self.root / plan.platform_name / binary_name
        if plan.platform_name in self.fail:
            return BuildResult(
                platform_name=plan.platform_name,
                binary_path=path,
                error=BuildFailed(platform_name=plan.platform_name, returncode=1),
            )
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"bin")
        return BuildResult(platform_name=plan.platform_name, binary_path=path)


@pytest.fixture
def console() -> MockConsole:
    return MockConsole()


@pytest.fixture
def http() -> MockHttpClient:
    client = MockHttpClient()
    client.set_response(RELEASES_URL, {"id": 9, "upload_url": UPLOAD_URL + "{?name,label}"})
    client.set_response(UPLOAD_URL, {"size": 3})
    return client


@pytest.fixture
def wired(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    console: MockConsole,
    http: MockHttpClient,
) -> MockHttpClient:
    def fake_build_context(config_path: Path | None = None) -> CLIContext:
        del config_path
        return CLIContext(root=tmp_path, config=CONFIG, console=console)

    def fake_http(timeout: float) -> MockHttpClient:
        del timeout
        return http

    monkeypatch.setattr(release_cmd, "build_context", fake_build_context)
    monkeypatch.setattr(release_cmd, "RealHttpClient", fake_http)
    monkeypatch.setattr(release_cmd, "BuildJob", StubBuildJob)
    monkeypatch.setattr(StubBuildJob, "fail", set())
    monkeypatch.setenv("GITHUB_TOKEN", "secret")
    monkeypatch.delenv("GITHUB_API_URL", raising=False)
    return http


def test_run_publishes_every_platform(wired: MockHttpClient, console: MockConsole) -> None:
    release_cmd.run(tag="refs/tags/v0.9.0", config=None, workers=None)

    assert len(wired.calls_to("post_bytes")) == 2
    assert console.find("release 0.9.0 published (2 assets)")
    assert wired.calls_to("post_json")[0].headers["Authorization"] == "Bearer secret"


def test_run_exits_with_build_error_on_partial_failure(
    wired: MockHttpClient, console: MockConsole, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(StubBuildJob, "fail", {"macos"})

    with pytest.raises(typer.Exit) as exc:
        release_cmd.run(tag="refs/tags/v0.9.0", config=None, workers=None)

    assert exc.value.exit_code == int(ErrorCode.BUILD_ERROR)
    assert [c.url.split("?name=")[1] for c in wired.calls_to("post_bytes")] == ["acre-linux"]
    assert console.find("1 of 2 platform(s) failed: macos")


def test_run_rejects_bad_tag_without_remote_calls(
    wired: MockHttpClient, console: MockConsole
) -> None:
    with pytest.raises(typer.Exit) as exc:
        release_cmd.run(tag="refs/heads/main", config=None, workers=None)

    assert exc.value.exit_code == int(ErrorCode.USER_ERROR)
    assert wired.calls == []
    assert console.has_error()


def test_run_uses_github_ref(
    wired: MockHttpClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("GITHUB_REF", "refs/tags/v2.0.0")

    release_cmd.run(tag=None, config=None, workers=1)

    assert wired.calls_to("post_json")[0].payload == {"tag_name": "2.0.0", "name": "2.0.0"}


def test_run_requires_token(wired: MockHttpClient, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("GITHUB_TOKEN")

    with pytest.raises(typer.Exit) as exc:
        release_cmd.run(tag="refs/tags/v0.9.0", config=None, workers=None)

    assert exc.value.exit_code == int(ErrorCode.ENV_ERROR)
    assert wired.calls == []


def test_plan_prints_commands(wired: MockHttpClient, console: MockConsole) -> None:
    release_cmd.plan(tag="refs/tags/v0.9.0", config=None)

    assert console.find("Release 0.9.0")
    assert console.find("command: cargo build --release")
    assert console.find("asset:   acre-macos")
    assert wired.calls == []


class TestContextHelpers:
    def test_resolve_tag_prefers_argument(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GITHUB_REF", "refs/tags/v9.9.9")
        assert context_mod.resolve_tag("refs/tags/v1.0.0") == "refs/tags/v1.0.0"
        assert context_mod.resolve_tag(None) == "refs/tags/v9.9.9"

    def test_resolve_tag_missing(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("GITHUB_REF", raising=False)
        with pytest.raises(typer.Exit):
            context_mod.resolve_tag(None)

    def test_resolve_repo_falls_back_to_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GITHUB_REPOSITORY", "example/from-env")
        assert context_mod.resolve_repo(Config()) == "example/from-env"
        assert context_mod.resolve_repo(CONFIG) == "example/acre"

    def test_build_context_reads_config_file(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        (tmp_path / "tagship.toml").write_text('binary = "tool"\n', encoding="utf-8")
        monkeypatch.chdir(tmp_path)

        ctx = context_mod.build_context()

        assert ctx.config.binary == "tool"
        assert ctx.root == tmp_path.resolve()

    def test_build_context_rejects_missing_explicit_config(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        console = MockConsole()
        monkeypatch.setattr(context_mod, "RichConsole", lambda: console)

        with pytest.raises(typer.Exit) as exc:
            context_mod.build_context(tmp_path / "nope.toml")

        assert exc.value.exit_code == int(ErrorCode.USER_ERROR)
        assert console.find("invalid config")
        assert console.find("file not found")

    def test_build_context_reports_broken_config(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        (tmp_path / "tagship.toml").write_text(
            '[[platforms]]\nname = "arm"\ncross = "true"\n', encoding="utf-8"
        )
        monkeypatch.chdir(tmp_path)
        console = MockConsole()
        monkeypatch.setattr(context_mod, "RichConsole", lambda: console)

        with pytest.raises(typer.Exit) as exc:
            context_mod.build_context()

        assert exc.value.exit_code == int(ErrorCode.USER_ERROR)
        assert console.has_error()
        assert console.find("platforms[0].cross must be a boolean")
