from __future__ import annotations

from pathlib import Path

from tagship.core.config import Config
from tagship.core.result import Err, Ok
from tagship.release.errors import MissingTarget
from tagship.release.model import PlatformSpec
from tagship.release.toolchain import plan_platforms, select_toolchain


LINUX_MUSL = PlatformSpec(
    name="linux",
    os="ubuntu-latest",
    target_triple="x86_64-unknown-linux-musl",
    requires_cross=True,
)


class TestSelectToolchain:
    def test_cross_plan_uses_cross_tool_and_target(self) -> None:
        result = select_toolchain(LINUX_MUSL)

        assert isinstance(result, Ok)
        plan = result.value
        assert plan.executable == "cross"
        assert plan.executable != "cargo"
        assert plan.extra_args == ("--target", "x86_64-unknown-linux-musl")
        assert plan.extra_args.count("x86_64-unknown-linux-musl") == 1
        assert plan.output_directory == Path("target") / "x86_64-unknown-linux-musl"

    def test_native_plan_ignores_target_triple(self) -> None:
        spec = PlatformSpec(
            name="macos",
            os="macos-latest",
            target_triple="x86_64-apple-darwin",
            requires_cross=False,
        )
        result = select_toolchain(spec)

        assert isinstance(result, Ok)
        plan = result.value
        assert plan.executable == "cargo"
        assert plan.extra_args == ()
        assert plan.output_directory == Path("target")

    def test_native_output_dir_same_with_and_without_triple(self) -> None:
        with_triple = select_toolchain(PlatformSpec("a", "os", "x86_64-apple-darwin", False))
        without = select_toolchain(PlatformSpec("a", "os", None, False))

        assert isinstance(with_triple, Ok) and isinstance(without, Ok)
        assert with_triple.value.output_directory == without.value.output_directory

    def test_cross_without_target_is_missing_target(self) -> None:
        result = select_toolchain(PlatformSpec(name="arm", os="ubuntu-latest", requires_cross=True))

        assert result == Err(MissingTarget(platform_name="arm"))

    def test_custom_tools_and_output_root(self) -> None:
        result = select_toolchain(
            LINUX_MUSL,
            native_tool="cargo-nightly",
            cross_tool="cross-util",
            output_root=Path("out"),
        )

        assert isinstance(result, Ok)
        assert result.value.executable == "cross-util"
        assert result.value.output_directory == Path("out/x86_64-unknown-linux-musl")

    def test_build_command_and_binary_path(self) -> None:
        result = select_toolchain(LINUX_MUSL)

        assert isinstance(result, Ok)
        plan = result.value
        assert plan.build_command() == [
            "cross",
            "build",
            "--release",
            "--target",
            "x86_64-unknown-linux-musl",
        ]
        assert plan.binary_path("acre") == Path("target/x86_64-unknown-linux-musl/release/acre")

    def test_selection_is_deterministic(self) -> None:
        assert select_toolchain(LINUX_MUSL) == select_toolchain(LINUX_MUSL)

    def test_strip_flag_carried_over(self) -> None:
        result = select_toolchain(PlatformSpec("win", "windows-latest", strip=False))

        assert isinstance(result, Ok)
        assert result.value.strip is False


class TestPlanPlatforms:
    def test_default_config_plans_every_platform_in_order(self) -> None:
        result = plan_platforms(Config())

        assert isinstance(result, Ok)
        assert [p.platform_name for p in result.value] == ["linux", "macos"]
        assert all(p.executable == "cross" for p in result.value)

    def test_stops_on_first_missing_target(self) -> None:
        config = Config(
            platforms=(
                PlatformSpec("linux", "ubuntu-latest"),
                PlatformSpec("arm", "ubuntu-latest", requires_cross=True),
                PlatformSpec("risc", "ubuntu-latest", requires_cross=True),
            )
        )

        assert plan_platforms(config) == Err(MissingTarget(platform_name="arm"))
