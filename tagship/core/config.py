"""Typed release configuration loading.

The config file (``tagship.toml``) is optional. Every key has a default that
reproduces the stock release matrix, so a repository only needs a file when
it deviates from it.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from tagship.release.config import (
    CROSS_TOOL,
    DEFAULT_BINARY_NAME,
    DEFAULT_BUILD_ENV,
    DEFAULT_OUTPUT_ROOT,
    DEFAULT_PLATFORMS,
    DEFAULT_TAG_PREFIX,
    NATIVE_TOOL,
    STRIP_TOOL,
)
from tagship.release.model import PlatformSpec

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_list, get_str, get_table

__all__ = [
    "Config",
    "ConfigError",
    "ToolchainConfig",
    "CONFIG_FILE_NAME",
    "load_config",
    "load_config_or_default",
]

CONFIG_FILE_NAME = "tagship.toml"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class ToolchainConfig:
    """Executables used to build and post-process binaries."""

    native: str = NATIVE_TOOL
    cross: str = CROSS_TOOL
    strip: str = STRIP_TOOL


def _default_build_env() -> dict[str, str]:
    return dict(DEFAULT_BUILD_ENV)


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    binary: str = DEFAULT_BINARY_NAME
    repo: str | None = None
    tag_prefix: str = DEFAULT_TAG_PREFIX
    output_root: str = DEFAULT_OUTPUT_ROOT
    toolchain: ToolchainConfig = field(default_factory=ToolchainConfig)
    build_env: dict[str, str] = field(default_factory=_default_build_env)
    platforms: tuple[PlatformSpec, ...] = DEFAULT_PLATFORMS

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML).

        Raises:
            ValueError: If the platform list is malformed.
        """
        toolchain: StrDict = get_table(data, "toolchain") or {}
        build: StrDict = get_table(data, "build") or {}

        build_env = _default_build_env()
        env_table = get_table(build, "env")
        if env_table is not None:
            for key, value in env_table.items():
                if not isinstance(value, str):
                    raise ValueError(f"build.env.{key} must be a string")
                build_env[key] = value

        raw_platforms = get_list(data, "platforms")
        platforms = (
            DEFAULT_PLATFORMS if raw_platforms is None else _parse_platforms(raw_platforms)
        )

        return cls(
            binary=get_str(data, "binary") or DEFAULT_BINARY_NAME,
            repo=get_str(data, "repo"),
            tag_prefix=get_str(data, "tag_prefix") or DEFAULT_TAG_PREFIX,
            output_root=get_str(data, "output_root") or DEFAULT_OUTPUT_ROOT,
            toolchain=ToolchainConfig(
                native=get_str(toolchain, "native") or NATIVE_TOOL,
                cross=get_str(toolchain, "cross") or CROSS_TOOL,
                strip=get_str(toolchain, "strip") or STRIP_TOOL,
            ),
            build_env=build_env,
            platforms=platforms,
        )


def _flag(entry: StrDict, key: str, *, default: bool, where: str) -> bool:
    value = entry.get(key, default)
    if not isinstance(value, bool):
        raise ValueError(f"{where}.{key} must be a boolean")
    return value


def _parse_platforms(raw: list[object]) -> tuple[PlatformSpec, ...]:
    if not raw:
        raise ValueError("platforms must not be empty")

    out: list[PlatformSpec] = []
    seen: set[str] = set()
    for i, item in enumerate(raw):
        entry = as_str_dict(item)
        if entry is None:
            raise ValueError(f"platforms[{i}] must be a table")

        name = get_str(entry, "name")
        if name is None:
            raise ValueError(f"platforms[{i}].name is required")
        if name in seen:
            raise ValueError(f"duplicate platform name: {name}")
        seen.add(name)

        cross = _flag(entry, "cross", default=False, where=f"platforms[{i}]")
        strip = _flag(entry, "strip", default=True, where=f"platforms[{i}]")
        out.append(
            PlatformSpec(
                name=name,
                os=get_str(entry, "os") or name,
                target_triple=get_str(entry, "target"),
                requires_cross=cross,
                strip=strip,
            )
        )
    return tuple(out)


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to tagship.toml

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Result[Config, ConfigError]:
    """Load config from file, or return the default config if it doesn't exist.

    A file that exists but is broken is still an error.
    """
    if not path.exists():
        return Ok(Config())
    return load_config(path)
