from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn

import typer

from tagship.core.config import CONFIG_FILE_NAME, Config, load_config_or_default
from tagship.core.errors import ErrorCode
from tagship.core.result import Err
from tagship.output.console import ConsoleProtocol, RichConsole
from tagship.output.errors import print_release_error, release_error_exit_code
from tagship.release.config import GITHUB_API_URL
from tagship.release.errors import ConfigInvalid


@dataclass(frozen=True, slots=True)
class CLIContext:
    root: Path
    config: Config
    console: ConsoleProtocol


def exit_with(err: str, *, code: ErrorCode) -> NoReturn:
    typer.echo(f"error: {err}", err=True)
    raise typer.Exit(code=int(code))


def _exit_config_invalid(error: ConfigInvalid, console: ConsoleProtocol) -> NoReturn:
    print_release_error(error, console)
    raise typer.Exit(code=release_error_exit_code(error))


def build_context(config_path: Path | None = None) -> CLIContext:
    root = Path.cwd().resolve()
    path = config_path if config_path is not None else root / CONFIG_FILE_NAME
    console = RichConsole()

    if config_path is not None and not config_path.exists():
        _exit_config_invalid(ConfigInvalid(path=config_path, reason="file not found"), console)

    result = load_config_or_default(path)
    if isinstance(result, Err):
        _exit_config_invalid(
            ConfigInvalid(path=result.error.path, reason=result.error.message), console
        )

    return CLIContext(root=root, config=result.value, console=console)


def resolve_tag(tag: str | None) -> str:
    """Explicit argument first, then the ref of the triggering push."""
    if tag:
        return tag
    env_ref = os.environ.get("GITHUB_REF", "").strip()
    if env_ref:
        return env_ref
    exit_with("no tag given and GITHUB_REF is not set", code=ErrorCode.USER_ERROR)


def resolve_repo(config: Config) -> str:
    repo = config.repo or os.environ.get("GITHUB_REPOSITORY", "").strip()
    if not repo:
        exit_with(
            "no repository configured (set 'repo' in tagship.toml or GITHUB_REPOSITORY)",
            code=ErrorCode.USER_ERROR,
        )
    return repo


def github_token() -> str:
    token = os.environ.get("GITHUB_TOKEN", "").strip()
    if not token:
        exit_with("GITHUB_TOKEN is not set", code=ErrorCode.ENV_ERROR)
    return token


def github_api_url() -> str:
    return os.environ.get("GITHUB_API_URL", "").strip() or GITHUB_API_URL
