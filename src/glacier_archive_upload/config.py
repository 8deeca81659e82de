"""Configuration loading from CLI args, environment, and config file."""

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, cast

from .part_size import DEFAULT_PART_SIZE, parse_part_size, validate_part_size

# tomli is in stdlib as tomllib in Python 3.11+
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib


class InsecureConfigWarning(UserWarning):
    """Warning for insecure configuration practices."""

    pass


ENV_CREDENTIALS_FILE = "GLACIER_CREDENTIALS_FILE"
ENV_ACCOUNT = "GLACIER_ACCOUNT"
ENV_REGION = "GLACIER_REGION"
ENV_LEDGER = "GLACIER_LEDGER"

APP_DIR = Path.home() / ".glacier-archive-upload"

DEFAULT_CREDENTIALS_FILE = APP_DIR / "credentials.toml"
DEFAULT_LEDGER_FILE = APP_DIR / "archives.yml"
DEFAULT_ACCOUNT = "default"

DEFAULT_CONFIG_PATHS = [
    Path.home() / ".glacier-archive-upload.toml",
    Path.home() / ".config" / "glacier-archive-upload" / "config.toml",
]


@dataclass
class Config:
    """Resolved configuration from all sources."""

    credentials_file: str
    account: str
    ledger_file: str
    region: str | None = None

    # Upload options
    part_size: int = DEFAULT_PART_SIZE
    abort_on_failure: bool = True

    # Output options
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_file: str | None = None
    debug_boto: bool = False


def _load_config_file(path: str | Path | None) -> dict[str, object]:
    if path is not None:
        paths = [Path(path)]
    else:
        paths = DEFAULT_CONFIG_PATHS

    for config_path in paths:
        if config_path.exists():
            with open(config_path, "rb") as f:
                return dict(tomllib.load(f))

    return {}


def _resolve(
    cli_value: object, env_var: str | None, file_config: dict[str, object], key: str
) -> object:
    """CLI > env > file; None if no source has a value."""
    if cli_value is not None:
        return cli_value
    if env_var is not None and (env_value := os.environ.get(env_var)) is not None:
        return env_value
    return file_config.get(key)


def _expand(path: object) -> str:
    return os.path.abspath(os.path.expanduser(str(path)))


def load_config(
    cli_credentials_file: str | None = None,
    cli_account: str | None = None,
    cli_region: str | None = None,
    cli_ledger_file: str | None = None,
    cli_part_size: int | None = None,
    config_file: str | None = None,
    **kwargs: object,
) -> Config:
    """Precedence: CLI > env > config file > defaults."""
    file_config = _load_config_file(config_file)

    credentials_file = _resolve(
        cli_credentials_file, ENV_CREDENTIALS_FILE, file_config, "credentials_file"
    )
    account = _resolve(cli_account, ENV_ACCOUNT, file_config, "account")
    region = _resolve(cli_region, ENV_REGION, file_config, "region")
    ledger_file = _resolve(cli_ledger_file, ENV_LEDGER, file_config, "ledger_file")

    # Part size has no env var. File values are strings like "64M" or plain ints
    part_size = cli_part_size
    if part_size is None and file_config.get("part_size") is not None:
        part_size = validate_part_size(parse_part_size(str(file_config["part_size"])))

    abort_on_failure = kwargs.pop("abort_on_failure", None)
    if abort_on_failure is None:
        abort_on_failure = file_config.get("abort_on_failure", True)

    return Config(
        credentials_file=_expand(credentials_file or DEFAULT_CREDENTIALS_FILE),
        account=cast(str, account or DEFAULT_ACCOUNT),
        ledger_file=_expand(ledger_file or DEFAULT_LEDGER_FILE),
        region=cast(str | None, region),
        part_size=part_size if part_size is not None else DEFAULT_PART_SIZE,
        abort_on_failure=bool(abort_on_failure),
        **cast(dict[str, Any], kwargs),
    )
