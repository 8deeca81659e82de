"""Credential file loading and Glacier client creation."""

import stat
import sys
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import boto3

from .config import DEFAULT_ACCOUNT, InsecureConfigWarning
from .upload import DEFAULT_ACCOUNT_ID

if TYPE_CHECKING:
    from mypy_boto3_glacier import GlacierClient

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib


class CredentialError(Exception):
    """Raised when credentials cannot be loaded for an account."""

    pass


@dataclass
class Credentials:
    """Access keys for one named account in the credential file."""

    access_key_id: str
    secret_access_key: str
    region: str | None = None
    account_id: str = DEFAULT_ACCOUNT_ID

    def __repr__(self) -> str:
        return (
            f"Credentials(access_key_id={self.access_key_id!r}, "
            f"secret_access_key='***', region={self.region!r}, "
            f"account_id={self.account_id!r})"
        )


def _warn_if_exposed(path: Path) -> None:
    mode = path.stat().st_mode
    if mode & (stat.S_IRWXG | stat.S_IRWXO):
        warnings.warn(
            f"Credential file {path} is accessible by other users "
            f"(mode {stat.filemode(mode)}). Consider chmod 600.",
            InsecureConfigWarning,
            stacklevel=3,
        )


def load_credentials(path: str | Path, account: str = DEFAULT_ACCOUNT) -> Credentials:
    """Load the keys for ``account`` from a TOML credential file.

    The file holds one table per account::

        [default]
        access_key_id = "AKIA..."
        secret_access_key = "..."
        region = "us-east-1"
    """
    path = Path(path).expanduser()

    if not path.exists():
        raise CredentialError(f"Credential file not found: {path}")

    _warn_if_exposed(path)

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise CredentialError(f"Cannot read credential file {path}: {e}") from e

    section = data.get(account)
    if not isinstance(section, dict):
        available = sorted(k for k, v in data.items() if isinstance(v, dict))
        raise CredentialError(
            f"Account {account!r} not found in {path}. Available accounts: {available}"
        )

    try:
        return Credentials(
            access_key_id=section["access_key_id"],
            secret_access_key=section["secret_access_key"],
            region=section.get("region"),
            account_id=str(section.get("account_id", DEFAULT_ACCOUNT_ID)),
        )
    except KeyError as e:
        raise CredentialError(f"Account {account!r} in {path} is missing {e}") from e


def create_glacier_client(
    creds: Credentials, region: str | None = None
) -> "GlacierClient":
    """Create a boto3 Glacier client. ``region`` overrides the account's region."""
    return boto3.client(
        "glacier",
        aws_access_key_id=creds.access_key_id,
        aws_secret_access_key=creds.secret_access_key,
        region_name=region or creds.region,
    )
