"""Vault and archive management calls."""

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .log import get_logger
from .upload import DEFAULT_ACCOUNT_ID, call_service

if TYPE_CHECKING:
    from mypy_boto3_glacier import GlacierClient


@dataclass
class VaultInfo:
    name: str
    arn: str
    created: str
    archive_count: int
    size: int
    last_inventory: str | None = None

    @classmethod
    def from_response(cls, d: dict) -> "VaultInfo":
        return cls(
            name=d["VaultName"],
            arn=d.get("VaultARN", ""),
            created=str(d.get("CreationDate", "")),
            archive_count=int(d.get("NumberOfArchives", 0)),
            size=int(d.get("SizeInBytes", 0)),
            last_inventory=d.get("LastInventoryDate"),
        )

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "arn": self.arn,
            "created": self.created,
            "archive_count": self.archive_count,
            "size": self.size,
            "last_inventory": self.last_inventory,
        }


def create_vault(
    client: "GlacierClient", vault_name: str, account_id: str = DEFAULT_ACCOUNT_ID
) -> str:
    """Create a vault (idempotent on the service side). Returns its location."""
    response = call_service(
        "CreateVault", client.create_vault, accountId=account_id, vaultName=vault_name
    )
    get_logger().info(f"Created vault {vault_name}")
    return response.get("location", "")


def delete_vault(
    client: "GlacierClient", vault_name: str, account_id: str = DEFAULT_ACCOUNT_ID
) -> None:
    """Delete a vault. The service refuses vaults that still hold archives."""
    call_service(
        "DeleteVault", client.delete_vault, accountId=account_id, vaultName=vault_name
    )
    get_logger().info(f"Deleted vault {vault_name}")


def delete_archive(
    client: "GlacierClient",
    vault_name: str,
    archive_id: str,
    account_id: str = DEFAULT_ACCOUNT_ID,
) -> None:
    call_service(
        "DeleteArchive",
        client.delete_archive,
        accountId=account_id,
        vaultName=vault_name,
        archiveId=archive_id,
    )
    get_logger().info(f"Deleted archive {archive_id} from {vault_name}")


def list_vaults(
    client: "GlacierClient", account_id: str = DEFAULT_ACCOUNT_ID
) -> list[VaultInfo]:
    """List every vault in the account, following pagination markers."""

    def _collect() -> list[VaultInfo]:
        paginator = client.get_paginator("list_vaults")
        return [
            VaultInfo.from_response(vault)
            for page in paginator.paginate(accountId=account_id)
            for vault in page.get("VaultList", [])
        ]

    vaults = call_service("ListVaults", _collect)
    return sorted(vaults, key=lambda v: v.name)
