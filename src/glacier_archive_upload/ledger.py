"""Local ledger of uploaded archives.

Glacier only lists a vault's archives through a slow inventory job, so the
client keeps its own record of every archive it uploaded. The ledger is a
YAML file that is read whole, appended to in memory and rewritten whole.
"""

import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

import yaml

from .upload import TransferResult

REQUIRED_FIELDS = ("vault", "name", "size", "archive_id")


class LedgerIOError(Exception):
    """Raised when the ledger file is missing, unreadable or malformed."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Ledger {path}: {reason}")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


@dataclass
class Archive:
    vault: str
    name: str
    size: int
    archive_id: str
    location: str = ""
    checksum: str = ""
    uploaded_at: str = field(default_factory=_now)
    exists: bool = True

    @classmethod
    def from_result(
        cls, vault: str, name: str, size: int, result: TransferResult
    ) -> "Archive":
        return cls(
            vault=vault,
            name=name,
            size=size,
            archive_id=result.archive_id,
            location=result.location,
            checksum=result.checksum,
        )

    def to_dict(self) -> dict:
        return {
            "vault": self.vault,
            "name": self.name,
            "size": self.size,
            "uploaded_at": self.uploaded_at,
            "exists": self.exists,
            "location": self.location,
            "archive_id": self.archive_id,
            "checksum": self.checksum,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Archive":
        return cls(
            vault=d["vault"],
            name=d["name"],
            size=int(d["size"]),
            archive_id=d["archive_id"],
            location=d.get("location", ""),
            checksum=d.get("checksum", ""),
            uploaded_at=str(d.get("uploaded_at", "")),
            # A blank "exists:" reads as None; only an explicit false hides a record
            exists=d.get("exists") is not False,
        )


class Ledger:
    """Ordered list of Archive records backed by a YAML file."""

    def __init__(self, path: str | Path):
        self.path = Path(path).expanduser()
        self._archives: list[Archive] = []

    @property
    def archives(self) -> list[Archive]:
        return list(self._archives)

    def create(self) -> bool:
        """Write an empty ledger unless one exists. Returns True if created."""
        if self.path.exists():
            return False
        self._archives = []
        self.save()
        return True

    def load(self) -> "Ledger":
        if not self.path.exists():
            raise LedgerIOError(self.path, "file not found (run init_ledger to create it)")

        try:
            with open(self.path) as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise LedgerIOError(self.path, f"cannot read: {e}") from e
        except yaml.YAMLError as e:
            raise LedgerIOError(self.path, f"corrupt YAML: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict) or not isinstance(data.get("archives", []), list):
            raise LedgerIOError(self.path, "expected a mapping with an 'archives' list")

        archives = []
        for index, entry in enumerate(data.get("archives") or []):
            if not isinstance(entry, dict):
                raise LedgerIOError(self.path, f"entry {index} is not a mapping")
            missing = [name for name in REQUIRED_FIELDS if name not in entry]
            if missing:
                raise LedgerIOError(
                    self.path, f"entry {index} is missing {', '.join(missing)}"
                )
            try:
                archives.append(Archive.from_dict(entry))
            except (TypeError, ValueError) as e:
                raise LedgerIOError(self.path, f"entry {index} is invalid: {e}") from e

        self._archives = archives
        return self

    def save(self) -> None:
        data = {"archives": [archive.to_dict() for archive in self._archives]}
        temp_path = self.path.with_suffix(self.path.suffix + ".tmp")

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_path, "w") as f:
                yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
            os.replace(temp_path, self.path)
        except OSError as e:
            if temp_path.exists():
                temp_path.unlink()
            raise LedgerIOError(self.path, f"cannot write: {e}") from e

    def append(self, archive: Archive) -> None:
        self._archives.append(archive)

    def for_vault(self, vault: str | None, include_deleted: bool = False) -> list[Archive]:
        return [
            a
            for a in self._archives
            if (vault is None or a.vault == vault) and (include_deleted or a.exists)
        ]

    def find(self, vault: str, name_or_id: str) -> Archive | None:
        """Most recent existing archive in ``vault`` matching an archive id or name."""
        for archive in reversed(self._archives):
            if archive.vault != vault or not archive.exists:
                continue
            if name_or_id in (archive.archive_id, archive.name):
                return archive
        return None

    def mark_deleted(self, vault: str, archive_id: str) -> bool:
        """Flag the record as deleted on the service. Returns False if not found."""
        for archive in self._archives:
            if archive.vault == vault and archive.archive_id == archive_id:
                archive.exists = False
                return True
        return False
