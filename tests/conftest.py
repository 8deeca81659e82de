"""Pytest configuration and fixtures."""

import boto3
import pytest
from botocore.exceptions import ClientError
from moto import mock_aws

from glacier_archive_upload.ledger import Ledger

MIB = 1024 * 1024

VAULT = "test-vault"


class FakeGlacier:
    """In-memory stand-in for a boto3 Glacier client that records every call.

    Echoes the checksum it was sent, like the real service does when the
    data arrives intact.
    """

    def __init__(self, fail_on_part: int | None = None, fail_on_initiate: bool = False):
        self.calls: list[tuple[str, dict]] = []
        self.fail_on_part = fail_on_part
        self.fail_on_initiate = fail_on_initiate
        self.checksum_override: str | None = None
        self.part_count = 0

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def params_for(self, name: str) -> list[dict]:
        return [params for n, params in self.calls if n == name]

    def _error(self, operation: str, code: str, message: str) -> ClientError:
        return ClientError({"Error": {"Code": code, "Message": message}}, operation)

    def upload_archive(self, **params):
        self.calls.append(("upload_archive", params))
        return {
            "location": f"/-/vaults/{params['vaultName']}/archives/single-archive",
            "checksum": self.checksum_override or params["checksum"],
            "archiveId": "single-archive",
        }

    def initiate_multipart_upload(self, **params):
        self.calls.append(("initiate_multipart_upload", params))
        if self.fail_on_initiate:
            raise self._error(
                "InitiateMultipartUpload", "ResourceNotFoundException", "Vault not found"
            )
        return {
            "location": f"/-/vaults/{params['vaultName']}/multipart-uploads/upload-1",
            "uploadId": "upload-1",
        }

    def upload_multipart_part(self, **params):
        self.calls.append(("upload_multipart_part", params))
        self.part_count += 1
        if self.fail_on_part == self.part_count:
            raise self._error("UploadMultipartPart", "RequestTimeoutException", "Request timed out")
        return {"checksum": params["checksum"]}

    def complete_multipart_upload(self, **params):
        self.calls.append(("complete_multipart_upload", params))
        return {
            "location": f"/-/vaults/{params['vaultName']}/archives/multipart-archive",
            "checksum": self.checksum_override or params["checksum"],
            "archiveId": "multipart-archive",
        }

    def abort_multipart_upload(self, **params):
        self.calls.append(("abort_multipart_upload", params))
        return {}

    def delete_archive(self, **params):
        self.calls.append(("delete_archive", params))
        return {}


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Keep the user's real config, credentials and env vars out of tests."""
    for var in (
        "GLACIER_CREDENTIALS_FILE",
        "GLACIER_ACCOUNT",
        "GLACIER_REGION",
        "GLACIER_LEDGER",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr("glacier_archive_upload.config.DEFAULT_CONFIG_PATHS", [])
    monkeypatch.setattr(
        "glacier_archive_upload.config.DEFAULT_CREDENTIALS_FILE",
        tmp_path / "missing-credentials.toml",
    )
    monkeypatch.setattr(
        "glacier_archive_upload.config.DEFAULT_LEDGER_FILE",
        tmp_path / "missing-ledger.yml",
    )


@pytest.fixture
def fake_glacier():
    return FakeGlacier()


@pytest.fixture
def make_file(tmp_path):
    """Create a file of the given size with non-repeating content."""

    def _make(size: int, name: str = "archive.bin"):
        path = tmp_path / name
        block = bytes(range(251)) * (MIB // 251 + 1)
        with open(path, "wb") as f:
            remaining = size
            offset = 0
            while remaining:
                # Rotate the pattern so 1 MiB chunks differ from each other
                piece = block[offset % 251 : offset % 251 + min(remaining, MIB)]
                f.write(piece)
                remaining -= len(piece)
                offset += 7
        return path

    return _make


@pytest.fixture
def credentials_file(tmp_path):
    path = tmp_path / "credentials.toml"
    path.write_text(
        "[default]\n"
        'access_key_id = "testing"\n'
        'secret_access_key = "testing"\n'
        'region = "us-east-1"\n'
        "\n"
        "[backup]\n"
        'access_key_id = "backup-key"\n'
        'secret_access_key = "backup-secret"\n'
        'account_id = "123456789012"\n'
    )
    path.chmod(0o600)
    return path


@pytest.fixture
def ledger_path(tmp_path):
    path = tmp_path / "archives.yml"
    Ledger(path).create()
    return path


@pytest.fixture
def aws_credentials(monkeypatch):
    """Mocked AWS credentials for moto."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")


@pytest.fixture
def mock_glacier(aws_credentials):
    """Provide a mocked Glacier environment."""
    with mock_aws():
        yield boto3.client("glacier", region_name="us-east-1")
