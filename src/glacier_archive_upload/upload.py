"""Archive uploads to Glacier vaults."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, BinaryIO, Callable

from botocore.exceptions import BotoCoreError, ClientError
from tqdm import tqdm

from .log import get_logger
from .part_size import DEFAULT_PART_SIZE, validate_part_size
from .treehash import TreeHash

if TYPE_CHECKING:
    from mypy_boto3_glacier import GlacierClient

# "-" means the account that owns the credentials
DEFAULT_ACCOUNT_ID = "-"


class RemoteServiceError(Exception):
    """Raised when a Glacier request fails. Uploads are not retried."""

    def __init__(self, operation: str, code: str, message: str):
        self.operation = operation
        self.code = code
        self.message = message
        super().__init__(f"{operation} failed ({code}): {message}")


class ChecksumMismatch(Exception):
    """Raised when the service reports a different tree hash than we sent."""

    def __init__(
        self, what: str, expected: str, actual: str, archive_id: str | None = None
    ):
        self.what = what
        self.expected = expected
        self.actual = actual
        # Set when the service already stored the archive
        self.archive_id = archive_id
        message = f"Checksum mismatch for {what}: expected {expected}, got {actual}"
        if archive_id:
            message += f" (stored as archive id {archive_id})"
        super().__init__(message)


def call_service(operation: str, method: Callable[..., Any], **params: Any) -> Any:
    """Call a Glacier client method, converting botocore errors to RemoteServiceError."""
    try:
        return method(**params)
    except ClientError as e:
        error = e.response.get("Error", {})
        raise RemoteServiceError(
            operation,
            error.get("Code", "Unknown"),
            error.get("Message", str(e)),
        ) from e
    except BotoCoreError as e:
        raise RemoteServiceError(operation, type(e).__name__, str(e)) from e


class UploadState(Enum):
    INITIATED = "initiated"
    UPLOADING = "uploading"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class UploadSession:
    """Bookkeeping for one multipart upload."""

    vault_name: str
    description: str
    part_size: int
    upload_id: str
    offset: int = 0
    archive_hash: TreeHash = field(default_factory=TreeHash, repr=False)
    state: UploadState = UploadState.INITIATED


@dataclass(frozen=True)
class TransferResult:
    """Result of a successful archive upload."""

    location: str
    archive_id: str
    checksum: str

    @classmethod
    def from_response(cls, response: dict, checksum: str) -> "TransferResult":
        return cls(
            location=response.get("location", ""),
            archive_id=response["archiveId"],
            checksum=response.get("checksum") or checksum,
        )

    def to_dict(self) -> dict:
        return {
            "location": self.location,
            "archive_id": self.archive_id,
            "checksum": self.checksum,
        }


def plan_parts(file_size: int, part_size: int) -> list[tuple[int, int]]:
    """Return the inclusive byte ranges a multipart upload sends, in order."""
    return [
        (start, min(start + part_size, file_size) - 1)
        for start in range(0, file_size, part_size)
    ]


def format_range(start: int, end: int) -> str:
    """Content-Range style value expected by UploadMultipartPart."""
    return f"bytes {start}-{end}/*"


class ArchiveUploader:
    """Upload one file as a Glacier archive.

    Files smaller than ``part_size`` go up in a single UploadArchive request.
    Anything else uses the multipart protocol: InitiateMultipartUpload, one
    UploadMultipartPart per ``part_size`` window in file order, then
    CompleteMultipartUpload with the tree hash of the whole archive. The
    archive hash is built from the leaf digests of each part, so every byte
    is hashed exactly once.

    A failed multipart upload is not retried or resumed. With
    ``abort_on_failure`` the orphaned upload is aborted on the service.
    """

    def __init__(
        self,
        client: "GlacierClient",
        vault_name: str,
        part_size: int = DEFAULT_PART_SIZE,
        account_id: str = DEFAULT_ACCOUNT_ID,
        abort_on_failure: bool = True,
        show_progress: bool = False,
    ):
        self.client = client
        self.vault_name = vault_name
        self.part_size = validate_part_size(part_size)
        self.account_id = account_id
        self.abort_on_failure = abort_on_failure
        self.show_progress = show_progress
        self.last_session: UploadSession | None = None

    def upload(self, path: str | Path, description: str | None = None) -> TransferResult:
        path = Path(path)
        if description is None:
            description = path.name
        size = path.stat().st_size

        with open(path, "rb") as f, tqdm(
            total=size,
            unit="B",
            unit_scale=True,
            desc=path.name,
            ncols=80,
            disable=not self.show_progress,
        ) as pbar:
            if size < self.part_size:
                return self._upload_single(f, size, description, pbar)
            return self._upload_multipart(f, size, description, pbar)

    def _upload_single(
        self, f: BinaryIO, size: int, description: str, pbar: tqdm
    ) -> TransferResult:
        logger = get_logger()
        logger.info(f"Uploading {description} ({size} bytes) to {self.vault_name}")

        body = f.read()
        checksum = TreeHash(body).hexdigest()

        response = call_service(
            "UploadArchive",
            self.client.upload_archive,
            accountId=self.account_id,
            vaultName=self.vault_name,
            archiveDescription=description,
            checksum=checksum,
            body=body,
        )
        pbar.update(len(body))
        self._verify(description, checksum, response, response.get("archiveId"))

        return TransferResult.from_response(response, checksum)

    def _upload_multipart(
        self, f: BinaryIO, size: int, description: str, pbar: tqdm
    ) -> TransferResult:
        logger = get_logger()

        response = call_service(
            "InitiateMultipartUpload",
            self.client.initiate_multipart_upload,
            accountId=self.account_id,
            vaultName=self.vault_name,
            archiveDescription=description,
            partSize=str(self.part_size),
        )
        session = UploadSession(
            vault_name=self.vault_name,
            description=description,
            part_size=self.part_size,
            upload_id=response["uploadId"],
        )
        self.last_session = session
        part_count = len(plan_parts(size, self.part_size))
        logger.info(
            f"Initiated multipart upload of {description} to {self.vault_name}: "
            f"{part_count} parts of {self.part_size} bytes (upload id {session.upload_id})"
        )

        try:
            session.state = UploadState.UPLOADING
            while session.offset < size:
                window = f.read(min(self.part_size, size - session.offset))
                if not window:
                    raise EOFError(
                        f"{description} shrank during upload "
                        f"(expected {size} bytes, read {session.offset})"
                    )
                self._upload_part(session, window)
                pbar.update(len(window))

            result = self._complete(session, size)
        except (Exception, KeyboardInterrupt):
            orphaned = session.state is UploadState.UPLOADING
            session.state = UploadState.FAILED
            if orphaned and self.abort_on_failure:
                self._abort(session)
            raise

        return result

    def _upload_part(self, session: UploadSession, window: bytes) -> None:
        logger = get_logger()

        part_hash = TreeHash(window)
        checksum = part_hash.hexdigest()
        session.archive_hash.add_leaves(part_hash.leaves)

        byte_range = format_range(session.offset, session.offset + len(window) - 1)
        logger.debug(f"Uploading part {byte_range} (tree hash {checksum})")

        response = call_service(
            "UploadMultipartPart",
            self.client.upload_multipart_part,
            accountId=self.account_id,
            vaultName=session.vault_name,
            uploadId=session.upload_id,
            checksum=checksum,
            range=byte_range,
            body=window,
        )
        self._verify(f"part {byte_range}", checksum, response)

        session.offset += len(window)

    def _complete(self, session: UploadSession, size: int) -> TransferResult:
        logger = get_logger()
        checksum = session.archive_hash.hexdigest()

        response = call_service(
            "CompleteMultipartUpload",
            self.client.complete_multipart_upload,
            accountId=self.account_id,
            vaultName=session.vault_name,
            uploadId=session.upload_id,
            archiveSize=str(size),
            checksum=checksum,
        )
        session.state = UploadState.COMPLETED
        self._verify(session.description, checksum, response, response.get("archiveId"))

        logger.info(f"Completed multipart upload {session.upload_id} ({size} bytes)")
        return TransferResult.from_response(response, checksum)

    def _abort(self, session: UploadSession) -> None:
        logger = get_logger()
        logger.warning(
            f"Aborting multipart upload {session.upload_id} after {session.offset} bytes"
        )
        try:
            call_service(
                "AbortMultipartUpload",
                self.client.abort_multipart_upload,
                accountId=self.account_id,
                vaultName=session.vault_name,
                uploadId=session.upload_id,
            )
        except RemoteServiceError as e:
            # The original failure is what the caller needs to see
            logger.error(
                f"Could not abort multipart upload {session.upload_id}: {e}. "
                f"It stays open on the service until it expires."
            )

    @staticmethod
    def _verify(
        what: str, expected: str, response: dict, archive_id: str | None = None
    ) -> None:
        actual = response.get("checksum")
        if actual and actual != expected:
            raise ChecksumMismatch(what, expected, actual, archive_id=archive_id)


def upload_archive(
    client: "GlacierClient",
    path: str | Path,
    vault_name: str,
    part_size: int = DEFAULT_PART_SIZE,
    description: str | None = None,
    **kwargs: Any,
) -> TransferResult:
    """Upload a file with a one-off ArchiveUploader."""
    uploader = ArchiveUploader(client, vault_name, part_size=part_size, **kwargs)
    return uploader.upload(path, description=description)
