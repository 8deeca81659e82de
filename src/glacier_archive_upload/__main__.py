"""Entry point for glacier-archive-upload CLI."""

from __future__ import annotations

import argparse
import sys
import time
from logging import Logger
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from .auth import CredentialError, create_glacier_client, load_credentials
from .cli import build_parser
from .config import Config, load_config
from .exit_codes import ExitCode
from .ledger import Archive, Ledger, LedgerIOError
from .log import get_logger, setup_logging
from .output import (
    format_archives,
    format_error,
    format_plan,
    format_upload,
    format_vault_change,
    format_vaults,
)
from .treehash import compute_tree_hash
from .upload import ArchiveUploader, ChecksumMismatch, RemoteServiceError, plan_parts
from .vaults import create_vault, delete_archive, delete_vault, list_vaults

if TYPE_CHECKING:
    from mypy_boto3_glacier import GlacierClient


def _print_error(config: Config, code: str, message: str) -> None:
    if config.json_output:
        print(format_error(code, message, json_output=True))
    else:
        print(f"Error: {message}", file=sys.stderr)


def _connect(config: Config) -> tuple["GlacierClient", str] | int:
    """Returns (client, account_id) or an ExitCode."""
    try:
        creds = load_credentials(config.credentials_file, config.account)
    except CredentialError as e:
        _print_error(config, "AUTH_FAILED", str(e))
        return ExitCode.AUTH_FAILURE

    return create_glacier_client(creds, region=config.region), creds.account_id


def _load_ledger(config: Config) -> Ledger | int:
    try:
        return Ledger(config.ledger_file).load()
    except LedgerIOError as e:
        _print_error(config, "LEDGER_ERROR", str(e))
        return ExitCode.LEDGER_ERROR


def _handle_upload(args: argparse.Namespace, config: Config, logger: Logger) -> int:
    path = Path(args.file)
    if not path.is_file():
        _print_error(config, "NOT_FOUND", f"No such file: {path}")
        return ExitCode.NOT_FOUND

    if args.dry_run:
        size = path.stat().st_size
        ranges = plan_parts(size, config.part_size) if size >= config.part_size else []
        print(
            format_plan(
                name=args.description or path.name,
                size=size,
                part_size=config.part_size,
                checksum=compute_tree_hash(path),
                ranges=ranges,
                json_output=config.json_output,
            )
        )
        return ExitCode.SUCCESS

    # The result must be recorded, so an unusable ledger stops us before uploading
    ledger = _load_ledger(config)
    if isinstance(ledger, int):
        return ledger

    connection = _connect(config)
    if isinstance(connection, int):
        return connection
    client, account_id = connection

    uploader = ArchiveUploader(
        client,
        args.vault,
        part_size=config.part_size,
        account_id=account_id,
        abort_on_failure=config.abort_on_failure,
        show_progress=not config.quiet and not config.json_output,
    )

    start_time = time.time()
    size = path.stat().st_size
    result = uploader.upload(path, description=args.description)
    elapsed = time.time() - start_time

    archive = Archive.from_result(args.vault, args.description or path.name, size, result)
    ledger.append(archive)
    try:
        ledger.save()
    except LedgerIOError as e:
        # The archive exists remotely; print its id so it is not lost
        logger.error(f"Uploaded archive id {result.archive_id} could not be recorded")
        _print_error(config, "LEDGER_ERROR", str(e))
        return ExitCode.LEDGER_ERROR

    print(format_upload(archive, result, elapsed, json_output=config.json_output))
    return ExitCode.SUCCESS


def _handle_delete_archive(args: argparse.Namespace, config: Config, logger: Logger) -> int:
    ledger = _load_ledger(config)
    if isinstance(ledger, int):
        return ledger

    archive = ledger.find(args.vault, args.archive)
    if archive is None:
        _print_error(
            config, "NOT_FOUND", f"No archive {args.archive!r} in vault {args.vault!r} in the ledger"
        )
        return ExitCode.NOT_FOUND

    connection = _connect(config)
    if isinstance(connection, int):
        return connection
    client, account_id = connection

    delete_archive(client, archive.vault, archive.archive_id, account_id=account_id)
    ledger.mark_deleted(archive.vault, archive.archive_id)
    ledger.save()

    if config.json_output:
        print(format_archives([archive], json_output=True))
    else:
        print(f"Deleted {archive.name} ({archive.archive_id}) from {archive.vault}")
    return ExitCode.SUCCESS


def _handle_list_archives(args: argparse.Namespace, config: Config, logger: Logger) -> int:
    ledger = _load_ledger(config)
    if isinstance(ledger, int):
        return ledger

    archives = ledger.for_vault(args.vault, include_deleted=args.include_deleted)
    print(
        format_archives(archives, verbose=args.long_listing, json_output=config.json_output)
    )
    return ExitCode.SUCCESS


def _handle_create_vault(args: argparse.Namespace, config: Config, logger: Logger) -> int:
    connection = _connect(config)
    if isinstance(connection, int):
        return connection
    client, account_id = connection

    location = create_vault(client, args.vault, account_id=account_id)
    print(format_vault_change("created", args.vault, location, json_output=config.json_output))
    return ExitCode.SUCCESS


def _handle_delete_vault(args: argparse.Namespace, config: Config, logger: Logger) -> int:
    connection = _connect(config)
    if isinstance(connection, int):
        return connection
    client, account_id = connection

    delete_vault(client, args.vault, account_id=account_id)
    print(format_vault_change("deleted", args.vault, json_output=config.json_output))
    return ExitCode.SUCCESS


def _handle_list_vaults(args: argparse.Namespace, config: Config, logger: Logger) -> int:
    connection = _connect(config)
    if isinstance(connection, int):
        return connection
    client, account_id = connection

    print(format_vaults(list_vaults(client, account_id=account_id), json_output=config.json_output))
    return ExitCode.SUCCESS


def _handle_init_ledger(args: argparse.Namespace, config: Config, logger: Logger) -> int:
    ledger = Ledger(config.ledger_file)
    try:
        created = ledger.create()
    except LedgerIOError as e:
        _print_error(config, "LEDGER_ERROR", str(e))
        return ExitCode.LEDGER_ERROR

    if created:
        logger.info(f"Created ledger {ledger.path}")
    else:
        logger.info(f"Ledger {ledger.path} already exists")
    return ExitCode.SUCCESS


HANDLERS: dict[str, Callable[[argparse.Namespace, Config, Logger], int]] = {
    "upload_archive": _handle_upload,
    "delete_archive": _handle_delete_archive,
    "list_archives": _handle_list_archives,
    "create_vault": _handle_create_vault,
    "delete_vault": _handle_delete_vault,
    "list_vaults": _handle_list_vaults,
    "init_ledger": _handle_init_ledger,
}


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(
            cli_credentials_file=args.credentials,
            cli_account=args.account,
            cli_region=args.region,
            cli_ledger_file=args.ledger,
            cli_part_size=getattr(args, "part_size", None),
            config_file=args.config,
            abort_on_failure=getattr(args, "abort_on_failure", None),
            json_output=args.json,
            quiet=args.quiet,
            verbose=args.verbose,
            log_file=args.log_file,
            debug_boto=args.debug_boto,
        )
    except ValueError as e:
        # Bad part size or malformed TOML in the config file
        parser.print_usage(sys.stderr)
        print(f"Error: {e}", file=sys.stderr)
        return ExitCode.USAGE_ERROR

    setup_logging(
        verbose=config.verbose,
        quiet=config.quiet,
        log_file=config.log_file,
        debug_boto=config.debug_boto,
    )
    logger = get_logger()

    try:
        return HANDLERS[args.command](args, config, logger)
    except ChecksumMismatch as e:
        if e.archive_id:
            # The archive exists remotely; print its id so it is not lost
            logger.error(f"Archive id {e.archive_id} was stored but not recorded in the ledger")
        _print_error(config, "REMOTE_ERROR", str(e))
        return ExitCode.REMOTE_ERROR
    except RemoteServiceError as e:
        _print_error(config, "REMOTE_ERROR", str(e))
        return ExitCode.REMOTE_ERROR
    except LedgerIOError as e:
        _print_error(config, "LEDGER_ERROR", str(e))
        return ExitCode.LEDGER_ERROR
    except (OSError, EOFError) as e:
        _print_error(config, "IO_ERROR", str(e))
        return ExitCode.IO_ERROR
    except KeyboardInterrupt:
        logger.info("Cancelled by user.")
        return ExitCode.USER_CANCELLED


if __name__ == "__main__":
    sys.exit(main())
