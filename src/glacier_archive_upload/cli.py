"""CLI argument parsing."""

import argparse
import sys
from typing import NoReturn

from . import __version__
from .exit_codes import ExitCode
from .part_size import InvalidPartSize, InvalidPartSizeFormat, parse_part_size, validate_part_size

PROG = "glacier-archive-upload"


class ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that exits with ExitCode.USAGE_ERROR instead of 2."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(ExitCode.USAGE_ERROR, f"{self.prog}: error: {message}\n")


def part_size_arg(text: str) -> int:
    """argparse type for -p/--part-size: "100", "64M" or "1G", validated."""
    try:
        return validate_part_size(parse_part_size(text))
    except (InvalidPartSize, InvalidPartSizeFormat) as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog=PROG,
        description="Upload archives to Amazon S3 Glacier and keep a local ledger of them",
        epilog="""
Examples:
  %(prog)s create_vault photos
  %(prog)s upload_archive photos 2024.tar -p 128M
  %(prog)s la photos -v
  %(prog)s da photos 2024.tar

Environment variables:
  GLACIER_CREDENTIALS_FILE  Credential file (alternative to -c)
  GLACIER_ACCOUNT           Account name in the credential file (alternative to -a)
  GLACIER_REGION            AWS region (alternative to --region)
  GLACIER_LEDGER            Ledger file (alternative to --ledger)

Config file: ~/.glacier-archive-upload.toml or ~/.config/glacier-archive-upload/config.toml
""",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    # Credentials
    auth_group = parser.add_argument_group("Credentials")
    auth_group.add_argument(
        "-c",
        "--credentials",
        metavar="PATH",
        help="TOML credential file (default: ~/.glacier-archive-upload/credentials.toml)",
    )
    auth_group.add_argument(
        "-a",
        "--account",
        help="Account table in the credential file (default: default)",
    )
    auth_group.add_argument(
        "--region",
        help="AWS region (default: the account's region)",
    )

    # Local state
    state_group = parser.add_argument_group("Local state")
    state_group.add_argument(
        "--ledger",
        metavar="PATH",
        help="Archive ledger file (default: ~/.glacier-archive-upload/archives.yml)",
    )
    state_group.add_argument(
        "--config",
        metavar="PATH",
        help="Config file to read instead of the default locations",
    )

    # Output
    output_group = parser.add_argument_group("Output")
    output_group.add_argument(
        "--json",
        action="store_true",
        help="Output results as JSON",
    )
    output_group.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress progress output, only show errors",
    )
    output_group.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show debug information",
    )
    output_group.add_argument(
        "--log-file",
        metavar="PATH",
        help="Write logs to file",
    )
    output_group.add_argument(
        "--debug-boto",
        action="store_true",
        help="Also log botocore and urllib3 requests at DEBUG",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    commands = parser.add_subparsers(
        title="Commands",
        dest="command_alias",
        metavar="COMMAND",
        required=True,
    )

    ua = commands.add_parser(
        "upload_archive", aliases=["ua"], help="Upload a file to a vault"
    )
    ua.add_argument("vault", help="Vault name")
    ua.add_argument("file", help="File to upload")
    ua.add_argument(
        "-p",
        "--part-size",
        type=part_size_arg,
        default=None,
        metavar="SIZE",
        help="Multipart part size: bytes, or a number followed by M or G; "
        "1M to 4G, a power of two (default: 64M)",
    )
    ua.add_argument(
        "-d",
        "--description",
        help="Archive description (default: the file's base name)",
    )
    ua.add_argument(
        "--no-abort",
        action="store_const",
        const=False,
        default=None,
        dest="abort_on_failure",
        help="Leave a failed multipart upload open instead of aborting it",
    )
    ua.add_argument(
        "--dry-run",
        action="store_true",
        help="Show the tree hash and part ranges without uploading",
    )
    ua.set_defaults(command="upload_archive")

    da = commands.add_parser(
        "delete_archive", aliases=["da"], help="Delete an archive recorded in the ledger"
    )
    da.add_argument("vault", help="Vault name")
    da.add_argument("archive", help="Archive name or archive id from the ledger")
    da.set_defaults(command="delete_archive")

    la = commands.add_parser(
        "list_archives", aliases=["la"], help="List archives recorded in the ledger"
    )
    la.add_argument("vault", nargs="?", help="Only list archives in this vault")
    la.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        dest="long_listing",
        help="Show archive id, location, tree hash and upload time",
    )
    la.add_argument(
        "--all",
        action="store_true",
        dest="include_deleted",
        help="Include archives that have been deleted",
    )
    la.set_defaults(command="list_archives")

    cv = commands.add_parser("create_vault", aliases=["cv"], help="Create a vault")
    cv.add_argument("vault", help="Vault name")
    cv.set_defaults(command="create_vault")

    dv = commands.add_parser("delete_vault", aliases=["dv"], help="Delete an empty vault")
    dv.add_argument("vault", help="Vault name")
    dv.set_defaults(command="delete_vault")

    lv = commands.add_parser("list_vaults", aliases=["lv"], help="List vaults")
    lv.set_defaults(command="list_vaults")

    il = commands.add_parser(
        "init_ledger", aliases=["il"], help="Create an empty ledger file"
    )
    il.set_defaults(command="init_ledger")

    return parser


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(args)
