"""Output formatting for JSON and human-readable modes."""

import json

from .ledger import Archive
from .upload import TransferResult
from .vaults import VaultInfo


def format_size(size_bytes: int | float) -> str:
    """Format bytes as human-readable size (binary units)."""
    size: float = float(size_bytes)
    for unit in ["B", "KiB", "MiB", "GiB", "TiB"]:
        if abs(size) < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} PiB"


def format_duration(seconds: float) -> str:
    """Format seconds as human-readable duration."""
    if seconds < 60:
        return f"{seconds:.1f}s"
    elif seconds < 3600:
        minutes = int(seconds // 60)
        secs = int(seconds % 60)
        return f"{minutes}m {secs}s"
    else:
        hours = int(seconds // 3600)
        minutes = int((seconds % 3600) // 60)
        return f"{hours}h {minutes}m"


def format_upload(
    archive: Archive,
    result: TransferResult,
    elapsed_seconds: float,
    json_output: bool = False,
) -> str:
    """Format the result of a completed upload."""
    if json_output:
        return json.dumps(
            {
                "status": "success",
                "archive": archive.to_dict(),
                "elapsed_seconds": round(elapsed_seconds, 2),
            },
            indent=2,
        )

    lines = [
        "",
        "Upload complete:",
        f"  Archive:    {archive.name} ({format_size(archive.size)})",
        f"  Vault:      {archive.vault}",
        f"  Location:   {result.location}",
        f"  Archive ID: {result.archive_id}",
        f"  Tree hash:  {result.checksum}",
        f"  Time:       {format_duration(elapsed_seconds)}",
    ]
    return "\n".join(lines)


def format_plan(
    name: str,
    size: int,
    part_size: int,
    checksum: str,
    ranges: list[tuple[int, int]],
    json_output: bool = False,
) -> str:
    """Format what an upload would send (``--dry-run``)."""
    if json_output:
        return json.dumps(
            {
                "name": name,
                "size": size,
                "part_size": part_size,
                "checksum": checksum,
                "multipart": bool(ranges),
                "parts": [list(r) for r in ranges],
            },
            indent=2,
        )

    lines = [f"Would upload: {name} ({format_size(size)})", f"  Tree hash: {checksum}"]
    if not ranges:
        lines.append("  Single request (file is smaller than the part size)")
    else:
        lines.append(f"  {len(ranges)} parts of {format_size(part_size)}:")
        for start, end in ranges:
            lines.append(f"    bytes {start}-{end}")
    return "\n".join(lines)


def format_error(
    code: str,
    message: str,
    json_output: bool = False,
) -> str:
    """Format error result."""
    if json_output:
        return json.dumps(
            {
                "status": "error",
                "code": code,
                "message": message,
            },
            indent=2,
        )

    return f"Error: {message}"


def format_archives(
    archives: list[Archive],
    verbose: bool = False,
    json_output: bool = False,
) -> str:
    """Format ledger records, one per line (two with -v)."""
    if json_output:
        return json.dumps({"archives": [a.to_dict() for a in archives]}, indent=2)

    if not archives:
        return "(no archives)"

    lines = []
    for a in archives:
        marker = "" if a.exists else "  [deleted]"
        lines.append(f"{a.vault:20} {a.name:40} {format_size(a.size):>10}{marker}")
        if verbose:
            lines.append(f"    uploaded:   {a.uploaded_at}")
            lines.append(f"    archive id: {a.archive_id}")
            lines.append(f"    location:   {a.location}")
            lines.append(f"    tree hash:  {a.checksum}")
    return "\n".join(lines)


def format_vaults(vaults: list[VaultInfo], json_output: bool = False) -> str:
    """Format a vault listing."""
    if json_output:
        return json.dumps({"vaults": [v.to_dict() for v in vaults]}, indent=2)

    if not vaults:
        return "(no vaults)"

    lines = []
    for v in vaults:
        lines.append(
            f"{v.name:30} {v.archive_count:>8} archives {format_size(v.size):>10}  "
            f"created {v.created}"
        )
    return "\n".join(lines)


def format_vault_change(
    action: str, vault: str, location: str = "", json_output: bool = False
) -> str:
    """Format the result of creating or deleting a vault."""
    if json_output:
        return json.dumps(
            {"status": "success", "action": action, "vault": vault, "location": location},
            indent=2,
        )

    text = f"{action.capitalize()} vault {vault}"
    return f"{text} ({location})" if location else text
