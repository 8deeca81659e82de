"""SHA-256 tree hash computation.

Glacier identifies archive and part content by a tree hash: the data is
split into 1 MiB leaf chunks, each leaf is hashed with SHA-256 and the
digests are combined pairwise (concatenate, hash again) until a single
root digest is left. A digest without a partner on its level is carried
up unchanged.
"""

import hashlib
from pathlib import Path
from typing import Iterable

CHUNK_SIZE = 1024 * 1024
DIGEST_SIZE = hashlib.sha256().digest_size


def reduce_tree_hash(digests: Iterable[bytes]) -> bytes:
    """Reduce leaf digests to the root digest.

    Raises:
        ValueError: If no digests are given
    """
    level = list(digests)
    if not level:
        raise ValueError("Cannot reduce an empty list of digests")

    while len(level) > 1:
        paired = [
            hashlib.sha256(level[i] + level[i + 1]).digest()
            for i in range(0, len(level) - 1, 2)
        ]
        if len(level) % 2:
            paired.append(level[-1])
        level = paired

    return level[0]


class TreeHash:
    """Incremental tree hash over 1 MiB leaf chunks.

    ``update`` may be called with buffers of any length; leaf boundaries
    depend only on the total number of bytes fed so far. ``digest`` is
    terminal: once the root has been computed the instance accepts no more
    data.
    """

    def __init__(self, data: bytes = b"", chunk_size: int = CHUNK_SIZE) -> None:
        self.chunk_size = chunk_size
        self._leaves: list[bytes] = []
        self._buffer = bytearray()
        self._root: bytes | None = None
        if data:
            self.update(data)

    def _check_open(self) -> None:
        if self._root is not None:
            raise ValueError("Tree hash already finalized")

    def update(self, data: bytes) -> None:
        self._check_open()
        view = memoryview(data)

        # Top up a partial chunk left by a previous call
        if self._buffer:
            take = min(self.chunk_size - len(self._buffer), len(view))
            self._buffer += view[:take]
            view = view[take:]
            if len(self._buffer) < self.chunk_size:
                return
            self._leaves.append(hashlib.sha256(self._buffer).digest())
            self._buffer.clear()

        while len(view) >= self.chunk_size:
            self._leaves.append(hashlib.sha256(view[: self.chunk_size]).digest())
            view = view[self.chunk_size :]

        self._buffer += view

    def add_leaves(self, digests: Iterable[bytes]) -> None:
        """Append leaf digests computed elsewhere, e.g. by a per-part hash.

        Only valid on a chunk boundary: the caller's data must start exactly
        where this hash's data ended.
        """
        self._check_open()
        if self._buffer:
            raise ValueError(
                f"Cannot add leaves with {len(self._buffer)} unaligned bytes buffered"
            )
        for digest in digests:
            if len(digest) != DIGEST_SIZE:
                raise ValueError(f"Leaf digest must be {DIGEST_SIZE} bytes, got {len(digest)}")
            self._leaves.append(digest)

    @property
    def leaves(self) -> tuple[bytes, ...]:
        """Leaf digests so far; includes the trailing partial leaf once finalized."""
        return tuple(self._leaves)

    @property
    def finalized(self) -> bool:
        return self._root is not None

    def digest(self) -> bytes:
        if self._root is None:
            # Empty input still has one (empty) leaf
            if self._buffer or not self._leaves:
                self._leaves.append(hashlib.sha256(self._buffer).digest())
                self._buffer.clear()
            self._root = reduce_tree_hash(self._leaves)
        return self._root

    def hexdigest(self) -> str:
        return self.digest().hex()


def compute_tree_hash(path: str | Path, read_size: int = 8 * CHUNK_SIZE) -> str:
    """Compute the hex tree hash of a file.

    Args:
        path: Path to file
        read_size: Size of reads from disk (default 8 MiB); does not affect
            the result

    Returns:
        Hex-encoded root digest
    """
    tree_hash = TreeHash()

    with open(path, "rb") as f:
        while chunk := f.read(read_size):
            tree_hash.update(chunk)

    return tree_hash.hexdigest()
