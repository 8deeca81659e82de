"""Chunked, tree-hash verified uploads to Amazon S3 Glacier vaults."""

__version__ = "0.1.0"
