"""Command-line interface for kvstorage."""
