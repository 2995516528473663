"""kvstorage: a key-value store over HTTP backed by Tarantool.

The storage access layer lives in ``kvstorage.storage``; the HTTP API in
``kvstorage.api``.
"""

__version__ = "0.1.0"
