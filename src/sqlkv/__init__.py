"""
sqlkv - key-value storage over relational databases.

Persists string keys and values in one SQL table on PostgreSQL, MySQL /
MariaDB or SQLite, scoped by namespace, for use as the storage layer of a
generic key-value cache.
"""

__version__ = "0.1.0"

from sqlkv.core import *  # noqa
from sqlkv.core import __all__  # noqa
