"""
Test support utilities for sqlkv tests.

Helpers that are not fixtures but are shared across test files: fake
query executors and connectors that let tests assert the SQL a store
generates without a live database server.
"""

from tests._support.executors import CountingConnector, FailingConnector, RecordingExecutor

__all__ = [
    "CountingConnector",
    "FailingConnector",
    "RecordingExecutor",
]
