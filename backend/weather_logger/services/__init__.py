"""
Services Package
================

These are the "workers" that do the actual work.

- ReadingStore: Keeps every reading in SQLite and answers window queries
"""

from .reading_store import ReadingStore, StorageError

__all__ = [
    "ReadingStore",
    "StorageError",
]
