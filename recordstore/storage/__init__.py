"""
Resource persistence.

This module provides:
- ResourceStore: Abstract interface for named-resource persistence
- FileResourceStore: One file per resource in a directory
- S3ResourceStore: One S3 object per resource
- locator_name: Locator derivation from explicit or type names
"""

from .store import ResourceStore, locator_name
from .file_store import FileResourceStore
from .s3_store import S3ResourceStore

__all__ = [
    "ResourceStore",
    "locator_name",
    "FileResourceStore",
    "S3ResourceStore",
]
