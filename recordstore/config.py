"""
Configuration from environment variables.

Environment Variables:
    RECORDSTORE_DIR: Directory of the file store - default: ~/.recordstore/records
    RECORDSTORE_EXTENSION: Extension appended to locators - default: .json
    RECORDSTORE_KEY_PATH: Sealing key file - default: ~/.recordstore/keys/record_aesgcm
    RECORDSTORE_S3_BUCKET: When set, records live in this S3 bucket instead of the file store
    RECORDSTORE_S3_PREFIX: Key prefix inside the bucket - default: records
    RECORDSTORE_S3_ENDPOINT: Custom S3 endpoint (MinIO, localstack)
    RECORDSTORE_S3_REGION: AWS region - default: us-east-1
"""

import os
from dataclasses import dataclass
from typing import Optional

from .sealing import get_default_key_path
from .storage import FileResourceStore, ResourceStore, S3ResourceStore

DEFAULT_DIRECTORY = os.path.join("~", ".recordstore", "records")


@dataclass(frozen=True)
class StoreConfig:
    """
    Resolved recordstore configuration.

    Fields:
        directory: File store directory
        extension: Extension appended to locators ("" disables it)
        key_path: Sealing key file
        s3_bucket: S3 bucket (None = use the file store)
        s3_prefix: S3 key prefix
        s3_endpoint: S3 endpoint URL
        s3_region: AWS region
    """
    directory: str = DEFAULT_DIRECTORY
    extension: str = ".json"
    key_path: str = str(get_default_key_path())
    s3_bucket: Optional[str] = None
    s3_prefix: str = "records"
    s3_endpoint: Optional[str] = None
    s3_region: str = "us-east-1"

    @classmethod
    def from_env(cls) -> "StoreConfig":
        """Build configuration from RECORDSTORE_* environment variables."""
        return cls(
            directory=os.getenv("RECORDSTORE_DIR") or DEFAULT_DIRECTORY,
            extension=os.getenv("RECORDSTORE_EXTENSION", ".json"),
            key_path=os.getenv("RECORDSTORE_KEY_PATH") or str(get_default_key_path()),
            s3_bucket=os.getenv("RECORDSTORE_S3_BUCKET") or None,
            s3_prefix=os.getenv("RECORDSTORE_S3_PREFIX", "records"),
            s3_endpoint=os.getenv("RECORDSTORE_S3_ENDPOINT") or None,
            s3_region=os.getenv("RECORDSTORE_S3_REGION", "us-east-1"),
        )


def build_store(config: StoreConfig) -> ResourceStore:
    """
    Create the resource store selected by config.

    Returns:
        S3ResourceStore when a bucket is configured, else FileResourceStore
    """
    if config.s3_bucket:
        return S3ResourceStore(
            bucket=config.s3_bucket,
            prefix=config.s3_prefix,
            endpoint_url=config.s3_endpoint,
            region=config.s3_region,
        )
    return FileResourceStore(config.directory)
