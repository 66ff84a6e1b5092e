"""
S3-based resource store using one-object-per-locator.

Each resource is stored as a separate S3 object with key: {prefix}/{locator}

This provides:
- Shared storage for several processes or hosts
- Works with MinIO / localstack through endpoint_url
"""

import os
from typing import List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..core.errors import (
    InvalidLocatorError,
    ResourceNotFoundError,
    ResourceReadError,
    ResourceWriteError,
)
from .store import ResourceStore

_NOT_FOUND_CODES = ("NoSuchKey", "404", "NotFound")


def _error_code(e: ClientError) -> str:
    return e.response.get("Error", {}).get("Code", "Unknown")


class S3ResourceStore(ResourceStore):
    """
    S3-based resource store.

    Storage format: one object per locator
    Object key: {prefix}/{locator}

    Paginator: boto3 list_objects_v2 returns max 1000 keys per call.
    Use paginator to iterate all keys.
    """

    def __init__(
        self,
        bucket: str,
        prefix: str = "records",
        endpoint_url: Optional[str] = None,
        region: str = "us-east-1",
    ) -> None:
        """
        Initialize S3 resource store.

        Args:
            bucket: S3 bucket name
            prefix: Key prefix for resources (default: "records")
            endpoint_url: S3 endpoint URL (for MinIO, localstack, etc.)
            region: AWS region (default: us-east-1)

        Raises:
            ResourceReadError: If S3 client creation fails or the bucket is not accessible
        """
        self.bucket = bucket
        self.prefix = prefix.strip("/")
        self.endpoint_url = endpoint_url
        self.region = region

        # Credentials from environment: AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY
        try:
            self.s3_client = boto3.client(
                "s3",
                endpoint_url=endpoint_url,
                region_name=region,
            )
        except (BotoCoreError, ValueError) as e:
            raise ResourceReadError(f"Failed to create S3 client: {e}") from e

        if os.getenv("RECORDSTORE_S3_SKIP_BUCKET_CHECK", "").lower() != "true":
            try:
                self.s3_client.head_bucket(Bucket=bucket)
            except ClientError as e:
                raise ResourceReadError(
                    f"Bucket '{bucket}' not accessible (code: {_error_code(e)})"
                ) from e

    def key_for(self, locator: str) -> str:
        """
        Generate S3 key for a locator.

        Raises:
            InvalidLocatorError: If locator is empty or contains a NUL byte
        """
        if not locator or "\x00" in locator:
            raise InvalidLocatorError(f"invalid locator: {locator!r}")
        locator = locator.lstrip("/")
        if not locator:
            raise InvalidLocatorError("invalid locator: '/'")
        return f"{self.prefix}/{locator}" if self.prefix else locator

    def describe(self, locator: str) -> str:
        return f"s3://{self.bucket}/{self.key_for(locator)}"

    def write(self, data: bytes, locator: str) -> str:
        key = self.key_for(locator)
        try:
            self.s3_client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType="application/json",
            )
        except (BotoCoreError, ClientError) as e:
            raise ResourceWriteError(f"Failed to write s3://{self.bucket}/{key}: {e}") from e
        return f"s3://{self.bucket}/{key}"

    def read(self, locator: str) -> bytes:
        key = self.key_for(locator)
        try:
            response = self.s3_client.get_object(Bucket=self.bucket, Key=key)
            return response["Body"].read()
        except ClientError as e:
            if _error_code(e) in _NOT_FOUND_CODES:
                raise ResourceNotFoundError(f"resource not found: s3://{self.bucket}/{key}") from e
            raise ResourceReadError(f"Failed to read s3://{self.bucket}/{key}: {e}") from e
        except BotoCoreError as e:
            raise ResourceReadError(f"Failed to read s3://{self.bucket}/{key}: {e}") from e

    def exists(self, locator: str) -> bool:
        key = self.key_for(locator)
        try:
            self.s3_client.head_object(Bucket=self.bucket, Key=key)
            return True
        except ClientError as e:
            if _error_code(e) in _NOT_FOUND_CODES:
                return False
            raise ResourceReadError(f"Failed to stat s3://{self.bucket}/{key}: {e}") from e
        except BotoCoreError as e:
            raise ResourceReadError(f"Failed to stat s3://{self.bucket}/{key}: {e}") from e

    def delete(self, locator: str) -> None:
        # S3 deletes are idempotent; check first so missing resources behave like the file store
        if not self.exists(locator):
            raise ResourceNotFoundError(f"resource not found: {self.describe(locator)}")
        key = self.key_for(locator)
        try:
            self.s3_client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            raise ResourceWriteError(f"Failed to delete s3://{self.bucket}/{key}: {e}") from e

    def list(self, prefix: str = "") -> List[str]:
        base = f"{self.prefix}/" if self.prefix else ""
        paginator = self.s3_client.get_paginator("list_objects_v2")
        names = []
        try:
            for page in paginator.paginate(Bucket=self.bucket, Prefix=base + prefix):
                if "Contents" not in page:
                    continue
                for obj in page["Contents"]:
                    names.append(obj["Key"][len(base):])
        except (BotoCoreError, ClientError) as e:
            raise ResourceReadError(f"Failed to list s3://{self.bucket}/{base}: {e}") from e
        return sorted(names)
