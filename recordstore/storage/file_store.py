"""
File-based resource store.

Each locator maps to one file inside the store directory. file:// URLs and
absolute paths are used as given; relative locators may not leave the
directory.
"""

import os
import tempfile
import uuid
from pathlib import Path
from typing import List, Optional

from ..core.errors import (
    InvalidLocatorError,
    ResourceNotFoundError,
    ResourceReadError,
    ResourceWriteError,
)
from .store import ResourceStore


class FileResourceStore(ResourceStore):
    """
    File-based resource store.

    Guarantees:
    - Fsync after each write (durability)
    - Parent directories created on demand
    """

    def __init__(self, directory: str) -> None:
        """
        Initialize file resource store.

        Args:
            directory: Directory holding the resources (created if missing)
        """
        self.directory = Path(directory).expanduser()
        self.directory.mkdir(parents=True, exist_ok=True)

    def path_for(self, locator: str) -> Path:
        """
        Resolve a locator to a filesystem path.

        Raises:
            InvalidLocatorError: If locator is empty, remote, or escapes the directory
        """
        if not locator or "\x00" in locator:
            raise InvalidLocatorError(f"invalid locator: {locator!r}")

        lowered = locator.lower()
        if lowered.startswith(("http://", "https://")):
            raise InvalidLocatorError(f"remote locator not supported by file store: {locator}")
        if lowered.startswith("file://"):
            return Path(locator[len("file://"):])

        path = Path(locator).expanduser()
        if path.is_absolute():
            return path

        base = self.directory.resolve()
        resolved = (base / path).resolve()
        if resolved != base and base not in resolved.parents:
            raise InvalidLocatorError(f"locator escapes store directory: {locator}")
        return self.directory / path

    def describe(self, locator: str) -> str:
        return str(self.path_for(locator))

    def write(self, data: bytes, locator: str) -> str:
        path = self.path_for(locator)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
        except OSError as ex:
            raise ResourceWriteError(f"cannot write {path}: {ex}") from ex
        return str(path)

    def read(self, locator: str) -> bytes:
        path = self.path_for(locator)
        try:
            with open(path, "rb") as f:
                return f.read()
        except FileNotFoundError as ex:
            raise ResourceNotFoundError(f"resource not found: {path}") from ex
        except OSError as ex:
            raise ResourceReadError(f"cannot read {path}: {ex}") from ex

    def delete(self, locator: str) -> None:
        path = self.path_for(locator)
        try:
            os.remove(path)
        except FileNotFoundError as ex:
            raise ResourceNotFoundError(f"resource not found: {path}") from ex
        except OSError as ex:
            raise ResourceWriteError(f"cannot delete {path}: {ex}") from ex

    def exists(self, locator: str) -> bool:
        return self.path_for(locator).is_file()

    def if_exists(self, locator: str) -> Optional[str]:
        """Return the resolved path if the resource exists, else None."""
        path = self.path_for(locator)
        return str(path) if path.is_file() else None

    def list(self, prefix: str = "") -> List[str]:
        names = []
        for path in self.directory.rglob("*"):
            if not path.is_file():
                continue
            name = path.relative_to(self.directory).as_posix()
            if name.startswith(prefix):
                names.append(name)
        return sorted(names)

    @staticmethod
    def write_temp(data: bytes) -> str:
        """
        Write bytes to a uniquely named file in the system temp directory.

        Returns:
            Path to the written file

        Raises:
            ResourceWriteError: If the write fails
        """
        path = os.path.join(tempfile.gettempdir(), f"{uuid.uuid4()}.data")
        try:
            with open(path, "wb") as f:
                f.write(data)
        except OSError as ex:
            raise ResourceWriteError(f"cannot write {path}: {ex}") from ex
        return path
