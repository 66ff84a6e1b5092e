"""
ResourceStore abstract interface.

Defines the contract for named-resource persistence implementations.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..core.errors import InvalidLocatorError


def locator_name(name: Optional[str], type_name: Optional[str] = None, extension: str = ".json") -> str:
    """
    Derive a locator from an explicit name or a record type name.

    The explicit name wins. The extension is appended unless the name
    already ends with it.

    Args:
        name: Caller-supplied name (None = use type_name)
        type_name: Type name of the record being saved or loaded
        extension: Conventional extension ("" disables it)

    Returns:
        Locator string

    Raises:
        InvalidLocatorError: If no usable name is available
    """
    file_name = name if name is not None else type_name
    if not file_name or not file_name.strip():
        raise InvalidLocatorError("locator name is empty")
    if "\x00" in file_name:
        raise InvalidLocatorError(f"locator name contains a NUL byte: {file_name!r}")
    if extension and not file_name.endswith(extension):
        file_name += extension
    return file_name


class ResourceStore(ABC):
    """
    Abstract named-resource storage interface.

    Implementations read and write whole byte payloads addressed by a
    locator. No locking and no atomicity guarantee across writers.
    """

    @abstractmethod
    def write(self, data: bytes, locator: str) -> str:
        """
        Write bytes to a resource.

        Args:
            data: Serialized payload
            locator: Resource locator

        Returns:
            Resolved location (path or URL) of the written resource

        Raises:
            InvalidLocatorError: If locator is malformed
            ResourceWriteError: If the write fails
        """
        ...

    @abstractmethod
    def read(self, locator: str) -> bytes:
        """
        Read bytes from a resource.

        Raises:
            InvalidLocatorError: If locator is malformed
            ResourceNotFoundError: If the resource does not exist
            ResourceReadError: If the read fails
        """
        ...

    @abstractmethod
    def delete(self, locator: str) -> None:
        """
        Delete a resource.

        Raises:
            ResourceNotFoundError: If the resource does not exist
            ResourceWriteError: If the delete fails
        """
        ...

    @abstractmethod
    def exists(self, locator: str) -> bool:
        """Return True if the resource exists."""
        ...

    def list(self, prefix: str = "") -> List[str]:
        """
        List locators starting with prefix.

        Implementations may override. Default returns an empty list.
        """
        return []

    def describe(self, locator: str) -> str:
        """
        Human readable location of a locator (for logs).

        Implementations may override. Default returns the locator.
        """
        return locator
