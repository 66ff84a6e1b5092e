"""
Exception types for recordstore.

Classification and flattening never raise; every error below belongs to the
codec or persistence seams.
"""


class RecordStoreError(Exception):
    """Base class for all recordstore errors."""
    pass


class CodecEncodeError(RecordStoreError):
    """Raised when a record cannot be serialized."""
    pass


class CodecDecodeError(RecordStoreError):
    """Raised when bytes do not match the destination structure."""
    pass


class ResourceWriteError(RecordStoreError):
    """Raised when serialized bytes cannot be written to a resource."""
    pass


class ResourceReadError(RecordStoreError):
    """Raised when a resource cannot be read."""
    pass


class ResourceNotFoundError(ResourceReadError):
    """Raised when the requested resource does not exist."""
    pass


class InvalidLocatorError(RecordStoreError):
    """Raised when a name or path cannot be turned into a locator."""
    pass


class ConversionError(RecordStoreError):
    """Raised when an intermediate representation does not match (bad UTF-8, bad base64, bad seal)."""
    pass
