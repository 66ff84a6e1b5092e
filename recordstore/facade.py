"""
RecordStore: save and load typed records through a resource store.

    save:  record -> records.to_bytes -> [seal] -> store.write(locator)
    load:  store.read(locator) -> [open] -> records.from_bytes(cls)

Locators come from an explicit name or the record's type name, with the
configured extension appended if absent. Failures are logged and re-raised
as recordstore error kinds; nothing is retried.
"""

from typing import Any, Dict, Mapping, Optional, Type, TypeVar

from . import records
from .config import StoreConfig, build_store
from .core.canonical import json_loads
from .core.errors import CodecDecodeError, RecordStoreError
from .logging_config import get_logger
from .sealing import SealingKey
from .storage import ResourceStore, locator_name

T = TypeVar("T")


class RecordStore:
    """
    Save/load facade over a ResourceStore.

    Example:
        store = RecordStore(FileResourceStore("/tmp/records"))
        store.save(settings)                 # -> /tmp/records/Settings.json
        settings = store.load(Settings)
    """

    def __init__(self, store: Optional[ResourceStore] = None, config: Optional[StoreConfig] = None):
        """
        Args:
            store: Resource store (default: built from config)
            config: Configuration (default: StoreConfig.from_env())
        """
        self.config = config or StoreConfig.from_env()
        self.store = store or build_store(self.config)

    def locator_for(self, record_or_cls: Any, name: Optional[str] = None) -> str:
        """Derive the locator of a record or record type."""
        return locator_name(name, records.type_name_of(record_or_cls), self.config.extension)

    def _write(self, data: bytes, record: Any, name: Optional[str]) -> str:
        type_name = records.type_name_of(record)
        logger = get_logger(__name__, record_type=type_name)
        locator = self.locator_for(record, name)
        try:
            location = self.store.write(data, locator)
        except RecordStoreError:
            logger.error("Can not save in %s", locator)
            raise
        logger.info("Saved in %s", location)
        return location

    def _read(self, cls: Any, name: Optional[str]) -> bytes:
        logger = get_logger(__name__, record_type=records.type_name_of(cls))
        locator = self.locator_for(cls, name)
        try:
            return self.store.read(locator)
        except RecordStoreError:
            logger.error("Can not read from %s", locator)
            raise

    def save(self, record: Any, name: Optional[str] = None) -> str:
        """
        Serialize and write a record.

        Args:
            record: Record to save
            name: Explicit resource name (default: the record's type name)

        Returns:
            Resolved location of the written resource
        """
        return self._write(records.to_bytes(record), record, name)

    def load(self, cls: Type[T], name: Optional[str] = None) -> T:
        """
        Read and decode a record of type cls.

        Args:
            cls: Destination type
            name: Explicit resource name (default: cls's type name)
        """
        return records.from_bytes(cls, self._read(cls, name))

    def save_sealed(self, record: Any, key: SealingKey, name: Optional[str] = None) -> str:
        """Serialize, seal with key, and write a record."""
        return self._write(key.seal(records.to_bytes(record)), record, name)

    def load_sealed(self, cls: Type[T], key: SealingKey, name: Optional[str] = None) -> T:
        """Read, open with key, and decode a record of type cls."""
        sealed = self._read(cls, name)
        try:
            data = key.open(sealed)
        except RecordStoreError:
            get_logger(__name__, record_type=records.type_name_of(cls)).error(
                "Cannot read or decrypt data from %s", self.locator_for(cls, name)
            )
            raise
        return records.from_bytes(cls, data)

    def delete(self, cls: Any, name: Optional[str] = None) -> None:
        """Delete the stored resource of a record type."""
        locator = self.locator_for(cls, name)
        self.store.delete(locator)
        get_logger(__name__, record_type=records.type_name_of(cls)).info("Deleted %s", locator)

    def exists(self, cls: Any, name: Optional[str] = None) -> bool:
        return self.store.exists(self.locator_for(cls, name))

    def save_dict(self, mapping: Mapping[str, Any], name: str) -> str:
        """Normalize and write a loose mapping under an explicit name."""
        return self._write(records.dict_to_bytes(mapping), mapping, name)

    def load_dict(self, name: str) -> Dict[str, Any]:
        """
        Read a stored mapping in its flattened form.

        Raises:
            CodecDecodeError: If the stored JSON is not an object
        """
        obj = json_loads(self._read(dict, name))
        if not isinstance(obj, dict):
            raise CodecDecodeError(f"{name} does not hold a JSON object")
        return obj
