"""Storage: local filesystem backend.

StorageFactory creates the backend from signflow.core.config. Backends
implement IDocumentStorage (read, write, delete, exists).
"""

from signflow.infrastructure.external.storage.factory import StorageFactory
from signflow.infrastructure.external.storage.local_storage import LocalStorageService

__all__ = ["LocalStorageService", "StorageFactory"]
