"""Integration shortcuts."""

from .object_store import (
    ObjectStore,
    ObjectStoreError,
    StoredObject,
    build_object_store,
)

__all__ = ["ObjectStore", "ObjectStoreError", "StoredObject", "build_object_store"]
