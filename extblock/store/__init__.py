"""Remote extension store client and local selection mirror."""

from extblock.store.client import ExtensionStoreClient
from extblock.store.mirror import SelectionMirror, default_mirror_path

__all__ = ["ExtensionStoreClient", "SelectionMirror", "default_mirror_path"]
