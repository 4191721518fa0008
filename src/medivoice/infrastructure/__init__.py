from .asset_store import AssetStore
from .locator import LocatorEncoder

__all__ = ["AssetStore", "LocatorEncoder"]
