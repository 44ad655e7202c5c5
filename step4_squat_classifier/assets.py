"""
Asset Manager
Resolves named model artifacts (TorchScript model, scaler params) from an assets directory.
"""

from pathlib import Path
from typing import BinaryIO, Union


class AssetManager:
    """Resolve logical asset names to files inside a root directory."""

    def __init__(self, root: Union[str, Path]):
        """
        Args:
            root: Directory holding the assets (e.g. config.ASSETS_DIR)
        """
        self.root = Path(root)

    def path(self, name: str) -> Path:
        """Resolve an asset name to its path, failing if it does not exist."""
        asset_path = self.root / name
        if not asset_path.is_file():
            raise FileNotFoundError(f"Asset not found: {name} (in {self.root})")
        return asset_path

    def exists(self, name: str) -> bool:
        return (self.root / name).is_file()

    def open(self, name: str) -> BinaryIO:
        """Open an asset as a binary stream."""
        return open(self.path(name), 'rb')

    def read_bytes(self, name: str) -> bytes:
        return self.path(name).read_bytes()

    def __repr__(self) -> str:
        return f"AssetManager(root='{self.root}')"
