"""Protocol interfaces for the ledger's external collaborators."""
from .asset_transfer import AssetTransfer
from .block_source import BlockSource

__all__ = ["AssetTransfer", "BlockSource"]
