"""Runtime side of the generated master data modules.

Generated DTO / DAO / exporter / registry modules subclass or instantiate the
classes exported here.
"""

from .accessor import MasterDataAccessor
from .container import MasterDataContainer, record_to_dict
from .exporter import MasterDataExporter
from .loader import AssetLoader, FileAssetLoader
from .registry import MasterDataRegistry
from .value_object import ValueObject

__all__ = [
    "AssetLoader",
    "FileAssetLoader",
    "MasterDataAccessor",
    "MasterDataContainer",
    "MasterDataExporter",
    "MasterDataRegistry",
    "ValueObject",
    "record_to_dict",
]
