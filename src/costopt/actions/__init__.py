from .vm_resizer import VmResizer, ResizeState
from .blob_tiering import BlobTierChanger
from .database_scaler import DatabaseScaler

__all__ = [
    "VmResizer",
    "ResizeState",
    "BlobTierChanger",
    "DatabaseScaler",
]
