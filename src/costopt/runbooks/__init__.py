from .base import BaseRunbook
from .reporter import RunReport, RunReporter
from .vm_runbook import VmSizeRunbook
from .storage_runbook import StorageTieringRunbook
from .database_runbook import DatabaseScalingRunbook, DatabaseType

__all__ = [
    "BaseRunbook",
    "RunReport",
    "RunReporter",
    "VmSizeRunbook",
    "StorageTieringRunbook",
    "DatabaseScalingRunbook",
    "DatabaseType",
]
