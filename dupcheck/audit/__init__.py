"""Write-once audit stores for duplicate checks.

- Memory: records live for the lifetime of the process
- File: append-only JSON Lines file
"""

from .base import AuditStore, new_check_id
from .file_store import JsonlAuditStore
from .memory_store import MemoryAuditStore


def build_audit_store(config=None) -> AuditStore:
    """Build the audit store selected by ``DEDUP_AUDIT_BACKEND``."""
    if config is None:
        from dupcheck.config import get_config

        config = get_config()
    if config.audit_backend == "file":
        return JsonlAuditStore(config.audit_file_path)
    return MemoryAuditStore()


__all__ = [
    "AuditStore",
    "JsonlAuditStore",
    "MemoryAuditStore",
    "build_audit_store",
    "new_check_id",
]
