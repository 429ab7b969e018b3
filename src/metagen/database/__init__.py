"""
Audit log storage for AI generations.

This module records what each generation did and what it cost. Entries are
written through a small async store protocol so the destination (a CMS
collection, a JSON lines file, an in-memory list) can be swapped freely.

Key Components:
    - AuditLogEntry: Pydantic model for one audited generation
    - AuditStore: Protocol for storage backends
    - InMemoryAuditStore / JsonLinesAuditStore: Built-in stores
    - AuditLogger: Writes entries and never lets a write failure escape

Python Learning Notes:
    - __init__.py files make directories into Python packages
    - The __all__ list controls what gets imported with "from package import *"

Example Usage:
    from metagen.database import AuditLogger, JsonLinesAuditStore

    audit = AuditLogger(JsonLinesAuditStore("logs/ai_logs.jsonl"))
    stored = await audit.record(entry)
"""

from .audit_log import (
    AuditLogEntry,
    AuditLogger,
    AuditStore,
    InMemoryAuditStore,
    JsonLinesAuditStore,
)

__all__ = [
    "AuditLogEntry",
    "AuditLogger",
    "AuditStore",
    "InMemoryAuditStore",
    "JsonLinesAuditStore",
]
