"""
Audit logging for AI generations.

Every generation an editor triggers can be recorded as an AuditLogEntry: which
operation ran, on which provider and model, what it cost, how long it took and
what it produced. Entries are written through an AuditStore, a one-method
async protocol, so the CMS collection, a JSON lines file or an in-memory list
are interchangeable.

Writing an entry must never affect the generation it describes. AuditLogger
therefore swallows every store failure: it logs the problem as a LoggingError
and reports ``False`` to the caller, who carries on.

Key Components:
    - AuditLogEntry: Pydantic model for one audited generation
    - AuditStore: Protocol implemented by storage backends
    - InMemoryAuditStore: List-backed store for tests and short scripts
    - JsonLinesAuditStore: Append-only JSON lines file
    - AuditLogger: Failure-isolating writer with optional usage accounting

Python Learning Notes:
    - typing.Protocol describes an interface without requiring inheritance
    - asyncio.to_thread() runs blocking file I/O without blocking the event loop
    - model_dump_json() / model_validate_json() serialize pydantic models
"""

import asyncio
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Union, runtime_checkable

from pydantic import BaseModel, Field, ValidationError, field_validator

from ..errors import LoggingError
from ..models import utc_timestamp
from ..utils import get_logger
from ..utils.monitoring import UsageMonitor

logger = get_logger(__name__)

INPUT_EXCERPT_LENGTH = 100


class AuditLogEntry(BaseModel):
    """
    One audited generation.

    Attributes:
        operation (str): "alt-tag", "seo-title", "seo-description" or
            "icon-enhancement".
        provider (str): Provider id or display name.
        model (str): Model identifier used for the call.
        success (bool): Whether the generation succeeded.
        tokens_used (int): Total tokens reported by the backend.
        cost (float): Estimated cost in US dollars.
        duration_ms (int): Wall-clock duration of the generation.
        input_excerpt (Optional[str]): First 100 characters of the input
            (image URL, document title or icon name).
        output (Optional[str]): Generated text, or raw JSON for icons.
        error (Optional[str]): Failure reason when success is False.
        timestamp (str): ISO 8601 UTC time the entry was created.
        actor (Optional[str]): User that triggered the generation, if known.
        keywords (List[str]): Target keywords used by SEO generation.
        content_themes (List[str]): Themes extracted from the analyzed content.
        character_count (Optional[int]): Length of the generated text.
        details (Dict[str, Any]): Operation-specific extras.
    """

    operation: str
    provider: str
    model: str
    success: bool
    tokens_used: int = 0
    cost: float = 0.0
    duration_ms: int = 0
    input_excerpt: Optional[str] = None
    output: Optional[str] = None
    error: Optional[str] = None
    timestamp: str = Field(default_factory=utc_timestamp)
    actor: Optional[str] = None
    keywords: List[str] = Field(default_factory=list)
    content_themes: List[str] = Field(default_factory=list)
    character_count: Optional[int] = None
    details: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("input_excerpt")
    @classmethod
    def truncate_excerpt(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value[:INPUT_EXCERPT_LENGTH]


@runtime_checkable
class AuditStore(Protocol):
    """Anything that can persist an audit entry."""

    async def create(self, entry: AuditLogEntry) -> None: ...


class InMemoryAuditStore:
    """Keeps entries in a list; useful for tests and one-off scripts."""

    def __init__(self):
        self.entries: List[AuditLogEntry] = []

    async def create(self, entry: AuditLogEntry) -> None:
        self.entries.append(entry)


class JsonLinesAuditStore:
    """
    Append-only JSON lines audit file.

    Each entry is written as one JSON object per line, so the file can be
    tailed, grepped or loaded line by line. Parent directories are created on
    first write.

    Example:
        store = JsonLinesAuditStore("logs/ai_logs.jsonl")
        await store.create(entry)
        history = store.read_entries()
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _append(self, line: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(line + "\n")

    async def create(self, entry: AuditLogEntry) -> None:
        await asyncio.to_thread(self._append, entry.model_dump_json())

    def read_entries(self) -> List[AuditLogEntry]:
        """
        Load every entry from the file.

        Blank and unparseable lines are skipped with a warning so one corrupt
        line does not hide the rest of the history.

        Returns:
            List[AuditLogEntry]: Entries in file order; empty if the file does
                not exist.
        """
        if not self.path.exists():
            return []

        entries: List[AuditLogEntry] = []
        with open(self.path, "r", encoding="utf-8") as f:
            for line_number, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    entries.append(AuditLogEntry.model_validate_json(line))
                except ValidationError as e:
                    logger.warning(
                        f"Skipping unreadable audit entry at {self.path}:{line_number}: {e}"
                    )
        return entries


class AuditLogger:
    """
    Writes audit entries without ever failing the caller.

    Attributes:
        store (AuditStore): Destination for entries.
        monitor (Optional[UsageMonitor]): Fed with every stored entry; a
            warning is logged whenever the monthly budget is exceeded.
    """

    def __init__(self, store: AuditStore, monitor: Optional[UsageMonitor] = None):
        self.store = store
        self.monitor = monitor

    async def record(self, entry: AuditLogEntry) -> bool:
        """
        Persist an entry.

        Returns:
            bool: True when the store accepted the entry, False when it failed.
                Failures are logged, never raised.
        """
        try:
            await self.store.create(entry)
        except Exception as e:
            error = LoggingError(
                f"Failed to write audit log entry: {e}",
                provider=entry.provider,
                cause=e,
            )
            logger.error(f"{error.message} ({entry.operation})", exc_info=True)
            return False

        logger.debug(f"Audit entry stored for {entry.operation} ({entry.model})")

        if self.monitor is not None:
            self.monitor.record(entry)
            if self.monitor.is_over_budget():
                logger.warning(
                    f"AI spending is over the monthly budget: "
                    f"${self.monitor.month_to_date_cost():.4f} of "
                    f"${self.monitor.monthly_budget:.2f}"
                )

        return True
