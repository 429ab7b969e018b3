"""
Shared stage tracking for generation orchestrators.

Every orchestrator walks the same state machine:

    config_load -> feature_gate -> provider_build -> provider_validate
        -> invoke -> post_process -> [log] -> return

GenerationRun records which stage a call is in and emits one GenerationEvent
each time a stage finishes, successfully or not. Events go to an injectable
sink; the default sink writes a single structured line through the package
logger, so a deployment can see exactly where a generation stopped without
reading a stack trace.

The helpers below implement the stages that are identical across operations:
loading and gating settings, building and validating the provider, auditing and
tagging the final result.

Python Learning Notes:
    - Enum members double as readable, typo-proof stage names
    - Callable type aliases document the shape of injected functions
    - Helper functions that take the run object keep orchestrators linear
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from ..database.audit_log import AuditLogEntry, AuditLogger, AuditStore
from ..errors import ConfigurationError, MetagenError
from ..models import GenerationMetadata, GenerationResult, OperationKind
from ..providers import AIProvider, ProviderConfig, ProviderFactory, create_provider
from ..settings import AiSettings, SettingsLoader, coerce_settings
from ..utils import get_logger
from ..utils.monitoring import UsageMonitor

logger = get_logger(__name__)

SETTINGS_NOT_FOUND = "AI Settings not found in database"
INVALID_PROVIDER_CONFIG = (
    "Invalid AI provider configuration. Please check your API key and settings."
)
UNKNOWN_ERROR = "Unknown error occurred"


class Stage(str, Enum):
    """Stages of a generation, in execution order."""

    CONFIG_LOAD = "config_load"
    FEATURE_GATE = "feature_gate"
    PROVIDER_BUILD = "provider_build"
    PROVIDER_VALIDATE = "provider_validate"
    INVOKE = "invoke"
    POST_PROCESS = "post_process"
    LOG = "log"
    RETURN = "return"


@dataclass
class GenerationEvent:
    """
    Outcome of one stage of one generation.

    Attributes:
        operation (str): Operation kind value, e.g. "alt-tag".
        stage (Stage): The stage that finished.
        success (bool): Whether the stage completed.
        duration_ms (int): Time spent in the stage (whole call for RETURN).
        error (Optional[str]): Failure reason when success is False.
        details (Dict[str, Any]): Stage-specific extras such as the model.
    """

    operation: str
    stage: Stage
    success: bool
    duration_ms: int
    error: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)


EventSink = Callable[[GenerationEvent], None]


def log_event_sink(event: GenerationEvent) -> None:
    """Default sink: one log line per event, warning level for failures."""
    message = (
        f"[{event.operation}] stage={event.stage.value} "
        f"success={event.success} duration_ms={event.duration_ms}"
    )
    if event.details:
        message += " " + " ".join(f"{key}={value}" for key, value in event.details.items())
    if event.error:
        message += f" error={event.error!r}"

    if event.success:
        logger.info(message)
    else:
        logger.warning(message)


def _now() -> float:
    return time.monotonic()


class GenerationRun:
    """
    Tracks the current stage of one generation and emits stage events.

    Example:
        run = GenerationRun(OperationKind.ALT_TAG)
        run.enter(Stage.CONFIG_LOAD)
        settings = await fetch_settings(loader)
        run.complete()

    Attributes:
        operation (str): Operation kind value.
        stage (Stage): Stage currently executing.
        events (List[GenerationEvent]): Every event emitted so far.
    """

    def __init__(self, operation: OperationKind, event_sink: Optional[EventSink] = None):
        self.operation = OperationKind(operation).value
        self.sink = event_sink or log_event_sink
        self.stage = Stage.CONFIG_LOAD
        self.events: List[GenerationEvent] = []
        self._started = _now()
        self._stage_started = self._started

    @property
    def elapsed_ms(self) -> int:
        """Milliseconds since the run started."""
        return int((_now() - self._started) * 1000)

    def enter(self, stage: Stage) -> None:
        self.stage = stage
        self._stage_started = _now()

    def complete(self, **details: Any) -> None:
        """Emit a success event for the current stage."""
        self._emit(success=True, error=None, details=details)

    def fail(self, error: str, **details: Any) -> None:
        """Emit a failure event for the current stage."""
        self._emit(success=False, error=error, details=details)

    def finish(self, result_success: bool, error: Optional[str] = None) -> None:
        """Emit the terminal RETURN event covering the whole call."""
        self.stage = Stage.RETURN
        self._stage_started = self._started
        self._emit(success=result_success, error=error, details={})

    def _emit(self, success: bool, error: Optional[str], details: Dict[str, Any]) -> None:
        event = GenerationEvent(
            operation=self.operation,
            stage=self.stage,
            success=success,
            duration_ms=int((_now() - self._stage_started) * 1000),
            error=error,
            details=details,
        )
        self.events.append(event)
        try:
            self.sink(event)
        except Exception:
            # A broken sink must not break generation
            logger.warning("Generation event sink raised", exc_info=True)


async def fetch_settings(loader: SettingsLoader) -> AiSettings:
    """
    Load the settings record once for this call.

    Raises:
        ConfigurationError: The loader found no record or the record is invalid.
    """
    settings = coerce_settings(await loader())
    if settings is None:
        raise ConfigurationError(SETTINGS_NOT_FOUND)
    return settings


async def load_gated_settings(
    run: GenerationRun,
    loader: SettingsLoader,
    is_enabled: Callable[[AiSettings], bool],
    disabled_message: str,
) -> AiSettings:
    """Run the CONFIG_LOAD and FEATURE_GATE stages."""
    run.enter(Stage.CONFIG_LOAD)
    settings = await fetch_settings(loader)
    run.complete()

    run.enter(Stage.FEATURE_GATE)
    if not is_enabled(settings):
        raise ConfigurationError(disabled_message)
    run.complete()

    return settings


def build_provider(
    run: GenerationRun,
    config: ProviderConfig,
    factory: Optional[ProviderFactory] = None,
) -> AIProvider:
    """
    Run the PROVIDER_BUILD and PROVIDER_VALIDATE stages.

    Raises:
        ConfigurationError: Unknown or unimplemented provider, or a
            configuration the provider rejects.
    """
    run.enter(Stage.PROVIDER_BUILD)
    provider = (factory or create_provider)(config)
    run.complete(provider=config.provider, model=config.model)

    run.enter(Stage.PROVIDER_VALIDATE)
    if not provider.validate_config(config):
        raise ConfigurationError(INVALID_PROVIDER_CONFIG, provider=config.provider)
    run.complete()

    return provider


def error_message(error: BaseException) -> str:
    """Readable message for any exception caught at an orchestrator boundary."""
    if isinstance(error, MetagenError):
        return error.message
    return str(error) or UNKNOWN_ERROR


def handle_failure(run: GenerationRun, error: BaseException) -> str:
    """
    Record a failure in the current stage and return its message.

    MetagenError subclasses are expected outcomes; anything else is logged
    with its traceback before being turned into a message.
    """
    message = error_message(error)
    if not isinstance(error, MetagenError):
        logger.error(
            f"Unexpected error during {run.operation} ({run.stage.value}): {message}",
            exc_info=error,
        )
    run.fail(message)
    return message


def should_audit(settings: Optional[AiSettings], success: bool, log_generations: bool) -> bool:
    if settings is None:
        return False
    if success:
        return log_generations
    return settings.log_failed_generations


async def record_audit(
    run: GenerationRun,
    audit_store: Optional[AuditStore],
    entry: AuditLogEntry,
    monitor: Optional[UsageMonitor] = None,
) -> bool:
    """
    Run the LOG stage. Never raises; a failed write leaves the result untouched.

    Returns:
        bool: True when the entry was stored.
    """
    if audit_store is None:
        return False

    run.enter(Stage.LOG)
    stored = await AuditLogger(audit_store, monitor).record(entry)
    if stored:
        run.complete()
    else:
        run.fail("audit log write failed")
    return stored


def failed_result(
    run: GenerationRun, message: str, metadata: Optional[GenerationMetadata] = None
) -> GenerationResult:
    """Emit the RETURN event for a failure and build the tagged result."""
    run.finish(False, message)
    return GenerationResult.failure(message, metadata=metadata)
