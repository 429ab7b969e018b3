"""
Shared helpers for CLI commands.

Commands receive the global ``--settings`` and ``--audit-log`` options through
the click context object and turn them into the loader, audit store and usage
monitor the orchestrators expect.
"""

import json
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import click
import yaml
from pydantic import BaseModel

from ..database.audit_log import JsonLinesAuditStore
from ..errors import ConfigurationError
from ..settings import SettingsLoader, file_settings_loader, read_settings_file
from ..utils.config import get_audit_log_path, get_settings_path
from ..utils.monitoring import UsageMonitor


class CliContext:
    """Values resolved from the global options, stored on ``ctx.obj``."""

    def __init__(self, settings_path: Optional[str] = None, audit_log: Optional[str] = None):
        self.settings_path = Path(settings_path) if settings_path else get_settings_path()
        self.audit_log_path = Path(audit_log) if audit_log else get_audit_log_path()

    @property
    def settings_loader(self) -> SettingsLoader:
        return file_settings_loader(self.settings_path)

    @property
    def audit_store(self) -> JsonLinesAuditStore:
        return JsonLinesAuditStore(self.audit_log_path)

    def usage_monitor(self) -> Optional[UsageMonitor]:
        """
        Monitor preloaded with the audit history when cost tracking is on.

        Returns None when settings are missing or cost tracking is disabled.
        """
        try:
            settings = read_settings_file(self.settings_path)
        except ConfigurationError:
            return None

        if settings is None or not settings.cost_tracking.enabled:
            return None

        monitor = UsageMonitor(monthly_budget=settings.cost_tracking.monthly_budget)
        monitor.record_many(self.audit_store.read_entries())
        return monitor


def get_cli_context(ctx: click.Context) -> CliContext:
    if not isinstance(ctx.obj, CliContext):
        ctx.obj = CliContext()
    return ctx.obj


def load_document(path: str) -> Dict[str, Any]:
    """Read a page or post document from a JSON or YAML file."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        click.echo(f"Error: Could not read document {path}: {e}", err=True)
        sys.exit(1)

    if not isinstance(data, dict):
        click.echo(f"Error: Document {path} must contain a JSON/YAML object", err=True)
        sys.exit(1)

    return data


def echo_json(data: Any) -> None:
    if isinstance(data, BaseModel):
        data = data.model_dump(mode="json")
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))
