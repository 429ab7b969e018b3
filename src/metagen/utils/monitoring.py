"""
Usage and cost accounting over audit log entries.

Every audited generation carries its token count, estimated cost and duration.
UsageMonitor aggregates those entries into the figures editors care about:
how many generations ran, how many failed, what they cost and whether this
month's spending is over the configured budget.

The monitor focuses on:
    - Success/failure counts and rates
    - Token and cost totals, overall and per operation/provider
    - Month-to-date cost against an optional monthly budget
    - Human-readable duration formatting for reports

Python Learning Notes:
    - collections.defaultdict creates missing dictionary entries on first access
    - datetime.fromisoformat() parses the ISO timestamps stored in entries
    - TYPE_CHECKING imports are only evaluated by type checkers, which avoids
      a circular import at runtime
"""

from collections import defaultdict
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional

if TYPE_CHECKING:
    from ..database.audit_log import AuditLogEntry


def _parse_timestamp(value: str) -> Optional[datetime]:
    try:
        parsed = datetime.fromisoformat(value)
    except (TypeError, ValueError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class UsageMonitor:
    """
    Aggregates audit log entries into usage statistics.

    The monitor can be fed live (AuditLogger calls ``record`` after every
    successful write) or from history (``record_many`` over the entries of a
    JSON lines audit file).

    Attributes:
        monthly_budget (Optional[float]): Spending limit in US dollars for the
            current calendar month (UTC). None disables budget checks.
        entries (List[AuditLogEntry]): Entries recorded so far.

    Example:
        monitor = UsageMonitor(monthly_budget=25.0)
        monitor.record_many(store.read_entries())

        stats = monitor.get_statistics()
        print(f"Success rate: {stats['success_rate']:.1f}%")
        if monitor.is_over_budget():
            print("Monthly AI budget exceeded")

    Python Learning Notes:
        - Instance variables track state across method calls
        - Division by zero checks keep rates defined for an empty monitor
    """

    def __init__(self, monthly_budget: Optional[float] = None):
        self.monthly_budget = monthly_budget
        self.entries: List["AuditLogEntry"] = []

    def record(self, entry: "AuditLogEntry") -> None:
        """Record one audited generation."""
        self.entries.append(entry)

    def record_many(self, entries: Iterable["AuditLogEntry"]) -> None:
        for entry in entries:
            self.record(entry)

    def get_statistics(self) -> Dict[str, Any]:
        """
        Get usage statistics over every recorded entry.

        Returns:
            Dict[str, Any]: Dictionary containing:
                - total_generations: Count of recorded entries
                - successful / failed: Counts by outcome
                - success_rate: Percentage of successful entries
                - total_tokens: Sum of tokens used
                - total_cost: Sum of estimated costs in US dollars
                - avg_duration_ms: Mean duration of entries that report one
                - by_operation / by_provider: {name: {count, tokens, cost}}
        """
        total = len(self.entries)
        successful = sum(1 for entry in self.entries if entry.success)
        durations = [entry.duration_ms for entry in self.entries if entry.duration_ms]

        by_operation: Dict[str, Dict[str, Any]] = defaultdict(
            lambda: {"count": 0, "tokens": 0, "cost": 0.0}
        )
        by_provider: Dict[str, Dict[str, Any]] = defaultdict(
            lambda: {"count": 0, "tokens": 0, "cost": 0.0}
        )

        for entry in self.entries:
            for bucket in (by_operation[entry.operation], by_provider[entry.provider]):
                bucket["count"] += 1
                bucket["tokens"] += entry.tokens_used
                bucket["cost"] += entry.cost

        return {
            "total_generations": total,
            "successful": successful,
            "failed": total - successful,
            "success_rate": (successful / total * 100) if total > 0 else 0,
            "total_tokens": sum(entry.tokens_used for entry in self.entries),
            "total_cost": sum(entry.cost for entry in self.entries),
            "avg_duration_ms": (sum(durations) / len(durations)) if durations else 0,
            "by_operation": dict(by_operation),
            "by_provider": dict(by_provider),
        }

    def month_to_date_cost(self, now: Optional[datetime] = None) -> float:
        """Sum the cost of entries in the calendar month (UTC) containing ``now``."""
        now = now or datetime.now(timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        now = now.astimezone(timezone.utc)

        total = 0.0
        for entry in self.entries:
            timestamp = _parse_timestamp(entry.timestamp)
            if timestamp is None:
                continue
            timestamp = timestamp.astimezone(timezone.utc)
            if (timestamp.year, timestamp.month) == (now.year, now.month):
                total += entry.cost
        return total

    def is_over_budget(self, now: Optional[datetime] = None) -> bool:
        """True when a budget is set and month-to-date cost exceeds it."""
        if self.monthly_budget is None:
            return False
        return self.month_to_date_cost(now) > self.monthly_budget

    def format_report(self, now: Optional[datetime] = None) -> str:
        """Render the statistics as a short plain-text report."""
        stats = self.get_statistics()
        lines = [
            f"Generations: {stats['total_generations']} "
            f"({stats['successful']} succeeded, {stats['failed']} failed)",
            f"Success rate: {stats['success_rate']:.1f}%",
            f"Tokens used: {stats['total_tokens']}",
            f"Estimated cost: ${stats['total_cost']:.4f}",
            f"Average duration: {self._format_duration(stats['avg_duration_ms'])}",
        ]

        for operation, bucket in sorted(stats["by_operation"].items()):
            lines.append(
                f"  {operation}: {bucket['count']} calls, "
                f"{bucket['tokens']} tokens, ${bucket['cost']:.4f}"
            )

        if self.monthly_budget is not None:
            spent = self.month_to_date_cost(now)
            lines.append(
                f"Month to date: ${spent:.4f} of ${self.monthly_budget:.2f} budget"
            )

        return "\n".join(lines)

    def _format_duration(self, milliseconds: float) -> str:
        """
        Format a duration in milliseconds as "850ms", "4.2s" or "2m 5s".

        Python Learning Notes:
            - Integer division // discards remainder
            - Modulo % gives remainder after division
        """
        if milliseconds < 1000:
            return f"{milliseconds:.0f}ms"

        seconds = milliseconds / 1000
        if seconds < 60:
            return f"{seconds:.1f}s"

        minutes = int(seconds // 60)
        secs = int(seconds % 60)
        return f"{minutes}m {secs}s"
