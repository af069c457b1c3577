# src/prefill/core/notifications.py
"""Operator notifications (fire-and-forget).

The core reports provider failures and save/remove outcomes through a
Notifier. The presentation layer decides how to show them (toast, console
line); the core never waits for an acknowledgment.
"""

from typing import Protocol

from prefill.contracts import Severity
from prefill.core.logging import get_logger

logger = get_logger(__name__)


class Notifier(Protocol):
    """Protocol for notification sinks.

    Allows LoggingNotifier, NullNotifier, and presentation-layer notifiers
    to satisfy the interface without inheritance.
    """

    def notify(self, message: str, severity: Severity = Severity.SUCCESS) -> None:
        """Deliver a message to the operator."""
        ...


class LoggingNotifier:
    """Notifier that writes every message to the structured log.

    Default for library use where no presentation layer is attached.
    """

    def notify(self, message: str, severity: Severity = Severity.SUCCESS) -> None:
        if severity == Severity.ERROR:
            logger.error("notification", message=message, severity=str(severity))
        elif severity == Severity.WARNING:
            logger.warning("notification", message=message, severity=str(severity))
        else:
            logger.info("notification", message=message, severity=str(severity))


class NullNotifier:
    """Notifier that drops every message (batch scripts, benchmarks)."""

    def notify(self, message: str, severity: Severity = Severity.SUCCESS) -> None:
        pass
