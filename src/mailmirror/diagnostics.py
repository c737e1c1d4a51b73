# =============================================================================
# Diagnostics
# =============================================================================
# The error channel for the mailbox core.
#
# Every remote operation is wrapped at its boundary. When it fails, the
# exception is handed to an ErrorReporter instead of propagating: the
# reporter logs it and notifies whoever is listening (typically the UI, to
# show an out-of-band notification). Nothing reported here is fatal.
# =============================================================================

import logging
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ErrorReport:
    """
    One reported failure.

    Attributes:
        operation: Short name of the operation that failed ("refresh",
                   "load_next_page", "delete_messages", ...).
        error: The exception raised by the remote call.
    """
    operation: str
    error: BaseException

    @property
    def message(self) -> str:
        return f"{self.operation} failed: {self.error}"


# Type alias for error listeners
ErrorListener = Callable[[ErrorReport], None]


class ErrorReporter:
    """
    Collects failures from operation boundaries.

    Usage:
        >>> reporter = ErrorReporter()
        >>> reporter.add_listener(lambda report: print(report.message))
        >>> try:
        ...     await session.list_folders()
        ... except Exception as e:
        ...     reporter.report("refresh", e)
    """

    def __init__(self) -> None:
        self._listeners: list[ErrorListener] = []
        self.last: ErrorReport | None = None

    def add_listener(self, listener: ErrorListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: ErrorListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def report(self, operation: str, error: BaseException) -> ErrorReport:
        """Log a failure and notify listeners."""
        report = ErrorReport(operation=operation, error=error)
        self.last = report
        logger.error(report.message, exc_info=error)

        for listener in list(self._listeners):
            try:
                listener(report)
            except Exception as e:
                # A broken listener must not hide the original failure
                logger.warning(f"Error listener raised: {e}")

        return report
