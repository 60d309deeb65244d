"""
Scheduling Service Base

Shared plumbing for services that read a user's follow-up data through a
request-scoped session: a named logger, per-operation call metrics that
feed health checks, and the session guard used before opening a unit of
work. Errors raised inside a timed operation are counted and re-raised
unchanged so the API layer can map them to status codes.
"""

import logging
import time
from typing import Optional, Dict, Any
from abc import ABC, abstractmethod
from sqlalchemy.orm import Session

from personal_crm.core.exceptions import ConfigurationException

# Ranking or expansion runs slower than this are logged as warnings
SLOW_OPERATION_MS = 5000


class BaseService(ABC):
    """
    Base for services that rank contacts and expand occasions.

    Subclasses pass a logger name, wrap each public entry point in
    `_timed_operation`, and report `get_metrics()` from `health_check`.
    """

    def __init__(self, db: Optional[Session] = None, service_name: Optional[str] = None):
        """
        Args:
            db: Session the service reads contacts, interactions and occasions through
            service_name: Logger name (defaults to class name)
        """
        self.db = db
        self.service_name = service_name or self.__class__.__name__
        self.logger = logging.getLogger(self.service_name)
        self._metrics: Dict[str, Any] = {
            "total_calls": 0,
            "total_errors": 0,
            "total_time_ms": 0
        }
        self._calls_by_operation: Dict[str, int] = {}

    # ========================================================================
    # Metrics
    # ========================================================================

    def _record_call(self, operation: str, duration_ms: int, success: bool = True):
        self._metrics["total_calls"] += 1
        self._metrics["total_time_ms"] += duration_ms
        self._calls_by_operation[operation] = self._calls_by_operation.get(operation, 0) + 1

        if not success:
            self._metrics["total_errors"] += 1
            self.logger.debug(f"{operation} failed after {duration_ms}ms")

        if duration_ms > SLOW_OPERATION_MS:
            self.logger.warning(f"Slow {operation}: {duration_ms}ms")

    def get_metrics(self) -> Dict[str, Any]:
        """
        Call counts and timings since the service was created.

        Returns:
            Totals plus `avg_time_ms`, `success_rate` (percent) and
            `calls_by_operation`
        """
        calls = self._metrics["total_calls"]
        return {
            **self._metrics,
            "avg_time_ms": self._metrics["total_time_ms"] / calls if calls else 0,
            "success_rate": (calls - self._metrics["total_errors"]) / calls * 100 if calls else 100,
            "calls_by_operation": dict(self._calls_by_operation),
        }

    # ========================================================================
    # Session access
    # ========================================================================

    def _ensure_db(self) -> Session:
        """
        The bound session.

        Raises:
            ConfigurationException: If the service was built without one
        """
        if self.db is None:
            raise ConfigurationException(f"{self.service_name} needs a database session")
        return self.db

    def _timed_operation(self, operation_name: str) -> "TimedOperation":
        """
        Time a block and record it under `operation_name`.

            with self._timed_operation("recompute_priorities"):
                ...
        """
        return TimedOperation(self, operation_name)

    @abstractmethod
    def health_check(self) -> Dict[str, Any]:
        """Status dict with a `status` key and service-specific `details`."""


class TimedOperation:
    """Records one call's duration and outcome on the owning service."""

    def __init__(self, service: BaseService, operation_name: str):
        self.service = service
        self.operation_name = operation_name
        self.start_time = None

    def __enter__(self):
        self.start_time = time.time()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration_ms = int((time.time() - self.start_time) * 1000)
        self.service._record_call(self.operation_name, duration_ms, success=exc_type is None)
        return False
