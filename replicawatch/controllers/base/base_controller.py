"""Base controller for replicawatch data collection.

Controllers own the cluster connection and expose one collection cycle
at a time to the poll scheduler.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod

from replicawatch.models.core.snapshot_info import SweepResult

logger = logging.getLogger(__name__)


class AsyncControllerMixin:
    """Mixin providing load timing for controllers."""

    def __init__(self) -> None:
        """Initialize the async controller mixin."""
        self._load_start_time: float | None = None

    def _start_load_timer(self) -> None:
        self._load_start_time = time.monotonic()

    def _elapsed_ms(self) -> float:
        """Milliseconds since the last ``_start_load_timer`` call (0 if never started)."""
        if self._load_start_time is None:
            return 0.0
        return (time.monotonic() - self._load_start_time) * 1000.0


class BaseController(AsyncControllerMixin, ABC):
    """Base controller class.

    Subclasses should implement the abstract methods to provide
    specific data fetching functionality.
    """

    @abstractmethod
    async def check_connection(self) -> bool:
        """Check that the data source is usable.

        Returns:
            True if the connection is available

        Raises:
            FatalConnectionError: If it is not
        """
        ...

    @abstractmethod
    async def collect(self, cycle: int = 0) -> SweepResult:
        """Run one full collection cycle.

        Returns:
            The cycle's sweep result
        """
        ...
