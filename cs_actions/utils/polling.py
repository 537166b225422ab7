"""Polling of remote tasks until they reach a final state."""

import time
from typing import Callable, Optional, Tuple, TypeVar

import structlog

from ..models.schemas import PollingConfig

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class PollingHandler:
    """Re-checks a remote task at a fixed interval, up to a number of attempts."""

    def __init__(self, config: PollingConfig, sleep: Callable[[float], None] = time.sleep):
        self.config = config
        self._sleep = sleep

    def poll(
        self,
        check: Callable[[], T],
        is_done: Callable[[T], bool],
        operation_name: str = "operation",
    ) -> Tuple[Optional[T], bool]:
        """
        Call ``check`` until ``is_done`` accepts its value.

        The handler waits ``interval`` seconds before every attempt.

        Returns:
            The last value returned by ``check`` and whether polling timed out
        """
        last_value = None

        for attempt in range(1, self.config.max_attempts + 1):
            self._sleep(self.config.interval)
            last_value = check()

            if is_done(last_value):
                logger.debug("Polling finished", operation=operation_name, attempt=attempt)
                return last_value, False

            logger.debug("Task not finished yet", operation=operation_name, attempt=attempt)

        logger.warning("Polling timed out", operation=operation_name, attempts=self.config.max_attempts)
        return last_value, True
