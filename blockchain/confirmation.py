"""
Confirmation Poller
Waits for on-chain state to become visible instead of sleeping blindly
"""

import asyncio
from typing import Any, Awaitable, Callable, List, Optional
from loguru import logger


class ConfirmationTimeout(Exception):
    """Raised when a check never succeeds within the attempt budget"""


class ConfirmationPoller:
    """
    Bounded poll-until-confirmed loop with exponential backoff

    The first check only runs after initial_delay, so a caller always
    gets at least that much settle time before its next chain call.
    """

    def __init__(
        self,
        initial_delay: float = 3.0,
        interval: float = 1.0,
        backoff: float = 2.0,
        max_interval: float = 10.0,
        max_attempts: int = 10
    ):
        """
        Initialize poller

        Args:
            initial_delay: Seconds to wait before the first check
            interval: Seconds between the first and second check
            backoff: Multiplier applied to the interval after each miss
            max_interval: Upper bound on any single interval
            max_attempts: Number of checks before giving up
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        self.initial_delay = initial_delay
        self.interval = interval
        self.backoff = backoff
        self.max_interval = max_interval
        self.max_attempts = max_attempts

    def delays(self) -> List[float]:
        """
        Sleep schedule: one entry before each check

        Returns:
            List of delays in seconds (length == max_attempts)
        """
        schedule = [self.initial_delay]
        interval = self.interval

        for _ in range(self.max_attempts - 1):
            schedule.append(min(interval, self.max_interval))
            interval *= self.backoff

        return schedule

    async def wait(
        self,
        check: Callable[[], Awaitable[Optional[Any]]],
        description: str = "confirmation",
        min_delay: float = 0.0
    ) -> Any:
        """
        Poll until check returns something other than None

        Args:
            check: Async callable, None means "not yet"
            description: Label used in logs and in the timeout error
            min_delay: Floor for the wait before the first check

        Returns:
            First non-None check result
        """
        delays = self.delays()
        delays[0] = max(delays[0], min_delay)

        for attempt, delay in enumerate(delays, start=1):
            await asyncio.sleep(delay)

            result = await check()

            if result is not None:
                logger.debug(f"{description} confirmed after {attempt} attempt(s)")
                return result

            logger.debug(f"{description} not confirmed yet ({attempt}/{self.max_attempts})")

        raise ConfirmationTimeout(
            f"{description} not confirmed after {self.max_attempts} attempts"
        )
