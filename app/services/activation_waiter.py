from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, Collection, Optional

from app.services.errors import ActivationFailedError, ActivationTimeoutError, InvalidInputError

logger = logging.getLogger(__name__)

PollFn = Callable[[str], Awaitable[str]]
Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[None]]


class ActivationWaiter:
    """Poll a remote resource until it leaves its pending state.

    The wait moves Pending -> ready (returns the observed state), Pending -> failed
    (raises ActivationFailedError) or Pending -> timed out (raises ActivationTimeoutError).
    The deadline also bounds each individual poll call, so a slow poll cannot stretch it.
    Errors raised by the poll function propagate on the first occurrence.

    `clock` and `sleep` are injectable so tests can drive the loop without real waiting.
    """

    _DEFAULT_MAX_WAIT_SECONDS: float = 180.0
    _DEFAULT_POLL_INTERVAL_SECONDS: float = 2.0

    def __init__(
        self,
        *,
        max_wait_seconds: float = _DEFAULT_MAX_WAIT_SECONDS,
        poll_interval_seconds: float = _DEFAULT_POLL_INTERVAL_SECONDS,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        if max_wait_seconds <= 0:
            raise InvalidInputError("max_wait_seconds must be positive")
        if poll_interval_seconds <= 0:
            raise InvalidInputError("poll_interval_seconds must be positive")
        self._max_wait_seconds = max_wait_seconds
        self._poll_interval_seconds = poll_interval_seconds
        self._clock = clock
        self._sleep = sleep

    @property
    def max_wait_seconds(self) -> float:
        return self._max_wait_seconds

    @property
    def poll_interval_seconds(self) -> float:
        return self._poll_interval_seconds

    def _timeout(self, resource_name: str, waited: float, last_state: Optional[str]) -> ActivationTimeoutError:
        return ActivationTimeoutError(
            f"still {last_state or 'unknown'} after {waited:.1f}s",
            operation="wait",
            resource_name=resource_name,
        )

    async def wait(
        self,
        resource_name: str,
        poll: PollFn,
        *,
        ready_states: Collection[str],
        failure_states: Collection[str] = (),
        max_wait_seconds: Optional[float] = None,
    ) -> str:
        budget = self._max_wait_seconds if max_wait_seconds is None else max_wait_seconds
        started = self._clock()
        deadline = started + budget
        last_state: Optional[str] = None
        attempts = 0

        while True:
            remaining = deadline - self._clock()
            if remaining <= 0:
                raise self._timeout(resource_name, self._clock() - started, last_state)

            try:
                state = await asyncio.wait_for(poll(resource_name), timeout=remaining)
            except asyncio.TimeoutError:
                raise self._timeout(resource_name, self._clock() - started, last_state) from None

            attempts += 1
            last_state = state
            logger.debug("Poll %d for %s: state=%s", attempts, resource_name, state)

            if state in ready_states:
                logger.info("%s reached %s after %d poll(s)", resource_name, state, attempts)
                return state
            if state in failure_states:
                raise ActivationFailedError(
                    f"entered terminal state {state}",
                    operation="wait",
                    resource_name=resource_name,
                )

            remaining = deadline - self._clock()
            if remaining <= 0:
                raise self._timeout(resource_name, self._clock() - started, last_state)
            await self._sleep(min(self._poll_interval_seconds, remaining))
