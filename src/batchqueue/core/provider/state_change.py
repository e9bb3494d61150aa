# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

"""Bounded polling of a remote resource until its reported status reaches one of the target values.

Refresh functions return a (value, status) tuple. Statuses in `pending` keep the loop going, statuses in `target`
end it successfully and anything else is a failure. Wait time between refreshes grows exponentially starting from
100ms (never below `min_timeout`, capped at `MAX_REFRESH_INTERVAL_IN_SECS`) and the whole wait is bounded by `timeout`.
"""

import logging
import time
from typing import Any, Callable, Iterable, Optional, Set, Tuple

module_logger = logging.getLogger(__name__)

StateRefreshFunc = Callable[[], Tuple[Any, str]]

MIN_REFRESH_INTERVAL_IN_SECS = 0.1
MAX_REFRESH_INTERVAL_IN_SECS = 10.0


class WaitForStateError(Exception):
    def __init__(self, message: str, last_state: Optional[str] = None) -> None:
        super().__init__(message)
        self.last_state = last_state


class UnexpectedStateError(WaitForStateError):
    def __init__(self, state: str, expected: Iterable[str]) -> None:
        super().__init__(f"unexpected state {state!r}, wanted target {sorted(expected)!r}", state)
        self.expected = sorted(expected)


class WaitTimeoutError(WaitForStateError):
    def __init__(self, timeout: float, last_state: Optional[str], expected: Iterable[str]) -> None:
        super().__init__(
            f"timeout while waiting for state to become {sorted(expected)!r} (last state: {last_state!r}, timeout: {timeout}s)", last_state
        )
        self.timeout = timeout
        self.expected = sorted(expected)


class StateChangeConf:
    def __init__(
        self,
        pending: Iterable[str],
        target: Iterable[str],
        refresh: StateRefreshFunc,
        timeout: float,
        delay: float = 0.0,
        min_timeout: float = 0.0,
        sleep: Optional[Callable[[float], None]] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self.pending: Set[str] = set(pending)
        self.target: Set[str] = set(target)
        self.refresh = refresh
        self.timeout = timeout
        self.delay = delay
        self.min_timeout = min_timeout
        self._sleep = sleep or time.sleep
        self._clock = clock or time.monotonic

    def _next_interval(self, previous: Optional[float]) -> float:
        if previous is None:
            interval = MIN_REFRESH_INTERVAL_IN_SECS
        else:
            interval = min(previous * 2, MAX_REFRESH_INTERVAL_IN_SECS)
        return max(interval, self.min_timeout)

    def wait_for_state(self) -> Any:
        """Block until the refreshed state is in target.

        :return: the value returned by the refresh function when the target state is observed
        :raises UnexpectedStateError: when a state that is neither pending nor target is observed
        :raises WaitTimeoutError: when target is not reached within `timeout` seconds
        """
        deadline = self._clock() + self.timeout
        if self.delay > 0:
            self._sleep(self.delay)

        last_state: Optional[str] = None
        interval: Optional[float] = None
        while True:
            value, state = self.refresh()
            if state in self.target:
                module_logger.debug(f"Reached target state {state!r}")
                return value

            if state not in self.pending:
                error = UnexpectedStateError(state, self.target)
                if isinstance(value, Exception):
                    raise error from value
                raise error

            if state != last_state:
                module_logger.info(f"Waiting for state to become {sorted(self.target)!r} (current: {state!r})")
            last_state = state

            interval = self._next_interval(interval)
            remaining = deadline - self._clock()
            if remaining <= 0:
                raise WaitTimeoutError(self.timeout, last_state, self.target)
            self._sleep(min(interval, remaining))


def wait_for_state(
    refresh: StateRefreshFunc,
    pending: Iterable[str],
    target: Iterable[str],
    timeout: float,
    delay: float = 0.0,
    min_timeout: float = 0.0,
) -> Any:
    return StateChangeConf(pending, target, refresh, timeout, delay, min_timeout).wait_for_state()
