# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

import pytest
from mock import MagicMock

from batchqueue.core.provider.state_change import (
    StateChangeConf,
    UnexpectedStateError,
    WaitForStateError,
    WaitTimeoutError,
)


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps = []

    def time(self) -> float:
        return self.now

    def sleep(self, secs: float) -> None:
        self.sleeps.append(secs)
        self.now += secs


class TestStateChangeConf:
    @pytest.fixture()
    def clock(self):
        return FakeClock()

    def _conf(self, clock, refresh, pending=("CREATING", "UPDATING"), target=("VALID",), timeout=600, delay=10, min_timeout=3):
        return StateChangeConf(
            pending=pending,
            target=target,
            refresh=refresh,
            timeout=timeout,
            delay=delay,
            min_timeout=min_timeout,
            sleep=clock.sleep,
            clock=clock.time,
        )

    def test_wait_returns_value_on_target(self, clock):
        refresh = MagicMock(side_effect=[("q", "CREATING"), ("q", "UPDATING"), ("q-final", "VALID")])

        assert self._conf(clock, refresh).wait_for_state() == "q-final"
        assert refresh.call_count == 3
        # initial delay, then intervals never below min_timeout
        assert clock.sleeps[0] == 10
        assert all(interval >= 3 for interval in clock.sleeps[1:])

    def test_wait_immediate_target_does_not_poll_again(self, clock):
        refresh = MagicMock(return_value=("q", "VALID"))

        assert self._conf(clock, refresh, delay=0).wait_for_state() == "q"
        assert refresh.call_count == 1
        assert clock.sleeps == []

    def test_wait_interval_backs_off_exponentially_with_cap(self, clock):
        refresh = MagicMock(side_effect=[("q", "UPDATING")] * 6 + [("q", "VALID")])

        self._conf(clock, refresh, delay=0, min_timeout=0).wait_for_state()

        assert clock.sleeps == [0.1, 0.2, 0.4, 0.8, 1.6, 3.2]

    def test_wait_interval_is_capped(self, clock):
        refresh = MagicMock(side_effect=[("q", "UPDATING")] * 4 + [("q", "VALID")])

        self._conf(clock, refresh, delay=0, min_timeout=3).wait_for_state()

        assert clock.sleeps == [3, 6, 10, 10]

    def test_wait_unexpected_state(self, clock):
        refresh = MagicMock(side_effect=[("q", "CREATING"), ("q", "INVALID")])

        with pytest.raises(UnexpectedStateError) as error:
            self._conf(clock, refresh).wait_for_state()

        assert error.value.last_state == "INVALID"
        assert error.value.expected == ["VALID"]
        assert isinstance(error.value, WaitForStateError)

    def test_wait_unexpected_state_chains_refresh_error(self, clock):
        refresh_error = RuntimeError("describe failed")
        refresh = MagicMock(return_value=(refresh_error, "failed"))

        with pytest.raises(UnexpectedStateError) as error:
            self._conf(clock, refresh).wait_for_state()

        assert error.value.__cause__ is refresh_error

    def test_wait_timeout(self, clock):
        refresh = MagicMock(return_value=("q", "UPDATING"))

        with pytest.raises(WaitTimeoutError) as error:
            self._conf(clock, refresh, timeout=10, delay=0, min_timeout=3).wait_for_state()

        assert error.value.last_state == "UPDATING"
        assert error.value.timeout == 10
        # last sleep is truncated to the deadline and the state is checked one last time
        assert clock.sleeps == [3, 6, 1]
        assert refresh.call_count == 4
        assert clock.now == 10

    def test_wait_timeout_reached_at_deadline_success(self, clock):
        refresh = MagicMock(side_effect=[("q", "UPDATING"), ("q", "UPDATING"), ("q", "VALID")])

        assert self._conf(clock, refresh, timeout=4, delay=0, min_timeout=3).wait_for_state() == "q"
        assert clock.sleeps == [3, 1]
