# /*
# Copyright 2026 The Machine E2E Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# */

from __future__ import annotations

import time

import pytest

from machine_e2e.errors import ClientError, FatalConditionError, MutationError, PollTimeoutError
from machine_e2e.poller import Fatal, Outcome, max_attempts, poll, retry_write


def scripted(*results):
    """Condition returning ``results`` in order, then repeating the last one."""
    calls = []

    def _condition():
        calls.append(len(calls))
        return results[min(len(calls) - 1, len(results) - 1)]

    _condition.calls = calls
    return _condition


@pytest.mark.parametrize("timeout,interval,expected", [
    (60, 1, 61),
    (10, 3, 5),
    (1, 2, 2),
])
def test_max_attempts(timeout, interval, expected):
    assert max_attempts(timeout, interval) == expected


def test_poll_done_on_first_attempt_does_not_sleep():
    sleeps = []
    condition = scripted(Outcome.DONE)
    poll(condition, timeout=5, interval=1, sleep=sleeps.append)
    assert len(condition.calls) == 1
    assert sleeps == []


def test_poll_retries_until_done():
    sleeps = []
    condition = scripted(Outcome.NOT_YET, Outcome.NOT_YET, Outcome.DONE)
    poll(condition, timeout=5, interval=1, sleep=sleeps.append)
    assert len(condition.calls) == 3
    assert sleeps == [1, 1]


def test_poll_timeout_is_bounded_by_attempts():
    sleeps = []
    condition = scripted(Outcome.NOT_YET)
    with pytest.raises(PollTimeoutError) as exc_info:
        poll(condition, timeout=5, interval=1, description="widgets", sleep=sleeps.append)
    assert len(condition.calls) == 6
    assert exc_info.value.attempts == 6
    assert exc_info.value.description == "widgets"
    assert "widgets" in str(exc_info.value)


def test_poll_deadline_is_wall_clock():
    timeout, interval, duration = 1.0, 0.1, 0.3
    calls = []

    def _slow():
        calls.append(1)
        time.sleep(duration)
        return Outcome.NOT_YET

    start = time.monotonic()
    with pytest.raises(PollTimeoutError) as exc_info:
        poll(_slow, timeout=timeout, interval=interval, sleep=time.sleep)
    elapsed = time.monotonic() - start

    assert len(calls) < max_attempts(timeout, interval)
    assert exc_info.value.attempts == len(calls)
    assert timeout <= elapsed <= timeout + interval + duration


def test_poll_fatal_stops_immediately():
    condition = scripted(Outcome.NOT_YET, Fatal(FatalConditionError("two clusters")), Outcome.DONE)
    with pytest.raises(FatalConditionError, match="two clusters"):
        poll(condition, timeout=5, interval=1, sleep=lambda _: None)
    assert len(condition.calls) == 2


def test_poll_propagates_condition_exceptions_unchanged():
    def _condition():
        raise KeyError("boom")

    with pytest.raises(KeyError):
        poll(_condition, timeout=5, interval=1, sleep=lambda _: None)


def test_poll_rejects_unknown_results():
    with pytest.raises(TypeError):
        poll(lambda: True, timeout=5, interval=1, sleep=lambda _: None)


@pytest.mark.parametrize("timeout,interval", [(0, 1), (5, 0), (-1, 1)])
def test_poll_rejects_non_positive_bounds(timeout, interval):
    with pytest.raises(ValueError):
        poll(lambda: Outcome.DONE, timeout=timeout, interval=interval)


def test_retry_write_retries_transient_errors():
    errors = [ClientError("connection refused"), ClientError("etcd leader changed")]
    writes = []

    def _write():
        writes.append(1)
        if errors:
            raise errors.pop(0)

    retry_write(_write, timeout=5, interval=1, sleep=lambda _: None)
    assert len(writes) == 3


def test_retry_write_fails_fast_on_permanent_errors():
    writes = []

    def _write():
        writes.append(1)
        raise ClientError("forbidden", transient=False)

    with pytest.raises(MutationError, match="delete thing failed"):
        retry_write(_write, timeout=5, interval=1, description="delete thing", sleep=lambda _: None)
    assert len(writes) == 1


def test_retry_write_times_out_on_persistent_transient_errors():
    def _write():
        raise ClientError("connection refused")

    with pytest.raises(PollTimeoutError):
        retry_write(_write, timeout=2, interval=1, sleep=lambda _: None)
