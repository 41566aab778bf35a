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

"""Bounded-retry polling of condition functions."""

from __future__ import annotations

import enum
import math
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Union

from tenacity import RetryError, Retrying, retry_if_result, stop_after_attempt, stop_after_delay, wait_fixed

from machine_e2e import logger
from machine_e2e.constants import DEFAULT_POLL_INTERVAL_SECONDS
from machine_e2e.errors import ClientError, MutationError, PollTimeoutError


class Outcome(enum.Enum):
    """Non-fatal results of a single condition evaluation."""

    NOT_YET = "not-yet"
    DONE = "done"


@dataclass(frozen=True)
class Fatal:
    """Condition result that stops polling and raises ``error``."""

    error: Exception


ConditionResult = Union[Outcome, Fatal]
Condition = Callable[[], ConditionResult]


class Tier(enum.Enum):
    """Deadline tiers, ordered by the operator latency they allow for.

    SHORT: service availability and object existence.
    MEDIUM: machine replacement provisioning.
    LONG: node deprovision, reprovision and join; deployment recreation.
    """

    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


def max_attempts(timeout: float, interval: float) -> int:
    """Upper bound on condition evaluations for a poll.

    Args:
        timeout: Deadline in seconds.
        interval: Seconds between attempts.

    Returns:
        ``ceil(timeout / interval) + 1``; the extra attempt is the immediate one.
    """
    return math.ceil(timeout / interval) + 1


def poll(
    condition: Condition,
    timeout: float,
    interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
    description: str = "condition",
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """Evaluate ``condition`` until it is done, fatal, or the deadline passes.

    The first evaluation happens immediately, then every ``interval`` seconds.

    Args:
        condition: Zero-argument callable returning an :class:`Outcome` or :class:`Fatal`.
        timeout: Deadline in seconds, measured from the first evaluation.
        interval: Seconds to sleep between evaluations.
        description: Human readable name used in logs and the timeout error.
        sleep: Sleep function, injectable for tests.

    Raises:
        PollTimeoutError: If the condition never reported done.
        Exception: The error carried by a :class:`Fatal` result, or anything
            the condition itself raised.
    """
    if interval <= 0 or timeout <= 0:
        raise ValueError("poll interval and timeout must be positive")

    retrying = Retrying(
        stop=stop_after_delay(timeout) | stop_after_attempt(max_attempts(timeout, interval)),
        wait=wait_fixed(interval),
        retry=retry_if_result(lambda result: result is Outcome.NOT_YET),
        sleep=sleep,
    )
    logger.debug("Polling for %s (timeout=%ss, interval=%ss)", description, timeout, interval)
    try:
        result = retrying(condition)
    except RetryError as err:
        attempts = err.last_attempt.attempt_number
        logger.error("Gave up waiting for %s after %d attempts", description, attempts)
        raise PollTimeoutError(description, timeout, attempts) from None

    if isinstance(result, Fatal):
        logger.error("Fatal condition while waiting for %s: %s", description, result.error)
        raise result.error
    if result is not Outcome.DONE:
        raise TypeError(f"condition for {description} returned {result!r}, expected Outcome or Fatal")


def retry_write(
    write: Callable[[], object],
    timeout: float,
    interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
    description: str = "write",
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """Issue a write, retrying only while it fails with a transient client error.

    Args:
        write: Zero-argument callable performing the write.
        timeout: Deadline in seconds for the write to be accepted.
        interval: Seconds between attempts.
        description: Human readable name used in logs and errors.
        sleep: Sleep function, injectable for tests.

    Raises:
        MutationError: If the write fails with a non-transient error.
        PollTimeoutError: If transient failures persist past the deadline.
    """
    def _attempt() -> ConditionResult:
        try:
            write()
        except ClientError as err:
            if not err.transient:
                return Fatal(MutationError(f"{description} failed: {err}"))
            logger.error("%s failed: %s, retrying...", description, err)
            return Outcome.NOT_YET
        return Outcome.DONE

    poll(_attempt, timeout, interval=interval, description=description, sleep=sleep)
