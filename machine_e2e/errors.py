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

"""Error taxonomy for convergence checks.

A failed scenario surfaces exactly one of these, so the caller can tell an
operator that is slow (:class:`PollTimeoutError`) from one that is broken
(:class:`FatalConditionError`) or a cluster with nothing to test
(:class:`PreconditionError`).
"""

from __future__ import annotations


class E2EError(Exception):
    """Base class for all machine_e2e errors."""


class ClientError(E2EError):
    """An object-store call failed.

    Attributes:
        transient: Whether retrying the same call may succeed.
        stderr: Raw error output from the backend, if any.
    """

    def __init__(self, message: str, transient: bool = True, stderr: str = "") -> None:
        super().__init__(message)
        self.transient = transient
        self.stderr = stderr


class NotFoundError(ClientError):
    """The requested object does not exist."""

    def __init__(self, message: str, stderr: str = "") -> None:
        super().__init__(message, transient=False, stderr=stderr)


class PollTimeoutError(E2EError):
    """A poll hit its deadline without the condition converging.

    Attributes:
        description: What was being waited for.
        timeout: Deadline in seconds.
        attempts: Number of times the condition was evaluated.
    """

    def __init__(self, description: str, timeout: float, attempts: int) -> None:
        super().__init__(
            f"timed out after {timeout:g}s waiting for {description} ({attempts} attempts)"
        )
        self.description = description
        self.timeout = timeout
        self.attempts = attempts


class FatalConditionError(E2EError):
    """The observed state is structurally impossible; polling stops at once."""


class MutationError(FatalConditionError):
    """A one-shot write against the cluster failed."""


class PreconditionError(E2EError):
    """A scenario could not select a valid subject before polling began."""
