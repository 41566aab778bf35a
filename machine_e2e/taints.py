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

"""Taint key-set comparison. Values and effects never take part."""

from __future__ import annotations

from collections.abc import Iterable

from machine_e2e.constants import TAINT_EFFECT_NO_SCHEDULE


def make_taint(key: str, value: str = "true", effect: str = TAINT_EFFECT_NO_SCHEDULE) -> dict:
    return {"key": key, "value": value, "effect": effect}


def taint_keys(taints: Iterable[dict]) -> set[str]:
    return {taint["key"] for taint in taints if taint.get("key")}


def missing_taint_keys(expected: Iterable[str], observed: Iterable[str]) -> set[str]:
    """Expected keys absent from ``observed``. Extra observed keys are ignored."""
    return set(expected) - set(observed)


def taint_keys_converged(expected: Iterable[str], observed: Iterable[str]) -> bool:
    """True once every expected key is among the observed keys."""
    return not missing_taint_keys(expected, observed)


def upsert_taint(taints: Iterable[dict], taint: dict) -> list[dict]:
    """Return ``taints`` with ``taint`` appended, replacing any taint with the same key."""
    kept = [dict(t) for t in taints if t.get("key") != taint["key"]]
    return [*kept, dict(taint)]
