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

import pytest

from machine_e2e.errors import PollTimeoutError
from machine_e2e.orchestrator import display_results, run_scenario, run_scenarios

from .conftest import FakeClient


@pytest.fixture
def registry(monkeypatch):
    ran = []

    def passing(ctx):
        ran.append("passing")

    def timing_out(ctx):
        ran.append("timing-out")
        raise PollTimeoutError("something", 5, 6)

    def crashing(ctx):
        ran.append("crashing")
        raise RuntimeError("[bold]unexpected[/bold]")

    monkeypatch.setattr("machine_e2e.orchestrator.SCENARIOS", {
        "passing": passing,
        "timing-out": timing_out,
        "crashing": crashing,
    })
    return ran


@pytest.fixture
def ctx(make_ctx):
    return make_ctx(FakeClient())


def test_run_scenario_records_expected_failure(registry, ctx):
    result = run_scenario(ctx, "timing-out")
    assert not result.passed
    assert isinstance(result.error, PollTimeoutError)


def test_run_scenario_records_unexpected_exception(registry, ctx):
    result = run_scenario(ctx, "crashing")
    assert isinstance(result.error, RuntimeError)


def test_run_scenarios_stops_after_first_failure(registry, ctx):
    results = run_scenarios(ctx, ["passing", "timing-out", "crashing"])
    assert [r.name for r in results] == ["passing", "timing-out"]
    assert [r.passed for r in results] == [True, False]
    assert registry == ["passing", "timing-out"]


def test_run_scenarios_keep_going(registry, ctx):
    results = run_scenarios(ctx, ["timing-out", "crashing", "passing"], fail_fast=False)
    assert [r.passed for r in results] == [False, False, True]


def test_run_scenarios_parallel_preserves_order(registry, ctx):
    results = run_scenarios(ctx, ["crashing", "passing", "timing-out"], parallel=True)
    assert [r.name for r in results] == ["crashing", "passing", "timing-out"]
    assert sorted(registry) == ["crashing", "passing", "timing-out"]


def test_run_scenarios_rejects_unknown_names(registry, ctx):
    with pytest.raises(KeyError, match="nope"):
        run_scenarios(ctx, ["passing", "nope"])
    assert registry == []


def test_run_scenarios_empty(registry, ctx):
    assert run_scenarios(ctx, []) == []


def test_display_results_escapes_markup(registry, ctx):
    display_results([run_scenario(ctx, "crashing"), run_scenario(ctx, "passing")])
