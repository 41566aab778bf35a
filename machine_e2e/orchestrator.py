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

"""Orchestration functions that run named scenarios and report results."""

from __future__ import annotations

import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from machine_e2e import console, logger
from machine_e2e.config import ScenarioContext
from machine_e2e.errors import E2EError
from machine_e2e.scenarios import SCENARIOS


@dataclass(frozen=True)
class ScenarioResult:
    """Terminal outcome of one scenario.

    Attributes:
        name: Registered scenario name.
        error: The error that ended the scenario, or None on success.
        elapsed: Wall-clock seconds the scenario took.
    """

    name: str
    error: Exception | None
    elapsed: float

    @property
    def passed(self) -> bool:
        return self.error is None


def run_scenario(ctx: ScenarioContext, name: str) -> ScenarioResult:
    """Run one registered scenario and capture its outcome.

    Args:
        ctx: Scenario context.
        name: Registered scenario name.

    Returns:
        The scenario's result; unexpected exceptions are recorded, not raised.
    """
    console.print(Panel.fit(f"Scenario: {name}", style="bold blue"))
    start = time.monotonic()
    try:
        SCENARIOS[name](ctx)
    except E2EError as err:
        console.print(f"[red]\u274c {name}: {type(err).__name__}: {escape(str(err))}[/red]")
        return ScenarioResult(name, err, time.monotonic() - start)
    except Exception as err:
        logger.exception("Scenario %s raised an unexpected error", name)
        console.print(f"[red]\u274c {name}: {type(err).__name__}: {escape(str(err))}[/red]")
        return ScenarioResult(name, err, time.monotonic() - start)
    elapsed = time.monotonic() - start
    console.print(f"[green]\u2705 {name} passed ({elapsed:.1f}s)[/green]")
    return ScenarioResult(name, None, elapsed)


def _run_parallel(ctx: ScenarioContext, names: list[str]) -> list[ScenarioResult]:
    """Run scenarios concurrently, printing each scenario's output as a clean block.

    Args:
        ctx: Scenario context shared read-only by all scenarios.
        names: Registered scenario names.

    Returns:
        Results in the order of ``names``.
    """
    outputs: dict[str, str] = {}
    results: dict[str, ScenarioResult] = {}
    lock = threading.Lock()

    def _run_task(name: str) -> None:
        with console.buffered() as buf:
            result = run_scenario(ctx, name)
        with lock:
            outputs[name] = buf.getvalue()
            results[name] = result

    with ThreadPoolExecutor(max_workers=len(names)) as executor:
        futures = {executor.submit(_run_task, name): name for name in names}
        for future in as_completed(futures):
            future.result()

    for name in names:
        if outputs.get(name):
            console.print(outputs[name], end="")
    return [results[name] for name in names]


def run_scenarios(
    ctx: ScenarioContext,
    names: list[str],
    parallel: bool = False,
    fail_fast: bool = True,
) -> list[ScenarioResult]:
    """Run the named scenarios.

    Args:
        ctx: Scenario context.
        names: Registered scenario names, in execution order.
        parallel: Run all scenarios concurrently instead of in order.
        fail_fast: In sequential mode, stop after the first failure.

    Returns:
        One result per scenario that was run.

    Raises:
        KeyError: If a name is not registered.
    """
    unknown = [name for name in names if name not in SCENARIOS]
    if unknown:
        raise KeyError(f"unknown scenario(s): {', '.join(unknown)}")
    if not names:
        return []

    if parallel:
        return _run_parallel(ctx, names)

    results: list[ScenarioResult] = []
    for name in names:
        result = run_scenario(ctx, name)
        results.append(result)
        if fail_fast and not result.passed:
            logger.warning("Stopping after failed scenario %s", name)
            break
    return results


def display_results(results: list[ScenarioResult]) -> None:
    """Print a summary table of scenario results."""
    table = Table(title="Scenario results")
    table.add_column("Scenario", no_wrap=True)
    table.add_column("Result")
    table.add_column("Time", justify="right")
    table.add_column("Error")
    for result in results:
        status = "[green]passed[/green]" if result.passed else f"[red]{type(result.error).__name__}[/red]"
        table.add_row(result.name, status, f"{result.elapsed:.1f}s", escape(str(result.error or "")))
    console.print(table)
