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

"""Run subcommand."""

from __future__ import annotations

import typer
from pydantic import ValidationError

from machine_e2e import console
from machine_e2e.client import KubectlClient
from machine_e2e.config import ScenarioContext, display_config, resolve_config
from machine_e2e.orchestrator import display_results, run_scenarios
from machine_e2e.scenarios import SCENARIOS
from machine_e2e.utils import require_command


def run(
    names: list[str] | None = typer.Argument(
        None, help="Scenarios to run (default: all, in registration order)"),
    namespace: str | None = typer.Option(
        None, "--namespace", "-n", help="Namespace of the operator (overrides E2E_NAMESPACE)"),
    kubeconfig: str | None = typer.Option(
        None, "--kubeconfig", help="Path to kubeconfig (overrides E2E_KUBECONFIG)"),
    context: str | None = typer.Option(
        None, "--context", help="kubeconfig context (overrides E2E_KUBE_CONTEXT)"),
    interval: float | None = typer.Option(
        None, "--interval", help="Seconds between poll attempts (overrides E2E_POLL_INTERVAL)"),
    parallel: bool = typer.Option(
        False, "--parallel", help="Run scenarios concurrently"),
    keep_going: bool = typer.Option(
        False, "--keep-going", help="Keep running after a scenario fails"),
) -> None:
    """Run convergence scenarios against the current cluster."""
    selected = names or list(SCENARIOS)
    unknown = [name for name in selected if name not in SCENARIOS]
    if unknown:
        raise typer.BadParameter(
            f"unknown scenario(s): {', '.join(unknown)}; see 'list' for valid names")

    try:
        cfg = resolve_config(
            namespace=namespace,
            kubeconfig=kubeconfig,
            kube_context=context,
            poll_interval=interval,
        )
    except ValidationError as err:
        raise typer.BadParameter(str(err)) from err

    require_command("kubectl")
    display_config(cfg)

    client = KubectlClient(kubeconfig=cfg.kubeconfig, context=cfg.kube_context, timeout=cfg.kubectl_timeout)
    ctx = ScenarioContext(client=client, config=cfg)
    results = run_scenarios(ctx, selected, parallel=parallel, fail_fast=not keep_going)
    display_results(results)

    failed = [result for result in results if not result.passed]
    if failed:
        console.print(f"[red]\u274c {len(failed)} of {len(results)} scenario(s) failed[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]\u2705 All {len(results)} scenario(s) passed[/green]")
