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

"""
cli.py - Convergence checks for the machine API operator.

Subcommands:
    list    List registered scenarios
    run     Run scenarios against the current cluster

Examples:
    # Run every scenario in order
    machine-e2e run

    # Run two scenarios against a specific cluster
    machine-e2e run operator-available machines-linked-to-nodes --context my-cluster

    # Run everything concurrently and report all failures
    machine-e2e run --parallel

Environment Variables:
    All configuration can be overridden via E2E_* environment variables,
    e.g. E2E_NAMESPACE, E2E_POLL_INTERVAL, E2E_WAIT_SHORT, E2E_WAIT_MEDIUM,
    E2E_WAIT_LONG (see E2EConfig for the full list).
"""

from __future__ import annotations

import logging
import sys

import typer

from machine_e2e import console
from machine_e2e.commands import list_cmd, run_cmd

app = typer.Typer(
    help="Convergence checks for the machine API operator.",
    no_args_is_help=True,
)


@app.callback()
def _main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Initialize logging for all subcommands."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )


app.command("list")(list_cmd.list_scenarios)
app.command("run")(run_cmd.run)


def main() -> None:
    try:
        app()
    except Exception as e:
        console.print(f"[red]\u274c {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
