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

"""List subcommand."""

from __future__ import annotations

from rich.table import Table

from machine_e2e import console
from machine_e2e.scenarios import SCENARIOS, describe


def list_scenarios() -> None:
    """List registered scenarios in execution order."""
    table = Table(title="Scenarios")
    table.add_column("Name", no_wrap=True)
    table.add_column("Checks")
    for name, scenario in SCENARIOS.items():
        table.add_row(name, describe(scenario))
    console.print(table)
