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

"""Named end-to-end scenarios: mutate, then wait for the operator to converge.

Every scenario takes a :class:`ScenarioContext` and returns None on success.
The first failing step raises, and the error reaches the caller unchanged.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from types import SimpleNamespace

from machine_e2e import console, logger
from machine_e2e.config import ScenarioContext
from machine_e2e.constants import MACHINE_TAINT_KEY, NODE_TAINT_KEY
from machine_e2e.errors import ClientError, MutationError
from machine_e2e.poller import Tier
from machine_e2e.predicates import (
    deployment_available,
    deployment_recreated,
    machine_count_restored,
    machines_linked_to_nodes,
    node_replaced,
    operator_status_available,
    singleton_object,
    taints_converged,
)
from machine_e2e.snapshot import (
    fetch,
    first_linked_machine,
    get_deployment,
    get_node,
    list_machines,
    list_nodes,
    take_snapshot,
    triage_worker,
)
from machine_e2e.taints import make_taint, upsert_taint

Scenario = Callable[[ScenarioContext], None]


# ============================================================================
# Step sequencing
# ============================================================================

@dataclass(frozen=True)
class Step:
    """One mutation or poll within a scenario."""

    description: str
    action: Callable[[], None]


def run_steps(steps: Iterable[Step]) -> None:
    """Run steps in order, stopping at the first one that raises."""
    for step in steps:
        console.print(f"[yellow]\u2139\ufe0f  {step.description}...[/yellow]")
        logger.info(step.description)
        step.action()


def _update_once(ctx: ScenarioContext, obj: dict, description: str) -> dict:
    """Write ``obj`` exactly once; a failure ends the scenario."""
    try:
        return ctx.client.update(obj)
    except ClientError as err:
        raise MutationError(f"{description} failed: {err}") from err


# ============================================================================
# Scenarios
# ============================================================================

def expect_operator_available(ctx: ScenarioContext) -> None:
    """The operator deployment has a ready replica."""
    name = ctx.config.operator_deployment
    run_steps([
        Step(f"Wait for deployment {name} to be available",
             lambda: ctx.poll(deployment_available(ctx, name), Tier.SHORT, f"deployment {name} available")),
    ])


def expect_one_cluster_object(ctx: ScenarioContext) -> None:
    """Exactly one cluster object exists."""
    run_steps([
        Step("Wait for exactly one cluster object",
             lambda: ctx.poll(singleton_object(ctx), Tier.SHORT, "exactly one cluster object")),
    ])


def expect_cluster_operator_status_available(ctx: ScenarioContext) -> None:
    """The operator's ClusterOperator reports Available=True."""
    name = ctx.config.cluster_operator
    run_steps([
        Step(f"Wait for ClusterOperator {name} to report Available",
             lambda: ctx.poll(operator_status_available(ctx, name), Tier.SHORT,
                              f"ClusterOperator {name} Available")),
    ])


def expect_all_machines_linked_to_a_node(ctx: ScenarioContext) -> None:
    """Every machine is linked to a node that links back to it."""
    run_steps([
        Step("Wait for all machines to be linked to a node",
             lambda: ctx.poll(machines_linked_to_nodes(ctx), Tier.SHORT, "machines linked to nodes")),
    ])


def expect_reconcile_controllers_deployment(ctx: ScenarioContext) -> None:
    """A deleted controllers deployment is recreated by the operator."""
    name = ctx.config.controllers_deployment
    state = SimpleNamespace()

    def _get() -> None:
        state.deployment = fetch(ctx, lambda: get_deployment(ctx, name), Tier.SHORT, f"deployment {name}")

    def _delete() -> None:
        ctx.retry_write(lambda: ctx.client.delete(state.deployment.manifest), Tier.SHORT,
                        f"delete deployment {name}")

    def _recreated() -> None:
        ctx.poll(deployment_recreated(ctx, name), Tier.LONG, f"deployment {name} recreated")

    run_steps([
        Step(f"Get deployment {name}", _get),
        Step(f"Delete deployment {name}", _delete),
        Step(f"Verify deployment {name} is recreated", _recreated),
    ])


def expect_additive_reconcile_machine_taints(ctx: ScenarioContext) -> None:
    """Taints set on a machine are added to its node alongside the node's own."""
    state = SimpleNamespace()
    node_taint = make_taint(NODE_TAINT_KEY)
    machine_taint = make_taint(MACHINE_TAINT_KEY)

    def _triage() -> None:
        machines = fetch(ctx, lambda: list_machines(ctx), Tier.SHORT, "machine list")
        state.machine = first_linked_machine(machines)
        logger.info("Got the machine, %s", state.machine.name)

    def _get_node() -> None:
        node_name = state.machine.node_name
        state.node = fetch(ctx, lambda: get_node(ctx, node_name), Tier.SHORT, f"node {node_name}")
        logger.info("Got the node, %s, from machine, %s", state.node.name, state.machine.name)

    def _taint_node() -> None:
        updated = state.node.with_taints(upsert_taint(state.node.taints, node_taint))
        _update_once(ctx, updated, f"add taint {NODE_TAINT_KEY} to node {state.node.name}")

    def _taint_machine() -> None:
        updated = state.machine.with_taints(upsert_taint(state.machine.taints, machine_taint))
        _update_once(ctx, updated, f"add taint {MACHINE_TAINT_KEY} to machine {state.machine.key}")

    def _converged() -> None:
        expected = {NODE_TAINT_KEY, MACHINE_TAINT_KEY}
        ctx.poll(taints_converged(ctx, state.node.name, expected), Tier.LONG,
                 f"taints {sorted(expected)} on node {state.node.name}")

    run_steps([
        Step("Triage a machine linked to a node", _triage),
        Step("Get the machine's node", _get_node),
        Step(f"Taint the node with {NODE_TAINT_KEY}", _taint_node),
        Step(f"Taint the machine with {MACHINE_TAINT_KEY}", _taint_machine),
        Step("Verify machine taints are applied to the node", _converged),
    ])


def expect_new_node_when_deleting_machine(ctx: ScenarioContext) -> None:
    """A deleted worker machine is replaced, and so is its node.

    Machine provisioning and node deprovisioning run on different timelines,
    so they are awaited by two polls with separate deadlines.
    """
    state = SimpleNamespace()

    def _list_machines() -> None:
        state.machines = fetch(ctx, lambda: list_machines(ctx), Tier.SHORT, "machine list")

    def _list_nodes() -> None:
        state.nodes = fetch(ctx, lambda: list_nodes(ctx), Tier.SHORT, "node list")

    def _triage() -> None:
        machine, node = triage_worker(state.machines, state.nodes, ctx.config.worker_role)
        state.snapshot = take_snapshot(state.machines, state.nodes, machine, node)

    def _delete() -> None:
        machine = state.snapshot.machine
        ctx.retry_write(lambda: ctx.client.delete(machine.manifest), Tier.SHORT,
                        f"delete machine {machine.key}")

    def _machine_replaced() -> None:
        ctx.poll(machine_count_restored(ctx, state.snapshot), Tier.MEDIUM,
                 f"machine count to return to {state.snapshot.machine_count}")

    def _node_replaced() -> None:
        ctx.poll(node_replaced(ctx, state.snapshot), Tier.LONG,
                 f"node {state.snapshot.node_name} to be replaced")

    run_steps([
        Step("Get machine list", _list_machines),
        Step("Get node list", _list_nodes),
        Step("Triage a worker machine", _triage),
        Step("Delete machine", _delete),
        Step("Expect new machine to come up", _machine_replaced),
        Step("Expect deleted machine node to go away and a new node to join", _node_replaced),
    ])


SCENARIOS: dict[str, Scenario] = {
    "operator-available": expect_operator_available,
    "one-cluster-object": expect_one_cluster_object,
    "cluster-operator-status-available": expect_cluster_operator_status_available,
    "machines-linked-to-nodes": expect_all_machines_linked_to_a_node,
    "reconcile-controllers-deployment": expect_reconcile_controllers_deployment,
    "additive-reconcile-machine-taints": expect_additive_reconcile_machine_taints,
    "new-node-when-deleting-machine": expect_new_node_when_deleting_machine,
}


def describe(scenario: Scenario) -> str:
    """First docstring line of a scenario."""
    lines = (scenario.__doc__ or "").strip().splitlines()
    return lines[0] if lines else ""
