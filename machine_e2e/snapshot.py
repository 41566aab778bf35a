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

"""State accessors, bounded reads, triage, and scenario baselines.

Each accessor is a single client call. It raises :class:`ClientError` on
failure and leaves the retry decision to the caller.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

from machine_e2e import logger
from machine_e2e.config import ScenarioContext
from machine_e2e.constants import (
    KIND_CLUSTER_OPERATOR,
    KIND_DEPLOYMENT,
    KIND_MACHINE,
    KIND_NODE,
)
from machine_e2e.errors import ClientError, PreconditionError
from machine_e2e.poller import ConditionResult, Outcome, Tier
from machine_e2e.resources import ClusterOperator, Deployment, Machine, Node

T = TypeVar("T")


# ============================================================================
# Accessors
# ============================================================================

def list_machines(ctx: ScenarioContext) -> list[Machine]:
    return [Machine(m) for m in ctx.client.list(KIND_MACHINE, ctx.config.namespace)]


def list_nodes(ctx: ScenarioContext) -> list[Node]:
    return [Node(n) for n in ctx.client.list(KIND_NODE)]


def list_objects(ctx: ScenarioContext, kind: str) -> list[dict]:
    """List raw objects of ``kind`` in the configured namespace."""
    return ctx.client.list(kind, ctx.config.namespace)


def get_node(ctx: ScenarioContext, name: str) -> Node:
    return Node(ctx.client.get(KIND_NODE, name))


def get_deployment(ctx: ScenarioContext, name: str) -> Deployment:
    return Deployment(ctx.client.get(KIND_DEPLOYMENT, name, ctx.config.namespace))


def get_cluster_operator(ctx: ScenarioContext, name: str) -> ClusterOperator:
    return ClusterOperator(ctx.client.get(KIND_CLUSTER_OPERATOR, name))


def fetch(ctx: ScenarioContext, read: Callable[[], T], tier: Tier, description: str) -> T:
    """Perform a read, retrying failed attempts until the tier's deadline.

    Args:
        ctx: Scenario context.
        read: Zero-argument accessor call.
        tier: Deadline tier for the read.
        description: What is being read, for logs and the timeout error.

    Returns:
        The first successful result of ``read``.

    Raises:
        PollTimeoutError: If every attempt failed until the deadline.
    """
    box: list[T] = []

    def _condition() -> ConditionResult:
        try:
            box.append(read())
        except ClientError as err:
            logger.error("error querying api for %s: %s, retrying...", description, err)
            return Outcome.NOT_YET
        return Outcome.DONE

    ctx.poll(_condition, tier, description)
    return box[-1]


# ============================================================================
# Triage & snapshots
# ============================================================================

@dataclass(frozen=True)
class ScenarioSnapshot:
    """Baseline captured before a mutation; later polls compare against it.

    Attributes:
        machine_count: Number of machines before the mutation.
        node_count: Number of nodes before the mutation.
        machine: The triaged machine.
        node: The node the triaged machine is linked to.
    """

    machine_count: int
    node_count: int
    machine: Machine
    node: Node

    @property
    def node_name(self) -> str:
        return self.node.name


def take_snapshot(machines: list[Machine], nodes: list[Node], machine: Machine, node: Node) -> ScenarioSnapshot:
    snapshot = ScenarioSnapshot(
        machine_count=len(machines),
        node_count=len(nodes),
        machine=machine,
        node=node,
    )
    logger.info("Baseline: %d machines, %d nodes, triaged machine %s on node %s",
                snapshot.machine_count, snapshot.node_count, machine.key, node.name)
    return snapshot


def triage_worker(machines: list[Machine], nodes: list[Node], worker_role: str) -> tuple[Machine, Node]:
    """Select a worker machine whose node back-reference resolves to a listed node.

    Args:
        machines: Observed machines.
        nodes: Observed nodes.
        worker_role: Role label value identifying worker machines.

    Returns:
        Tuple of (machine, node).

    Raises:
        PreconditionError: If no worker machine is linked to a listed node.
    """
    nodes_by_name = {node.name: node for node in nodes}
    for machine in machines:
        if machine.role != worker_role:
            continue
        if machine.node_name is None:
            logger.warning("Worker machine %s has no nodeRef, skipping", machine.key)
            continue
        node = nodes_by_name.get(machine.node_name)
        if node is not None:
            return machine, node
    raise PreconditionError(
        f"no {worker_role} machine linked to an existing node among {len(machines)} machines"
    )


def first_linked_machine(machines: list[Machine]) -> Machine:
    """Return the first machine with a node back-reference.

    Raises:
        PreconditionError: If there are no machines or none is linked.
    """
    for machine in machines:
        if machine.node_name is not None:
            return machine
    if not machines:
        raise PreconditionError("no machines found")
    raise PreconditionError(f"none of {len(machines)} machines has a nodeRef")
