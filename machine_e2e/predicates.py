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

"""Convergence conditions over observed cluster state.

Each factory returns a zero-argument condition for :func:`machine_e2e.poller.poll`.
Conditions only read. A failed read is logged and reported as ``NOT_YET``;
``Fatal`` is reserved for states the operator can never legitimately produce.
"""

from __future__ import annotations

from machine_e2e import logger
from machine_e2e.config import ScenarioContext
from machine_e2e.constants import KIND_CLUSTER
from machine_e2e.errors import ClientError, FatalConditionError
from machine_e2e.poller import Condition, ConditionResult, Fatal, Outcome
from machine_e2e.snapshot import (
    ScenarioSnapshot,
    get_cluster_operator,
    get_deployment,
    get_node,
    list_machines,
    list_nodes,
    list_objects,
)
from machine_e2e.taints import missing_taint_keys, taint_keys, taint_keys_converged


def deployment_available(ctx: ScenarioContext, name: str) -> Condition:
    """Deployment ``name`` has at least one ready replica."""
    def _condition() -> ConditionResult:
        try:
            deployment = get_deployment(ctx, name)
        except ClientError as err:
            logger.error("error querying api for Deployment %s: %s, retrying...", name, err)
            return Outcome.NOT_YET
        if deployment.ready_replicas < 1:
            return Outcome.NOT_YET
        return Outcome.DONE
    return _condition


def singleton_object(ctx: ScenarioContext, kind: str = KIND_CLUSTER) -> Condition:
    """Exactly one object of ``kind`` exists; more than one can never converge."""
    def _condition() -> ConditionResult:
        try:
            objects = list_objects(ctx, kind)
        except ClientError as err:
            logger.error("error querying api for %s list: %s, retrying...", kind, err)
            return Outcome.NOT_YET
        if len(objects) > 1:
            return Fatal(FatalConditionError(f"more than one {kind} object found ({len(objects)})"))
        if not objects:
            return Outcome.NOT_YET
        return Outcome.DONE
    return _condition


def operator_status_available(ctx: ScenarioContext, name: str) -> Condition:
    """ClusterOperator ``name`` reports condition Available=True."""
    def _condition() -> ConditionResult:
        try:
            operator = get_cluster_operator(ctx, name)
        except ClientError as err:
            logger.error("error querying api for ClusterOperator %s: %s, retrying...", name, err)
            return Outcome.NOT_YET
        return Outcome.DONE if operator.is_available else Outcome.NOT_YET
    return _condition


def machines_linked_to_nodes(ctx: ScenarioContext) -> Condition:
    """Every machine links to a node, and that node's annotation links back.

    Both lists are re-read on every attempt, so a machine the operator has
    not reconciled yet keeps the poll going instead of failing it.
    """
    annotation_key = ctx.config.machine_annotation_key

    def _condition() -> ConditionResult:
        try:
            machines = list_machines(ctx)
            nodes = list_nodes(ctx)
        except ClientError as err:
            logger.error("error querying api for machines and nodes: %s, retrying...", err)
            return Outcome.NOT_YET

        if len(machines) != len(nodes):
            logger.info("Waiting for %d machines to become nodes (%d nodes)", len(machines), len(nodes))
            return Outcome.NOT_YET

        annotations = {node.name: node.machine_annotation(annotation_key) for node in nodes}
        for machine in machines:
            node_name = machine.node_name
            if node_name is None:
                logger.error("machine %s has no nodeRef, retrying...", machine.name)
                return Outcome.NOT_YET
            expected = f"{ctx.config.namespace}/{machine.name}"
            if annotations.get(node_name) != expected:
                logger.error("node %s annotation %r does not match expected machine %s, retrying...",
                             node_name, annotations.get(node_name), expected)
                return Outcome.NOT_YET
        return Outcome.DONE
    return _condition


def deployment_recreated(ctx: ScenarioContext, name: str) -> Condition:
    """Deployment ``name`` exists again, is ready, and is not a terminating leftover."""
    def _condition() -> ConditionResult:
        try:
            deployment = get_deployment(ctx, name)
        except ClientError as err:
            logger.error("error querying api for Deployment %s: %s, retrying...", name, err)
            return Outcome.NOT_YET
        if deployment.is_terminating:
            logger.debug("Deployment %s still terminating", name)
            return Outcome.NOT_YET
        if deployment.ready_replicas < 1:
            return Outcome.NOT_YET
        return Outcome.DONE
    return _condition


def taints_converged(ctx: ScenarioContext, node_name: str, expected_keys: set[str]) -> Condition:
    """Every key in ``expected_keys`` is among node ``node_name``'s taints."""
    expected = frozenset(expected_keys)

    def _condition() -> ConditionResult:
        try:
            node = get_node(ctx, node_name)
        except ClientError as err:
            logger.error("error querying api for node %s: %s, retrying...", node_name, err)
            return Outcome.NOT_YET
        observed = taint_keys(node.taints)
        if taint_keys_converged(expected, observed):
            logger.info("expected: %s, observed: %s", sorted(expected), sorted(observed))
            return Outcome.DONE
        logger.info("All expected taints not found on node %s. Missing: %s",
                    node_name, sorted(missing_taint_keys(expected, observed)))
        return Outcome.NOT_YET
    return _condition


def machine_count_restored(ctx: ScenarioContext, snapshot: ScenarioSnapshot) -> Condition:
    """The machine count is back at the snapshot's baseline.

    Machines with a deletionTimestamp are not counted, so a deleted machine
    still held by finalizers cannot stand in for its replacement.
    """
    def _condition() -> ConditionResult:
        try:
            machines = list_machines(ctx)
        except ClientError as err:
            logger.error("error querying api for machine list: %s, retrying...", err)
            return Outcome.NOT_YET
        live = [machine for machine in machines if not machine.is_terminating]
        logger.info("Expect new machine to come up (%d/%d, %d terminating)",
                    len(live), snapshot.machine_count, len(machines) - len(live))
        return Outcome.DONE if len(live) == snapshot.machine_count else Outcome.NOT_YET
    return _condition


def node_replaced(ctx: ScenarioContext, snapshot: ScenarioSnapshot) -> Condition:
    """The snapshot's node is gone and the node count is back at baseline."""
    def _condition() -> ConditionResult:
        try:
            nodes = list_nodes(ctx)
        except ClientError as err:
            logger.error("error querying api for node list: %s, retrying...", err)
            return Outcome.NOT_YET
        if any(node.name == snapshot.node_name for node in nodes):
            logger.info("Expect deleted machine node %s to go away", snapshot.node_name)
            return Outcome.NOT_YET
        logger.info("Expect new node to come up (%d/%d)", len(nodes), snapshot.node_count)
        return Outcome.DONE if len(nodes) == snapshot.node_count else Outcome.NOT_YET
    return _condition
