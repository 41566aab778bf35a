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

"""Shared fixtures: an in-memory object store and manifest builders."""

from __future__ import annotations

import copy
from collections import defaultdict
from collections.abc import Callable

import pytest

from machine_e2e.config import E2EConfig, ScenarioContext
from machine_e2e.constants import LABEL_MACHINE_ROLE
from machine_e2e.errors import ClientError, NotFoundError
from machine_e2e.resources import resource_for

NS = "openshift-cluster-api"


# ============================================================================
# Manifest builders
# ============================================================================

def machine(name: str, node: str | None = None, role: str = "worker", taints: list | None = None,
            deleting: bool = False) -> dict:
    metadata = {"name": name, "namespace": NS, "labels": {LABEL_MACHINE_ROLE: role}}
    if deleting:
        metadata["deletionTimestamp"] = "2026-01-01T00:00:00Z"
    manifest = {
        "apiVersion": "cluster.k8s.io/v1alpha1",
        "kind": "Machine",
        "metadata": metadata,
        "spec": {"taints": list(taints or [])},
        "status": {},
    }
    if node is not None:
        manifest["status"]["nodeRef"] = {"kind": "Node", "name": node}
    return manifest


def node(name: str, machine_name: str | None = None, taints: list | None = None) -> dict:
    annotations = {"machine": f"{NS}/{machine_name}"} if machine_name else {}
    return {
        "apiVersion": "v1",
        "kind": "Node",
        "metadata": {"name": name, "annotations": annotations},
        "spec": {"taints": list(taints or [])},
    }


def deployment(name: str, ready: int = 1, deleting: bool = False) -> dict:
    metadata = {"name": name, "namespace": NS}
    if deleting:
        metadata["deletionTimestamp"] = "2026-01-01T00:00:00Z"
    return {
        "apiVersion": "apps/v1",
        "kind": "Deployment",
        "metadata": metadata,
        "status": {"readyReplicas": ready},
    }


def cluster_operator(name: str, available: str = "True") -> dict:
    return {
        "apiVersion": "config.openshift.io/v1",
        "kind": "ClusterOperator",
        "metadata": {"name": name},
        "status": {"conditions": [
            {"type": "Progressing", "status": "False"},
            {"type": "Available", "status": available},
        ]},
    }


def cluster(name: str) -> dict:
    return {
        "apiVersion": "cluster.k8s.io/v1alpha1",
        "kind": "Cluster",
        "metadata": {"name": name, "namespace": NS},
    }


def transient(message: str = "connection refused") -> ClientError:
    return ClientError(message, transient=True)


def permanent(message: str = "forbidden") -> ClientError:
    return ClientError(message, transient=False)


# ============================================================================
# Fake object store
# ============================================================================

class FakeClient:
    """In-memory ObjectClient.

    ``hooks`` run before every read and stand in for the operator's own
    reconcile loop; ``fail(op, *errors)`` queues errors for the next calls.
    """

    def __init__(self, objects: list[dict] = ()) -> None:
        self.objects: dict[tuple[str, str | None, str], dict] = {}
        self.failures: dict[str, list[Exception]] = defaultdict(list)
        self.hooks: list[Callable[[FakeClient], None]] = []
        self.calls: list[tuple[str, str, str]] = []
        self.deleted: list[tuple[str, str | None, str]] = []
        for obj in objects:
            self.add(obj)

    @staticmethod
    def _key(obj: dict) -> tuple[str, str | None, str]:
        metadata = obj["metadata"]
        return resource_for(obj), metadata.get("namespace"), metadata["name"]

    def add(self, obj: dict) -> None:
        self.objects[self._key(obj)] = copy.deepcopy(obj)

    def remove(self, kind: str, name: str) -> None:
        for key in [k for k in self.objects if k[0] == kind and k[2] == name]:
            del self.objects[key]

    def names(self, kind: str) -> list[str]:
        return sorted(k[2] for k in self.objects if k[0] == kind)

    def fail(self, op: str, *errors: Exception) -> None:
        self.failures[op].extend(errors)

    def _before(self, op: str, kind: str, name: str = "") -> None:
        self.calls.append((op, kind, name))
        if op in ("get", "list"):
            for hook in list(self.hooks):
                hook(self)
        if self.failures[op]:
            raise self.failures[op].pop(0)

    @staticmethod
    def _in_namespace(key: tuple[str, str | None, str], namespace: str | None) -> bool:
        return namespace is None or key[1] is None or key[1] == namespace

    def get(self, kind: str, name: str, namespace: str | None = None) -> dict:
        self._before("get", kind, name)
        for key, obj in self.objects.items():
            if key[0] == kind and key[2] == name and self._in_namespace(key, namespace):
                return copy.deepcopy(obj)
        raise NotFoundError(f"{kind} {name} not found")

    def list(self, kind: str, namespace: str | None = None) -> list[dict]:
        self._before("list", kind)
        return [copy.deepcopy(obj) for key, obj in sorted(self.objects.items(), key=lambda item: item[0][2])
                if key[0] == kind and self._in_namespace(key, namespace)]

    def update(self, obj: dict) -> dict:
        key = self._key(obj)
        self._before("update", key[0], key[2])
        if key not in self.objects:
            raise NotFoundError(f"{key[0]} {key[2]} not found")
        self.objects[key] = copy.deepcopy(obj)
        return copy.deepcopy(obj)

    def delete(self, obj: dict) -> None:
        key = self._key(obj)
        self._before("delete", key[0], key[2])
        if key not in self.objects:
            raise NotFoundError(f"{key[0]} {key[2]} not found")
        del self.objects[key]
        self.deleted.append(key)

    def count(self, op: str, kind: str | None = None) -> int:
        return sum(1 for call in self.calls if call[0] == op and (kind is None or call[1] == kind))


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def config() -> E2EConfig:
    """Tight deadlines: SHORT allows 6 attempts, MEDIUM 11, LONG 21."""
    return E2EConfig(
        namespace=NS,
        poll_interval=1.0,
        wait_short=5.0,
        wait_medium=10.0,
        wait_long=20.0,
    )


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def make_ctx(config, sleeps):
    """Build a ScenarioContext over a FakeClient whose sleeps are recorded, not slept."""
    def _make(client: FakeClient) -> ScenarioContext:
        return ScenarioContext(client=client, config=config, sleep=sleeps.append)
    return _make
