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

"""Read-only views over Machine, Node, Deployment and ClusterOperator manifests."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any

from machine_e2e.constants import (
    CONDITION_AVAILABLE,
    CONDITION_TRUE,
    LABEL_MACHINE_ROLE,
    RESOURCE_BY_KIND,
)
from machine_e2e.utils import namespaced_name


def resource_for(manifest: dict) -> str:
    """Map a manifest's ``kind`` to its kubectl resource name.

    Raises:
        ValueError: If the kind is not one this package works with.
    """
    kind = manifest.get("kind", "")
    try:
        return RESOURCE_BY_KIND[kind]
    except KeyError:
        raise ValueError(f"unsupported object kind {kind!r}") from None


def _metadata(manifest: dict) -> dict:
    return manifest.get("metadata") or {}


@dataclass(frozen=True)
class _Resource:
    manifest: dict[str, Any]

    @property
    def name(self) -> str:
        return _metadata(self.manifest).get("name", "")

    @property
    def namespace(self) -> str | None:
        return _metadata(self.manifest).get("namespace")

    @property
    def labels(self) -> dict[str, str]:
        return _metadata(self.manifest).get("labels") or {}

    @property
    def annotations(self) -> dict[str, str]:
        return _metadata(self.manifest).get("annotations") or {}

    @property
    def key(self) -> str:
        return namespaced_name(self.namespace, self.name)

    @property
    def deletion_timestamp(self) -> str | None:
        return _metadata(self.manifest).get("deletionTimestamp")

    @property
    def is_terminating(self) -> bool:
        """Deleted but still held by finalizers."""
        return bool(self.deletion_timestamp)


class _Tainted(_Resource):
    @property
    def taints(self) -> list[dict]:
        return list((self.manifest.get("spec") or {}).get("taints") or [])

    def with_taints(self, taints: list[dict]) -> dict:
        """Return a copy of the manifest with ``spec.taints`` replaced."""
        updated = copy.deepcopy(self.manifest)
        updated.setdefault("spec", {})["taints"] = [dict(t) for t in taints]
        return updated


class Machine(_Tainted):
    """A Machine and its optional back-reference to a Node."""

    @property
    def role(self) -> str | None:
        return self.labels.get(LABEL_MACHINE_ROLE)

    @property
    def node_name(self) -> str | None:
        """Name from ``status.nodeRef``, or None before the operator links a node."""
        node_ref = (self.manifest.get("status") or {}).get("nodeRef")
        if not node_ref:
            return None
        return node_ref.get("name") or None


class Node(_Tainted):
    """A Node; its machine annotation points back at the owning Machine."""

    def machine_annotation(self, key: str) -> str | None:
        return self.annotations.get(key)


class Deployment(_Resource):
    @property
    def ready_replicas(self) -> int:
        return int((self.manifest.get("status") or {}).get("readyReplicas") or 0)


class ClusterOperator(_Resource):
    @property
    def conditions(self) -> list[dict]:
        return list((self.manifest.get("status") or {}).get("conditions") or [])

    def find_condition(self, condition_type: str) -> dict | None:
        for condition in self.conditions:
            if condition.get("type") == condition_type:
                return condition
        return None

    @property
    def is_available(self) -> bool:
        available = self.find_condition(CONDITION_AVAILABLE)
        return available is not None and available.get("status") == CONDITION_TRUE
