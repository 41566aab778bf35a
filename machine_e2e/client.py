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

"""Object-store client interface and its kubectl-backed implementation."""

from __future__ import annotations

import json
import tempfile
from pathlib import Path
from typing import Protocol

import yaml

from machine_e2e import logger
from machine_e2e.constants import DEFAULT_KUBECTL_TIMEOUT_SECONDS
from machine_e2e.errors import ClientError, NotFoundError
from machine_e2e.resources import resource_for
from machine_e2e.utils import namespaced_name, run_kubectl

# stderr fragments that will not go away by retrying the same call
_PERMANENT_ERROR_MARKERS = (
    "forbidden",
    "invalid",
    "conflict",
    "the object has been modified",
    "doesn't have a resource type",
    "unknown flag",
)


class ObjectClient(Protocol):
    """The four object-store operations the convergence checks rely on.

    Every method may raise :class:`ClientError`; callers decide whether to retry.
    """

    def get(self, kind: str, name: str, namespace: str | None = None) -> dict: ...

    def list(self, kind: str, namespace: str | None = None) -> list[dict]: ...

    def update(self, obj: dict) -> dict: ...

    def delete(self, obj: dict) -> None: ...


def classify_kubectl_error(stderr: str, what: str) -> ClientError:
    """Classify kubectl stderr into a not-found, permanent or transient error.

    Args:
        stderr: Error output from kubectl.
        what: Description of the call, used in the error message.

    Returns:
        The matching :class:`ClientError`.
    """
    message = f"{what}: {stderr.strip()[:500]}"
    lower = stderr.lower()
    if "notfound" in lower or "not found" in lower:
        return NotFoundError(message, stderr=stderr)
    transient = not any(marker in lower for marker in _PERMANENT_ERROR_MARKERS)
    return ClientError(message, transient=transient, stderr=stderr)


class KubectlClient:
    """ObjectClient that shells out to kubectl.

    Attributes:
        kubeconfig: Path to a kubeconfig file, or None for kubectl's default.
        context: kubeconfig context to use, or None for the current one.
        timeout: Seconds before a single kubectl invocation is abandoned.
    """

    def __init__(
        self,
        kubeconfig: str | None = None,
        context: str | None = None,
        timeout: int = DEFAULT_KUBECTL_TIMEOUT_SECONDS,
    ) -> None:
        self.kubeconfig = kubeconfig
        self.context = context
        self.timeout = timeout

    def _run(self, args: list[str], what: str) -> str:
        ok, stdout, stderr = run_kubectl(
            args, timeout=self.timeout, kubeconfig=self.kubeconfig, context=self.context)
        if not ok:
            raise classify_kubectl_error(stderr, what)
        return stdout

    def _run_json(self, args: list[str], what: str) -> dict:
        stdout = self._run(args, what)
        try:
            return json.loads(stdout)
        except json.JSONDecodeError as err:
            # A truncated response is a flaky read, not a broken cluster.
            raise ClientError(f"{what}: unparseable kubectl output: {err}") from err

    def get(self, kind: str, name: str, namespace: str | None = None) -> dict:
        args = ["get", kind, name, "-o", "json"]
        if namespace:
            args += ["-n", namespace]
        return self._run_json(args, f"get {kind} {namespaced_name(namespace, name)}")

    def list(self, kind: str, namespace: str | None = None) -> list[dict]:
        args = ["get", kind, "-o", "json"]
        if namespace:
            args += ["-n", namespace]
        return self._run_json(args, f"list {kind}").get("items") or []

    def update(self, obj: dict) -> dict:
        name = (obj.get("metadata") or {}).get("name", "")
        what = f"update {resource_for(obj)} {name}"
        tmp = tempfile.NamedTemporaryFile(delete=False, suffix=".yaml")
        try:
            tmp.write(yaml.safe_dump(obj, default_flow_style=False).encode())
            tmp.flush()
            tmp.close()
            return self._run_json(["replace", "-f", tmp.name, "-o", "json"], what)
        finally:
            Path(tmp.name).unlink(missing_ok=True)

    def delete(self, obj: dict) -> None:
        metadata = obj.get("metadata") or {}
        kind = resource_for(obj)
        name = metadata.get("name", "")
        namespace = metadata.get("namespace")
        args = ["delete", kind, name, "--wait=false"]
        if namespace:
            args += ["-n", namespace]
        self._run(args, f"delete {kind} {namespaced_name(namespace, name)}")
        logger.info("Deleted %s %s", kind, namespaced_name(namespace, name))
