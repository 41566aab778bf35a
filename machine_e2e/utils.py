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

"""kubectl invocation and command checks."""

from __future__ import annotations

import subprocess

import sh

from machine_e2e import logger


def namespaced_name(namespace: str | None, name: str) -> str:
    """Format an object identity as ``<namespace>/<name>``, or ``<name>`` if cluster scoped."""
    return f"{namespace}/{name}" if namespace else name


def require_command(cmd: str) -> str:
    """Resolve ``cmd`` on the system PATH.

    Args:
        cmd: Name of the CLI command to look up.

    Returns:
        Absolute path of the command.

    Raises:
        RuntimeError: If the command is not found.
    """
    try:
        path = str(sh.which(cmd)).strip()
    except sh.ErrorReturnCode as err:
        raise RuntimeError(f"'{cmd}' not found on PATH; the convergence checks need it to reach the cluster") from err
    logger.debug("Using %s at %s", cmd, path)
    return path


def kubectl_argv(
    args: list[str],
    kubeconfig: str | None = None,
    context: str | None = None,
) -> list[str]:
    """Build a kubectl argv with connection flags ahead of the subcommand."""
    argv = ["kubectl"]
    if kubeconfig:
        argv += ["--kubeconfig", kubeconfig]
    if context:
        argv += ["--context", context]
    return [*argv, *args]


def run_kubectl(
    args: list[str],
    timeout: int = 30,
    kubeconfig: str | None = None,
    context: str | None = None,
) -> tuple[bool, str, str]:
    """Run kubectl and return (success, stdout, stderr).

    stdout carries JSON and stderr carries the text errors are classified
    from, so the two streams are captured separately. A timeout or a missing
    binary is reported through stderr like any other failed call.

    Args:
        args: kubectl arguments (e.g. ``["get", "nodes", "-o", "json"]``).
        timeout: Seconds before the call is abandoned.
        kubeconfig: Path to a kubeconfig file, or None for kubectl's default.
        context: kubeconfig context, or None for the current one.

    Returns:
        Tuple of (success, stdout, stderr).
    """
    argv = kubectl_argv(args, kubeconfig=kubeconfig, context=context)
    logger.debug("Running %s", " ".join(argv))
    try:
        result = subprocess.run(argv, capture_output=True, text=True, timeout=timeout)
    except subprocess.TimeoutExpired:
        return False, "", f"kubectl {' '.join(args[:2])} timed out after {timeout}s"
    except OSError as exc:
        return False, "", f"cannot run kubectl: {exc}"
    return result.returncode == 0, result.stdout, result.stderr
