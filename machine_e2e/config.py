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

"""Configuration, scenario context, and config display."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from rich.panel import Panel

from machine_e2e import console
from machine_e2e.client import ObjectClient
from machine_e2e.constants import (
    DEFAULT_CLUSTER_OPERATOR,
    DEFAULT_CONTROLLERS_DEPLOYMENT,
    DEFAULT_KUBECTL_TIMEOUT_SECONDS,
    DEFAULT_MACHINE_ANNOTATION_KEY,
    DEFAULT_NAMESPACE,
    DEFAULT_OPERATOR_DEPLOYMENT,
    DEFAULT_POLL_INTERVAL_SECONDS,
    DEFAULT_WAIT_LONG_SECONDS,
    DEFAULT_WAIT_MEDIUM_SECONDS,
    DEFAULT_WAIT_SHORT_SECONDS,
    DEFAULT_WORKER_ROLE,
)
from machine_e2e.poller import Condition, Tier, poll, retry_write


# ============================================================================
# Configuration classes
# ============================================================================

class E2EConfig(BaseSettings):
    """Convergence check configuration, auto-loaded from E2E_* env vars.

    Attributes:
        namespace: Namespace holding machines, clusters and operator deployments.
        operator_deployment: Name of the operator Deployment.
        controllers_deployment: Name of the controllers Deployment the operator reconciles.
        cluster_operator: Name of the ClusterOperator status object.
        machine_annotation_key: Node annotation holding ``<namespace>/<machine>``.
        worker_role: Machine role label value selecting worker machines.
        poll_interval: Seconds between condition evaluations.
        wait_short: Deadline for availability and existence checks.
        wait_medium: Deadline for machine replacement provisioning.
        wait_long: Deadline for node lifecycle and deployment recreation.
        kubeconfig: Path to a kubeconfig file, or None for kubectl's default.
        kube_context: kubeconfig context, or None for the current one.
        kubectl_timeout: Seconds before a single kubectl call is abandoned.
    """

    model_config = SettingsConfigDict(env_prefix="E2E_", extra="ignore")

    namespace: str = DEFAULT_NAMESPACE
    operator_deployment: str = DEFAULT_OPERATOR_DEPLOYMENT
    controllers_deployment: str = DEFAULT_CONTROLLERS_DEPLOYMENT
    cluster_operator: str = DEFAULT_CLUSTER_OPERATOR
    machine_annotation_key: str = DEFAULT_MACHINE_ANNOTATION_KEY
    worker_role: str = DEFAULT_WORKER_ROLE
    poll_interval: float = Field(default=DEFAULT_POLL_INTERVAL_SECONDS, gt=0)
    wait_short: float = Field(default=DEFAULT_WAIT_SHORT_SECONDS, gt=0)
    wait_medium: float = Field(default=DEFAULT_WAIT_MEDIUM_SECONDS, gt=0)
    wait_long: float = Field(default=DEFAULT_WAIT_LONG_SECONDS, gt=0)
    kubeconfig: str | None = None
    kube_context: str | None = None
    kubectl_timeout: int = Field(default=DEFAULT_KUBECTL_TIMEOUT_SECONDS, ge=1)

    @model_validator(mode="after")
    def _check_tier_order(self) -> E2EConfig:
        if not self.wait_short <= self.wait_medium <= self.wait_long:
            raise ValueError("wait tiers must satisfy wait_short <= wait_medium <= wait_long")
        return self

    def timeout_for(self, tier: Tier) -> float:
        """Resolve a deadline tier to seconds."""
        return {
            Tier.SHORT: self.wait_short,
            Tier.MEDIUM: self.wait_medium,
            Tier.LONG: self.wait_long,
        }[tier]


# ============================================================================
# Scenario context
# ============================================================================

@dataclass(frozen=True)
class ScenarioContext:
    """Everything a scenario needs, passed explicitly instead of held globally.

    Attributes:
        client: Object-store client for the cluster under test.
        config: Resolved configuration.
        sleep: Sleep function used between poll attempts.
    """

    client: ObjectClient
    config: E2EConfig = field(default_factory=E2EConfig)
    sleep: Callable[[float], None] = time.sleep

    def poll(self, condition: Condition, tier: Tier, description: str) -> None:
        """Poll ``condition`` with this context's interval and the tier's deadline."""
        poll(
            condition,
            self.config.timeout_for(tier),
            interval=self.config.poll_interval,
            description=description,
            sleep=self.sleep,
        )

    def retry_write(self, write: Callable[[], object], tier: Tier, description: str) -> None:
        """Issue a write, retrying transient failures within the tier's deadline."""
        retry_write(
            write,
            self.config.timeout_for(tier),
            interval=self.config.poll_interval,
            description=description,
            sleep=self.sleep,
        )


# ============================================================================
# Config resolution
# ============================================================================

def resolve_config(
    namespace: str | None = None,
    kubeconfig: str | None = None,
    kube_context: str | None = None,
    poll_interval: float | None = None,
) -> E2EConfig:
    """Merge CLI overrides, environment variables, and defaults.

    Resolution priority: CLI arguments > E2E_* environment variables > defaults.

    Args:
        namespace: Namespace override, or None.
        kubeconfig: kubeconfig path override, or None.
        kube_context: kubeconfig context override, or None.
        poll_interval: Poll interval override in seconds, or None.

    Returns:
        The validated configuration.

    Raises:
        pydantic.ValidationError: If an override or env var is out of range.
    """
    overrides = {
        "namespace": namespace,
        "kubeconfig": kubeconfig,
        "kube_context": kube_context,
        "poll_interval": poll_interval,
    }
    return E2EConfig(**{key: value for key, value in overrides.items() if value is not None})


# ============================================================================
# Display
# ============================================================================

def display_config(cfg: E2EConfig) -> None:
    """Print the resolved configuration."""
    console.print(Panel.fit("Configuration", style="bold blue"))
    console.print(f"  namespace       : {cfg.namespace}")
    console.print(f"  kubeconfig      : {cfg.kubeconfig or '(default)'}")
    console.print(f"  context         : {cfg.kube_context or '(current)'}")
    console.print(f"  poll_interval   : {cfg.poll_interval:g}s")
    console.print(f"  wait tiers      : short={cfg.wait_short:g}s "
                  f"medium={cfg.wait_medium:g}s long={cfg.wait_long:g}s")
