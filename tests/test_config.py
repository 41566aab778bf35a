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

from __future__ import annotations

import pytest
from pydantic import ValidationError

from machine_e2e.config import E2EConfig, ScenarioContext, display_config, resolve_config
from machine_e2e.constants import DEFAULT_NAMESPACE
from machine_e2e.errors import PollTimeoutError
from machine_e2e.poller import Outcome, Tier

from .conftest import FakeClient


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ("E2E_NAMESPACE", "E2E_POLL_INTERVAL", "E2E_WAIT_SHORT", "E2E_WAIT_MEDIUM",
                "E2E_WAIT_LONG", "E2E_KUBECONFIG", "E2E_KUBE_CONTEXT"):
        monkeypatch.delenv(var, raising=False)


def test_defaults():
    cfg = E2EConfig()
    assert cfg.namespace == DEFAULT_NAMESPACE
    assert (cfg.wait_short, cfg.wait_medium, cfg.wait_long) == (60, 180, 600)
    assert cfg.poll_interval == 1
    assert cfg.timeout_for(Tier.MEDIUM) == 180


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("E2E_NAMESPACE", "machines")
    monkeypatch.setenv("E2E_WAIT_LONG", "900")
    cfg = E2EConfig()
    assert cfg.namespace == "machines"
    assert cfg.timeout_for(Tier.LONG) == 900


def test_cli_overrides_beat_env(monkeypatch):
    monkeypatch.setenv("E2E_NAMESPACE", "from-env")
    monkeypatch.setenv("E2E_KUBE_CONTEXT", "env-context")
    cfg = resolve_config(namespace="from-cli", poll_interval=2.5)
    assert cfg.namespace == "from-cli"
    assert cfg.kube_context == "env-context"
    assert cfg.poll_interval == 2.5


@pytest.mark.parametrize("overrides", [
    {"poll_interval": 0},
    {"wait_short": -1},
    {"wait_short": 300, "wait_medium": 200},
    {"wait_medium": 700},
])
def test_invalid_config(overrides):
    with pytest.raises(ValidationError):
        E2EConfig(**overrides)


def test_resolve_config_validates_overrides():
    with pytest.raises(ValidationError):
        resolve_config(poll_interval=-1)


def test_context_poll_uses_tier_deadline():
    sleeps = []
    ctx = ScenarioContext(
        client=FakeClient(),
        config=E2EConfig(poll_interval=2, wait_short=4, wait_medium=8, wait_long=16),
        sleep=sleeps.append,
    )
    calls = []

    def _never():
        calls.append(1)
        return Outcome.NOT_YET

    with pytest.raises(PollTimeoutError, match="waiting for widgets"):
        ctx.poll(_never, Tier.MEDIUM, "widgets")
    assert len(calls) == 5
    assert set(sleeps) == {2}


def test_display_config():
    display_config(E2EConfig(kubeconfig="/tmp/kc"))
