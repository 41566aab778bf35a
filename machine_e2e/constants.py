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

"""Resource kinds, well-known object names, and timing defaults."""

from __future__ import annotations

# -- Namespaces --
DEFAULT_NAMESPACE = "openshift-cluster-api"

# -- Resource kinds (kubectl resource.group form) --
KIND_MACHINE = "machines.cluster.k8s.io"
KIND_CLUSTER = "clusters.cluster.k8s.io"
KIND_NODE = "nodes"
KIND_DEPLOYMENT = "deployments.apps"
KIND_CLUSTER_OPERATOR = "clusteroperators.config.openshift.io"

# Manifest ``kind`` -> kubectl resource kind
RESOURCE_BY_KIND = {
    "Machine": KIND_MACHINE,
    "Cluster": KIND_CLUSTER,
    "Node": KIND_NODE,
    "Deployment": KIND_DEPLOYMENT,
    "ClusterOperator": KIND_CLUSTER_OPERATOR,
}

# -- Well-known objects --
DEFAULT_OPERATOR_DEPLOYMENT = "machine-api-operator"
DEFAULT_CONTROLLERS_DEPLOYMENT = "clusterapi-manager-controllers"
DEFAULT_CLUSTER_OPERATOR = "machine-api-operator"

# -- Labels & annotations --
LABEL_MACHINE_ROLE = "sigs.k8s.io/cluster-api-machine-role"
DEFAULT_WORKER_ROLE = "worker"
DEFAULT_MACHINE_ANNOTATION_KEY = "machine"

# -- Operator status --
CONDITION_AVAILABLE = "Available"
CONDITION_TRUE = "True"

# -- Taints --
TAINT_EFFECT_NO_SCHEDULE = "NoSchedule"
NODE_TAINT_KEY = "not-from-machine"
MACHINE_TAINT_KEY = "from-machine"

# -- Timing (seconds) --
DEFAULT_POLL_INTERVAL_SECONDS = 1.0
DEFAULT_WAIT_SHORT_SECONDS = 60.0
DEFAULT_WAIT_MEDIUM_SECONDS = 180.0
DEFAULT_WAIT_LONG_SECONDS = 600.0
DEFAULT_KUBECTL_TIMEOUT_SECONDS = 30
