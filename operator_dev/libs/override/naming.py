"""
Operator Naming

Maps a cluster operator name (as listed by `oc get clusteroperators`) to the
namespace and Deployment that run it.
"""

import logging
from dataclasses import dataclass, replace
from typing import Optional

from kubernetes import client

from ..core.constants import ErrorMessages, KubernetesConstants
from ..core.exceptions import WorkloadNotFoundError
from ..core.utils import is_not_found

logger = logging.getLogger(__name__)


# Operators whose namespace does not follow openshift-<name>-operator.
# Looked up by the given name first, then by the name without "openshift-".
NAMESPACE_EXCEPTIONS = {
    "insights": "openshift-insights",
    "openshift-apiserver": "openshift-apiserver-operator",
    "image-registry": "openshift-image-registry",
    "monitoring": "openshift-monitoring",
    "marketplace": "openshift-marketplace",
    "machine-api": "openshift-machine-api",
    "operator-lifecycle-manager": "openshift-operator-lifecycle-manager",
    "node-tuning": "openshift-cluster-node-tuning-operator",
    "storage": "openshift-cluster-storage-operator",
    "openshift-samples": "openshift-cluster-samples-operator",
}


@dataclass(frozen=True)
class ComponentIdentity:
    """Where a cluster operator's Deployment lives"""
    name: str
    namespace: str
    deployment: str
    explicit_deployment: bool = False

    @property
    def qualified_name(self) -> str:
        return f"{self.namespace}/{self.deployment}"


def resolve_namespace(operator_name: str) -> str:
    """Namespace of the operator Deployment for a cluster operator name"""
    stripped = operator_name
    if stripped.startswith(KubernetesConstants.OPENSHIFT_PREFIX):
        stripped = stripped[len(KubernetesConstants.OPENSHIFT_PREFIX):]

    for candidate in (operator_name, stripped):
        if candidate in NAMESPACE_EXCEPTIONS:
            return NAMESPACE_EXCEPTIONS[candidate]

    return KubernetesConstants.OPENSHIFT_PREFIX + stripped + KubernetesConstants.OPERATOR_SUFFIX


def resolve_deployment_name(operator_name: str, explicit: Optional[str] = None) -> str:
    """Deployment name, preferring an explicit name over the naming convention"""
    if explicit:
        return explicit
    return operator_name + KubernetesConstants.OPERATOR_SUFFIX


def resolve(operator_name: str, explicit_deployment: Optional[str] = None) -> ComponentIdentity:
    """Derive the full identity of a cluster operator without touching the cluster"""
    return ComponentIdentity(
        name=operator_name,
        namespace=resolve_namespace(operator_name),
        deployment=resolve_deployment_name(operator_name, explicit_deployment),
        explicit_deployment=bool(explicit_deployment),
    )


class DeploymentLocator:
    """Confirms a derived Deployment exists, falling back to the only one in its namespace"""

    def __init__(self, apps_api: client.AppsV1Api):
        self.apps_api = apps_api

    def confirm(self, identity: ComponentIdentity) -> ComponentIdentity:
        """
        Check the Deployment named by identity exists.

        When a derived name is missing and the namespace holds exactly one
        Deployment, that one is adopted instead.

        Args:
            identity: Identity produced by resolve()

        Returns:
            The identity, possibly with a different deployment name

        Raises:
            WorkloadNotFoundError: No unambiguous Deployment could be found
            ApiException: Any API failure other than not-found
        """
        try:
            self.apps_api.read_namespaced_deployment(identity.deployment, identity.namespace)
            return identity
        except Exception as e:
            if not is_not_found(e):
                raise

        if identity.explicit_deployment:
            raise self._not_found(identity, candidates=0)

        logger.info(f"Deployment {identity.qualified_name} not found, looking for a single deployment "
                    f"in {identity.namespace}")
        deployments = self.apps_api.list_namespaced_deployment(identity.namespace)
        names = [d.metadata.name for d in (deployments.items or [])]

        if len(names) != 1:
            raise self._not_found(identity, candidates=len(names))

        logger.info(f"Using deployment {identity.namespace}/{names[0]}")
        return replace(identity, deployment=names[0])

    @staticmethod
    def _not_found(identity: ComponentIdentity, candidates: int) -> WorkloadNotFoundError:
        message = ErrorMessages.OverrideError.WORKLOAD_NOT_FOUND.format(
            name=identity.deployment, namespace=identity.namespace, candidates=candidates
        )
        return WorkloadNotFoundError(message, namespace=identity.namespace,
                                     name=identity.deployment, candidates=candidates)
