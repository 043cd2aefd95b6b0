#!/usr/bin/env python3
"""
Shared Test Constants

Common constants and fake cluster objects used across all test suites.
"""

import copy
from typing import Dict, List, Optional
from unittest.mock import Mock

from kubernetes import client
from kubernetes.client.rest import ApiException


class CommonTestConstants:
    """Constants shared across all test suites"""

    OPERATOR_NAME = "kube-apiserver"
    OPERATOR_NAMESPACE = "openshift-kube-apiserver-operator"
    OPERATOR_DEPLOYMENT = "kube-apiserver-operator"

    CUSTOM_IMAGE = "quay.io/example/kube-apiserver-operator:debug"
    OPERAND_IMAGE = "quay.io/example/kube-apiserver:debug"
    ORIGINAL_IMAGE = "quay.io/openshift-release-dev/ocp-v4.0-art-dev@sha256:1111"
    ORIGINAL_OPERAND_IMAGE = "quay.io/openshift-release-dev/ocp-v4.0-art-dev@sha256:2222"

    # Overrides some other tool (or a previous run) already recorded
    UNRELATED_OVERRIDES = [
        {"group": "apps/v1", "kind": "Deployment", "name": "etcd-operator",
         "namespace": "openshift-etcd-operator", "unmanaged": True},
        {"group": "apps/v1", "kind": "Deployment", "name": "console-operator",
         "namespace": "openshift-console-operator", "unmanaged": False},
    ]


def api_exception(status: int, reason: str = None) -> ApiException:
    """Build an ApiException as raised by the kubernetes client"""
    return ApiException(status=status, reason=reason or {404: "Not Found", 409: "Conflict"}.get(status, "Error"))


def make_container(name: str, image: str, args: Optional[List[str]] = None,
                   env: Optional[Dict[str, str]] = None) -> client.V1Container:
    env_vars = [client.V1EnvVar(name=key, value=value) for key, value in (env or {}).items()]
    return client.V1Container(name=name, image=image, args=args, env=env_vars or None)


def make_deployment(name: str = CommonTestConstants.OPERATOR_DEPLOYMENT,
                    namespace: str = CommonTestConstants.OPERATOR_NAMESPACE,
                    containers: Optional[List[client.V1Container]] = None,
                    init_containers: Optional[List[client.V1Container]] = None,
                    resource_version: str = "100") -> client.V1Deployment:
    """Build an operator Deployment with one operator container by default"""
    if containers is None:
        containers = [make_container(
            "operator", CommonTestConstants.ORIGINAL_IMAGE,
            args=["--config=/var/run/configmaps/config/config.yaml"],
            env={"OPERATOR_IMAGE": CommonTestConstants.ORIGINAL_IMAGE,
                 "IMAGE": CommonTestConstants.ORIGINAL_OPERAND_IMAGE},
        )]
    labels = {"app": name}
    return client.V1Deployment(
        api_version="apps/v1",
        kind="Deployment",
        metadata=client.V1ObjectMeta(name=name, namespace=namespace, resource_version=resource_version),
        spec=client.V1DeploymentSpec(
            selector=client.V1LabelSelector(match_labels=labels),
            template=client.V1PodTemplateSpec(
                metadata=client.V1ObjectMeta(labels=labels),
                spec=client.V1PodSpec(containers=containers, init_containers=init_containers),
            ),
        ),
    )


def make_cluster_version(overrides: Optional[list] = None, resource_version: str = "1") -> dict:
    body = {
        "apiVersion": "config.openshift.io/v1",
        "kind": "ClusterVersion",
        "metadata": {"name": "version", "resourceVersion": resource_version},
        "spec": {"channel": "stable-4.14", "clusterID": "00000000-0000-0000-0000-000000000000"},
    }
    if overrides is not None:
        body["spec"]["overrides"] = copy.deepcopy(overrides)
    return body


class FakeCluster:
    """
    In-memory stand-in for the ClusterVersion, ClusterOperator and Deployment APIs.

    Writes are checked against the stored resourceVersion like the API server
    does. conflicts["clusterversion"] / conflicts["deployment"] make the next
    N writes fail as if another controller had written first.
    """

    def __init__(self, cluster_operators=(CommonTestConstants.OPERATOR_NAME,),
                 deployments: Optional[List[client.V1Deployment]] = None,
                 overrides: Optional[list] = None):
        self.cluster_operators = set(cluster_operators)
        self.cluster_version = make_cluster_version(overrides)
        self.deployments = {
            (d.metadata.namespace, d.metadata.name): d
            for d in (deployments if deployments is not None else [make_deployment()])
        }
        self.conflicts = {"clusterversion": 0, "deployment": 0}
        self.concurrent_override = None

        self.custom_api = Mock(spec=client.CustomObjectsApi)
        self.custom_api.get_cluster_custom_object.side_effect = self._get_custom
        self.custom_api.replace_cluster_custom_object.side_effect = self._replace_custom

        self.apps_api = Mock(spec=client.AppsV1Api)
        self.apps_api.read_namespaced_deployment.side_effect = self._read_deployment
        self.apps_api.list_namespaced_deployment.side_effect = self._list_deployments
        self.apps_api.replace_namespaced_deployment.side_effect = self._replace_deployment

    @staticmethod
    def _bump(resource_version: str) -> str:
        return str(int(resource_version) + 1)

    def _get_custom(self, group, version, plural, name):
        if plural == "clusteroperators":
            if name not in self.cluster_operators:
                raise api_exception(404)
            return {"metadata": {"name": name}}
        if plural == "clusterversions" and name == "version":
            return copy.deepcopy(self.cluster_version)
        raise api_exception(404)

    def _replace_custom(self, group, version, plural, name, body):
        stored = self.cluster_version
        if self.conflicts["clusterversion"] > 0:
            self.conflicts["clusterversion"] -= 1
            # Another writer got in first
            stored["metadata"]["resourceVersion"] = self._bump(stored["metadata"]["resourceVersion"])
            if self.concurrent_override:
                stored["spec"].setdefault("overrides", []).append(copy.deepcopy(self.concurrent_override))
        if body["metadata"]["resourceVersion"] != stored["metadata"]["resourceVersion"]:
            raise api_exception(409)
        updated = copy.deepcopy(body)
        updated["metadata"]["resourceVersion"] = self._bump(stored["metadata"]["resourceVersion"])
        self.cluster_version = updated
        return copy.deepcopy(updated)

    def _read_deployment(self, name, namespace):
        if (namespace, name) not in self.deployments:
            raise api_exception(404)
        return copy.deepcopy(self.deployments[(namespace, name)])

    def _list_deployments(self, namespace):
        items = [copy.deepcopy(d) for (ns, _), d in self.deployments.items() if ns == namespace]
        return client.V1DeploymentList(items=items)

    def _replace_deployment(self, name, namespace, body):
        stored = self.deployments[(namespace, name)]
        if self.conflicts["deployment"] > 0:
            self.conflicts["deployment"] -= 1
            stored.metadata.resource_version = self._bump(stored.metadata.resource_version)
        if body.metadata.resource_version != stored.metadata.resource_version:
            raise api_exception(409)
        updated = copy.deepcopy(body)
        updated.metadata.resource_version = self._bump(stored.metadata.resource_version)
        self.deployments[(namespace, name)] = updated
        return copy.deepcopy(updated)

    def deployment(self, name: str = CommonTestConstants.OPERATOR_DEPLOYMENT,
                   namespace: str = CommonTestConstants.OPERATOR_NAMESPACE) -> client.V1Deployment:
        return self.deployments[(namespace, name)]

    @property
    def overrides(self) -> list:
        return self.cluster_version["spec"].get("overrides", [])


def no_sleep(_seconds: float) -> None:
    """Sleep replacement for retry and settle delays"""
