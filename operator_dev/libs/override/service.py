"""
Override Service

Takes a cluster operator out of (or back into) cluster version operator
management and points its Deployment at custom images.
"""

import logging
import re
import sys
import time
from dataclasses import dataclass
from typing import Callable, Optional, TextIO

from kubernetes import client

from ..core.constants import ErrorMessages, KubernetesConstants, RetryConstants
from ..core.exceptions import ComponentNotFoundError, ValidationError
from ..core.utils import is_not_found, validate_resource_name
from .naming import ComponentIdentity, DeploymentLocator, resolve
from .overrides import OverrideEditor, OverrideEntry
from .retry import Backoff, DEFAULT_BACKOFF
from .workload import WorkloadPatcher

logger = logging.getLogger(__name__)

# ASCII digits only
VERBOSITY_PATTERN = re.compile(r"[0-9]+")


@dataclass
class OverrideRequest:
    """What the user asked for on the command line"""
    operator_name: Optional[str]
    image: Optional[str] = None
    operand_image: Optional[str] = None
    verbosity: Optional[str] = None
    managed: bool = False
    deployment: Optional[str] = None

    def validate(self) -> None:
        """
        Reject missing or contradictory input before anything touches the cluster.

        Raises:
            ValidationError: If the request cannot be carried out
        """
        if not self.operator_name:
            raise ValidationError(str(ErrorMessages.OverrideError.COMPONENT_REQUIRED))
        validate_resource_name(self.operator_name, "clusteroperator")

        if self.deployment:
            validate_resource_name(self.deployment, "deployment")

        if self.managed:
            if self.image:
                raise ValidationError(str(ErrorMessages.ValidationError.IMAGE_WITH_MANAGED))
            if self.operand_image or self.verbosity:
                raise ValidationError(str(ErrorMessages.ValidationError.OPERAND_WITH_MANAGED))
            return

        if not (self.image or self.operand_image or self.verbosity):
            raise ValidationError(str(ErrorMessages.ValidationError.NOTHING_TO_DO))

        if self.verbosity is not None and not VERBOSITY_PATTERN.fullmatch(str(self.verbosity)):
            raise ValidationError(ErrorMessages.ValidationError.INVALID_VERBOSITY.format(value=self.verbosity))


@dataclass
class OverrideResult:
    """Outcome of a successful override run"""
    identity: ComponentIdentity
    managed: bool
    override_existed: bool
    workload_patched: bool = False
    operand_updated: bool = False


class OverrideService:
    """Runs the override workflow against a cluster"""

    def __init__(self, apps_api: client.AppsV1Api, custom_api: client.CustomObjectsApi,
                 backoff: Backoff = DEFAULT_BACKOFF,
                 settle_delay: float = RetryConstants.DEFAULT_SETTLE_DELAY,
                 sleep: Callable[[float], None] = time.sleep,
                 out: Optional[TextIO] = None):
        """
        Initialize the override service

        Args:
            apps_api: Kubernetes AppsV1Api client
            custom_api: Kubernetes CustomObjectsApi client
            backoff: Conflict retry policy for both updates
            settle_delay: Seconds to wait between the override and the Deployment update
            sleep: Sleep function, injectable for tests
            out: Stream for progress messages (defaults to stdout)
        """
        self.apps_api = apps_api
        self.custom_api = custom_api
        self.settle_delay = settle_delay
        self.sleep = sleep
        self.out = out

        self.locator = DeploymentLocator(apps_api)
        self.editor = OverrideEditor(custom_api, backoff=backoff, sleep=sleep)
        self.patcher = WorkloadPatcher(apps_api, backoff=backoff, sleep=sleep)

    def print_out(self, message: str) -> None:
        print(message, file=self.out or sys.stdout)

    def check_cluster_operator(self, name: str) -> None:
        """
        Make sure name is a cluster operator known to the cluster.

        Raises:
            ComponentNotFoundError: If no such ClusterOperator exists
        """
        try:
            self.custom_api.get_cluster_custom_object(
                group=KubernetesConstants.CONFIG_API_GROUP,
                version=KubernetesConstants.CONFIG_API_VERSION,
                plural=str(KubernetesConstants.ResourceName.CLUSTER_OPERATORS),
                name=name,
            )
        except Exception as e:
            if is_not_found(e):
                raise ComponentNotFoundError(
                    ErrorMessages.OverrideError.COMPONENT_NOT_FOUND.format(name=name)) from e
            raise

    def run(self, request: OverrideRequest) -> OverrideResult:
        """
        Execute the override workflow.

        The override and the Deployment update are separate writes. If the
        second one fails the component stays unmanaged with its old images,
        and re-running the command completes it.

        Args:
            request: Validated or unvalidated request

        Returns:
            OverrideResult describing what changed
        """
        request.validate()

        identity = resolve(request.operator_name, request.deployment)
        logger.debug(f"Resolved {request.operator_name} to {identity.qualified_name}")

        self.check_cluster_operator(request.operator_name)
        identity = self.locator.confirm(identity)

        entry = OverrideEntry(namespace=identity.namespace, name=identity.deployment,
                              unmanaged=not request.managed)
        existed = self.editor.set_override(entry)
        result = OverrideResult(identity=identity, managed=request.managed, override_existed=existed)

        if request.managed:
            self.print_out(f'-> Operator "{identity.qualified_name}" now managed ...')
            return result

        self.print_out(f'-> Operator "{identity.qualified_name}" is not managed ...')

        # The cluster version operator may still revert the Deployment until it
        # has seen the override; no status field reports when that happened.
        if self.settle_delay > 0:
            logger.debug(f"Waiting {self.settle_delay}s for the override to be observed")
            self.sleep(self.settle_delay)

        result.operand_updated = self.patcher.patch(
            identity.namespace, identity.deployment,
            image=request.image, verbosity=request.verbosity, operand_image=request.operand_image,
        )
        result.workload_patched = True

        if request.image:
            self.print_out(f'-> Operator "{identity.qualified_name}" image changed to "{request.image}" ...')
        if request.operand_image:
            self.print_out(f'-> Operator "{identity.qualified_name}" operand image changed to '
                           f'"{request.operand_image}" ...')
        if request.verbosity:
            self.print_out(f'-> Operator "{identity.qualified_name}" verbosity set to "{request.verbosity}" ...')

        return result
