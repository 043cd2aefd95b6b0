"""
Operator Deployment Patching

Points an operator Deployment at custom images and raises its log verbosity.
"""

import logging
import time
from typing import Callable, Optional

from kubernetes import client
from kubernetes.client.rest import ApiException

from ..core.constants import ErrorMessages, WorkloadConstants
from ..core.exceptions import OperandImageNotFoundError
from ..core.utils import handle_api_error, is_conflict
from .retry import Backoff, DEFAULT_BACKOFF, retry_on_conflict

logger = logging.getLogger(__name__)


def apply_workload_overrides(deployment: client.V1Deployment, image: Optional[str] = None,
                             verbosity: Optional[str] = None, operand_image: Optional[str] = None) -> bool:
    """
    Mutate deployment in place.

    Main containers get the image, an appended -v=<level> argument and the
    OPERATOR_IMAGE / IMAGE env values. Init containers get the image whenever
    one is passed, even an empty one. The verbosity argument is appended on
    every call, so repeated calls accumulate duplicates.

    Args:
        deployment: Deployment read from the cluster
        image: Operator image (optional)
        verbosity: Log level for the -v argument (optional)
        operand_image: Operand image stored in the IMAGE env var (optional)

    Returns:
        bool: True if an IMAGE env var was rewritten
    """
    pod_spec = deployment.spec.template.spec
    operand_updated = False

    for container in pod_spec.containers or []:
        if image:
            container.image = image
        if verbosity:
            container.args = list(container.args or [])
            container.args.append(WorkloadConstants.VERBOSITY_ARG_FORMAT.format(level=verbosity))
        for env in container.env or []:
            if image and env.name == WorkloadConstants.OPERATOR_IMAGE_ENV:
                env.value = image
            if operand_image and env.name == WorkloadConstants.OPERAND_IMAGE_ENV:
                env.value = operand_image
                operand_updated = True

    if image is not None:
        for init_container in pod_spec.init_containers or []:
            init_container.image = image

    return operand_updated


class WorkloadPatcher:
    """Read-modify-write of an operator Deployment under conflict retry"""

    def __init__(self, apps_api: client.AppsV1Api, backoff: Backoff = DEFAULT_BACKOFF,
                 sleep: Callable[[float], None] = time.sleep):
        self.apps_api = apps_api
        self.backoff = backoff
        self.sleep = sleep

    def patch(self, namespace: str, name: str, image: Optional[str] = None,
              verbosity: Optional[str] = None, operand_image: Optional[str] = None) -> bool:
        """
        Apply image, verbosity and operand image changes to a Deployment.

        Args:
            namespace: Deployment namespace
            name: Deployment name
            image: Operator image (optional)
            verbosity: Log level (optional)
            operand_image: Operand image (optional)

        Returns:
            bool: True if the operand image env var was rewritten

        Raises:
            ClusterAPIError: Update conflicts outlasted the retry policy
            OperandImageNotFoundError: operand_image was given but no container
                has an IMAGE env var; the other changes are already written
        """
        def attempt() -> bool:
            deployment = self.apps_api.read_namespaced_deployment(name, namespace)
            updated = apply_workload_overrides(deployment, image=image, verbosity=verbosity,
                                               operand_image=operand_image)
            logger.debug(f"containers: {deployment.spec.template.spec.containers}")
            self.apps_api.replace_namespaced_deployment(name, namespace, deployment)
            return updated

        try:
            operand_updated = retry_on_conflict(attempt, backoff=self.backoff, sleep=self.sleep)
        except ApiException as e:
            if not is_conflict(e):
                raise
            handle_api_error(e, context=f"deployment {namespace}/{name}")

        if operand_image and not operand_updated:
            raise OperandImageNotFoundError(
                ErrorMessages.OverrideError.OPERAND_IMAGE_NOT_FOUND.format(
                    env=WorkloadConstants.OPERAND_IMAGE_ENV, namespace=namespace, name=name),
                namespace=namespace, name=name,
            )

        return operand_updated
