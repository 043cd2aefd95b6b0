"""
ClusterVersion Overrides

Edits the spec.overrides list of the cluster's ClusterVersion object, which
tells the cluster version operator which components to leave alone.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Tuple

from kubernetes import client
from kubernetes.client.rest import ApiException

from ..core.constants import KubernetesConstants
from ..core.utils import handle_api_error, is_conflict
from .retry import Backoff, DEFAULT_BACKOFF, retry_on_conflict

logger = logging.getLogger(__name__)

KEY_FIELDS = ("group", "kind", "namespace", "name")


@dataclass(frozen=True)
class OverrideEntry:
    """A single spec.overrides record"""
    namespace: str
    name: str
    unmanaged: bool
    group: str = KubernetesConstants.OVERRIDE_GROUP
    kind: str = KubernetesConstants.OVERRIDE_KIND

    @property
    def key(self) -> Tuple[str, str, str, str]:
        return (self.group, self.kind, self.namespace, self.name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "group": self.group,
            "kind": self.kind,
            "name": self.name,
            "namespace": self.namespace,
            "unmanaged": self.unmanaged,
        }


def entry_key(item: Any):
    """Identity key of a raw override item, or None if the item is malformed"""
    if not isinstance(item, dict):
        return None
    values = tuple(item.get(field) for field in KEY_FIELDS)
    if not all(isinstance(value, str) for value in values):
        return None
    return values


def upsert_override(overrides: List[Any], entry: OverrideEntry) -> Tuple[List[Any], bool]:
    """
    Insert entry or update the unmanaged flag of the item sharing its key.

    Later items with the same key are dropped so the result holds at most one
    item per key. Malformed items are carried over untouched. The input list
    is not modified.

    Args:
        overrides: Current spec.overrides items
        entry: Desired override

    Returns:
        Tuple of (new overrides list, whether an existing item was updated)
    """
    result = []
    found = False

    for item in overrides:
        if entry_key(item) != entry.key:
            result.append(item)
        elif not found:
            updated = dict(item)
            updated["unmanaged"] = entry.unmanaged
            result.append(updated)
            found = True
        else:
            logger.warning(f"Dropping duplicate override for {entry.namespace}/{entry.name}")

    if not found:
        result.append(entry.to_dict())

    return result, found


class OverrideEditor:
    """Read-modify-write of ClusterVersion overrides under conflict retry"""

    def __init__(self, custom_api: client.CustomObjectsApi, backoff: Backoff = DEFAULT_BACKOFF,
                 sleep: Callable[[float], None] = time.sleep):
        self.custom_api = custom_api
        self.backoff = backoff
        self.sleep = sleep

    def _get_cluster_version(self) -> Dict[str, Any]:
        return self.custom_api.get_cluster_custom_object(
            group=KubernetesConstants.CONFIG_API_GROUP,
            version=KubernetesConstants.CONFIG_API_VERSION,
            plural=str(KubernetesConstants.ResourceName.CLUSTER_VERSIONS),
            name=KubernetesConstants.CLUSTER_VERSION_NAME,
        )

    def _replace_cluster_version(self, body: Dict[str, Any]) -> Dict[str, Any]:
        # body still carries metadata.resourceVersion from the read, so a
        # concurrent write turns this into a 409
        return self.custom_api.replace_cluster_custom_object(
            group=KubernetesConstants.CONFIG_API_GROUP,
            version=KubernetesConstants.CONFIG_API_VERSION,
            plural=str(KubernetesConstants.ResourceName.CLUSTER_VERSIONS),
            name=KubernetesConstants.CLUSTER_VERSION_NAME,
            body=body,
        )

    def set_override(self, entry: OverrideEntry) -> bool:
        """
        Record entry in the ClusterVersion overrides.

        Args:
            entry: Desired override

        Returns:
            bool: True if an existing item was updated, False if one was appended

        Raises:
            ClusterAPIError: Update conflicts outlasted the retry policy
        """
        def attempt() -> bool:
            cluster_version = self._get_cluster_version()
            spec = cluster_version.get("spec") or {}
            cluster_version["spec"] = spec

            overrides, found = upsert_override(spec.get("overrides") or [], entry)
            spec["overrides"] = overrides

            logger.debug(f"Writing {len(overrides)} overrides at resourceVersion "
                         f"{cluster_version.get('metadata', {}).get('resourceVersion')}")
            self._replace_cluster_version(cluster_version)
            return found

        try:
            found = retry_on_conflict(attempt, backoff=self.backoff, sleep=self.sleep)
        except ApiException as e:
            if not is_conflict(e):
                raise
            handle_api_error(e, context=f"{str(KubernetesConstants.ResourceName.CLUSTER_VERSIONS)}/"
                                        f"{KubernetesConstants.CLUSTER_VERSION_NAME}")

        state = "unmanaged" if entry.unmanaged else "managed"
        action = "Updated" if found else "Added"
        logger.info(f"{action} {state} override for {entry.namespace}/{entry.name}")
        return found
