"""
Override Libraries

Cluster version operator overrides and operator Deployment patching.
"""

from .naming import ComponentIdentity, DeploymentLocator, resolve, resolve_namespace, resolve_deployment_name
from .overrides import OverrideEditor, OverrideEntry, upsert_override
from .retry import Backoff, DEFAULT_BACKOFF, retry_on_conflict
from .service import OverrideRequest, OverrideResult, OverrideService
from .workload import WorkloadPatcher, apply_workload_overrides

__all__ = [
    'ComponentIdentity',
    'DeploymentLocator',
    'resolve',
    'resolve_namespace',
    'resolve_deployment_name',
    'OverrideEditor',
    'OverrideEntry',
    'upsert_override',
    'Backoff',
    'DEFAULT_BACKOFF',
    'retry_on_conflict',
    'OverrideRequest',
    'OverrideResult',
    'OverrideService',
    'WorkloadPatcher',
    'apply_workload_overrides'
]
